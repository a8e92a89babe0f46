"""Eight-way compass directions used for port facing.

Angles follow the Y-down drawing convention: ``E`` is 0 degrees and angles
increase clockwise on screen, so ``S`` is 90 and ``N`` is 270.
"""
from __future__ import annotations

from enum import Enum
import math


class Direction(str, Enum):
    N = "N"
    NE = "NE"
    E = "E"
    SE = "SE"
    S = "S"
    SW = "SW"
    W = "W"
    NW = "NW"

    def __str__(self) -> str:
        return self.value


STEP_DEGREES = 45

# Ordered by angle, starting at E = 0.
_BY_ANGLE = (
    Direction.E,
    Direction.SE,
    Direction.S,
    Direction.SW,
    Direction.W,
    Direction.NW,
    Direction.N,
    Direction.NE,
)

_ANGLES = {direction: index * STEP_DEGREES for index, direction in enumerate(_BY_ANGLE)}

CARDINALS = frozenset({Direction.N, Direction.E, Direction.S, Direction.W})
INTERCARDINALS = frozenset({Direction.NE, Direction.SE, Direction.SW, Direction.NW})


def direction_to_angle(direction: Direction) -> int:
    return _ANGLES[Direction(direction)]


def angle_to_direction(angle: float) -> Direction:
    """Return the compass direction nearest to ``angle`` degrees.

    Any real angle is accepted; it is normalized into ``[0, 360)`` first.
    """

    normalized = angle % 360
    # Halves round up, so 22.5 resolves to SE.
    index = math.floor(normalized / STEP_DEGREES + 0.5) % len(_BY_ANGLE)
    return _BY_ANGLE[index]


def opposite_direction(direction: Direction) -> Direction:
    return angle_to_direction(direction_to_angle(direction) + 180)


def rotate_direction(direction: Direction, steps: float) -> Direction:
    """Rotate ``direction`` by ``steps`` 45 degree increments (clockwise on screen)."""

    return angle_to_direction(direction_to_angle(direction) + steps * STEP_DEGREES)


def is_cardinal(direction: Direction) -> bool:
    return Direction(direction) in CARDINALS


def is_intercardinal(direction: Direction) -> bool:
    return Direction(direction) in INTERCARDINALS
