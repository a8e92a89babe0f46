"""Static catalog of track piece definitions.

Port conventions: every port faces *into* its piece, so the entry port ``A``
of a straight at the top edge faces ``S``. Two ports join when they sit at
the same world position facing opposite directions.

Curves turn right on screen. The entry sits at the local origin facing ``S``
and the arc center lies at ``(radius, 0)``.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping

import numpy as np

from rail_layout.core.config_store import LayoutConfig
from rail_layout.geometry_core import Direction, Point, rotate_direction
from rail_layout.model.pieces import PieceDefinition, Port, Ring


def _ring(points) -> Ring:
    return tuple((float(x), float(y)) for x, y in points)


def rectangle_outline(half_width: float, y_min: float, y_max: float) -> Ring:
    return _ring(
        [
            (-half_width, y_min),
            (half_width, y_min),
            (half_width, y_max),
            (-half_width, y_max),
        ]
    )


def curve_exit(radius: float, angle_deg: float) -> Point:
    """Local position of a curve's exit port, measured from its entry."""

    theta = math.radians(angle_deg)
    return (radius - radius * math.cos(theta), radius * math.sin(theta))


def arc_band_outline(
    radius: float, angle_deg: float, half_width: float, segments: int
) -> Ring:
    """Sample the ring segment covering a curve of ``radius`` and ``angle_deg``.

    The outer edge is walked from entry to exit, then the inner edge back,
    giving one closed polygon.
    """

    theta = np.linspace(0.0, math.radians(angle_deg), segments + 1)
    outer = radius + half_width
    inner = radius - half_width

    outer_x = radius - outer * np.cos(theta)
    outer_y = outer * np.sin(theta)
    inner_x = radius - inner * np.cos(theta[::-1])
    inner_y = inner * np.sin(theta[::-1])

    xs = np.concatenate([outer_x, inner_x])
    ys = np.concatenate([outer_y, inner_y])
    return _ring(zip(xs, ys))


def _straight(kind: str, half_length: float, half_width: float) -> PieceDefinition:
    return PieceDefinition(
        kind=kind,
        ports=(
            Port("A", (0.0, -half_length), Direction.S),
            Port("B", (0.0, half_length), Direction.N),
        ),
        outlines=(rectangle_outline(half_width, -half_length, half_length),),
    )


@dataclass(frozen=True)
class PieceCatalog(Mapping[str, PieceDefinition]):
    short_straight: PieceDefinition
    long_straight: PieceDefinition
    curve45: PieceDefinition
    turnout: PieceDefinition
    bridge: PieceDefinition

    def _entries(self) -> Dict[str, PieceDefinition]:
        return {
            "short_straight": self.short_straight,
            "long_straight": self.long_straight,
            "curve45": self.curve45,
            "turnout": self.turnout,
            "bridge": self.bridge,
        }

    def __getitem__(self, name: str) -> PieceDefinition:
        return self._entries()[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries())

    def __len__(self) -> int:
        return len(self._entries())


def build_catalog(config: LayoutConfig | None = None) -> PieceCatalog:
    cfg = config or LayoutConfig()
    half_width = cfg.track_width / 2
    length = cfg.straight_length

    exit_direction = rotate_direction(Direction.S, 3)
    exit_point = curve_exit(cfg.curve_radius, cfg.curve_angle)
    arc = arc_band_outline(cfg.curve_radius, cfg.curve_angle, half_width, cfg.outline_segments)

    curve45 = PieceDefinition(
        kind="curve",
        ports=(
            Port("A", (0.0, 0.0), Direction.S),
            Port("B", exit_point, exit_direction),
        ),
        outlines=(arc,),
    )

    turnout = PieceDefinition(
        kind="turnout",
        ports=(
            Port("A", (0.0, 0.0), Direction.S),
            Port("B", (0.0, length * 2), Direction.N),
            Port("C", exit_point, exit_direction),
        ),
        outlines=(rectangle_outline(half_width, 0.0, length * 2), arc),
    )

    return PieceCatalog(
        short_straight=_straight("straight", length / 2, half_width),
        long_straight=_straight("straight", length, half_width),
        curve45=curve45,
        turnout=turnout,
        bridge=_straight("bridge", length * cfg.bridge_span_multiplier / 2, half_width),
    )


DEFAULT_CATALOG = build_catalog()

short_straight = DEFAULT_CATALOG.short_straight
long_straight = DEFAULT_CATALOG.long_straight
curve45 = DEFAULT_CATALOG.curve45
turnout = DEFAULT_CATALOG.turnout
bridge = DEFAULT_CATALOG.bridge
