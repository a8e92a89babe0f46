from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple

from rail_layout.geometry_core import (
    Direction,
    Point,
    add,
    rotate_about_origin,
    rotate_direction,
)

ROTATION_STEP = 45

Ring = Tuple[Point, ...]


@dataclass(frozen=True)
class Port:
    id: str
    position: Point
    direction: Direction


# INVARIANT:
# Piece definitions are built once by the catalog and shared by reference
# between every placed instance. Nothing may mutate them after creation.
@dataclass(frozen=True)
class PieceDefinition:
    kind: str
    ports: Tuple[Port, ...]
    # Closed polygon rings in local coordinates; only renderers read these.
    outlines: Tuple[Ring, ...] = ()

    def find_port(self, port_id: str) -> Port | None:
        for port in self.ports:
            if port.id == port_id:
                return port
        return None

    @property
    def port_ids(self) -> tuple[str, ...]:
        return tuple(port.id for port in self.ports)


@dataclass(eq=False)
class PlacedPiece:
    id: str
    definition: PieceDefinition
    position: Point = (0.0, 0.0)
    rotation: int = 0
    # local port id -> "<remotePieceId>:<remotePortId>"
    connections: Dict[str, str] = field(default_factory=dict)

    @property
    def rotation_steps(self) -> int:
        return round(self.rotation / ROTATION_STEP)

    def is_port_open(self, port_id: str) -> bool:
        return port_id not in self.connections

    def open_ports(self) -> Iterator[Port]:
        for port in self.definition.ports:
            if port.id not in self.connections:
                yield port

    def port_world_position(self, port: Port) -> Point:
        return add(self.position, rotate_about_origin(port.position, self.rotation))

    def port_world_direction(self, port: Port) -> Direction:
        return rotate_direction(port.direction, self.rotation_steps)


def normalize_rotation(rotation: float) -> int:
    """Return ``rotation`` wrapped into ``[0, 360)``.

    Raises ``ValueError`` when the angle is not a whole number of 45 degree
    steps.
    """

    steps = rotation / ROTATION_STEP
    if abs(steps - round(steps)) > 1e-9:
        raise ValueError(f"Rotation {rotation} is not a multiple of {ROTATION_STEP} degrees.")
    return (round(steps) * ROTATION_STEP) % 360


def format_connection_ref(piece_id: str, port_id: str) -> str:
    return f"{piece_id}:{port_id}"


def parse_connection_ref(ref: str) -> tuple[str, str]:
    """Split a ``"<pieceId>:<portId>"`` reference.

    The split happens on the last colon so piece ids may themselves contain
    colons; port ids never do.
    """

    piece_id, _, port_id = ref.rpartition(":")
    return piece_id, port_id
