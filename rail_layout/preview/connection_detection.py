"""Port matching for snapping and loop closure.

Two predicates decide whether ports can join and they are always applied
separately: the world directions must be exact opposites (rotations are
quantized, so there is no angular slack) and the world positions must be
within a distance threshold.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from rail_layout.core.config_store import current_config
from rail_layout.geometry_core import Direction, Point, distance, opposite_direction
from rail_layout.model.pieces import PlacedPiece, Port


@dataclass(frozen=True)
class SnapTarget:
    piece_id: str
    port: Port
    distance: float


@dataclass(frozen=True)
class CoincidentMatch:
    new_piece_port_id: str
    existing_piece_id: str
    existing_port_id: str


def find_snap_target(
    dragged_position: Point,
    dragged_direction: Direction,
    pieces: Iterable[PlacedPiece],
    dragged_piece_id: str | None,
    snap_radius: float | None = None,
) -> Optional[SnapTarget]:
    """Return the nearest open port that the dragged port could join.

    Only ports on pieces other than ``dragged_piece_id`` whose world direction
    is the exact opposite of ``dragged_direction`` and which lie within
    ``snap_radius`` qualify. Equidistant candidates resolve to the first one
    found.
    """

    if snap_radius is None:
        snap_radius = current_config().snap_radius

    wanted = opposite_direction(dragged_direction)
    best: Optional[SnapTarget] = None

    for piece in pieces:
        if piece.id == dragged_piece_id:
            continue

        for port in piece.open_ports():
            if piece.port_world_direction(port) != wanted:
                continue

            d = distance(dragged_position, piece.port_world_position(port))
            if d > snap_radius:
                continue
            if best is None or d < best.distance:
                best = SnapTarget(piece_id=piece.id, port=port, distance=d)

    return best


def find_coincident_connections(
    piece: PlacedPiece,
    pieces: Iterable[PlacedPiece],
    tolerance: float | None = None,
) -> List[CoincidentMatch]:
    """Return every open port pair joining ``piece`` to the rest of the layout.

    More than one pair can match at once, for example when the last curve of
    a loop lands on the first one or a turnout branch rejoins the main line.
    """

    if tolerance is None:
        tolerance = current_config().coincidence_tolerance

    others = [other for other in pieces if other is not piece and other.id != piece.id]
    matches: List[CoincidentMatch] = []

    for port in piece.open_ports():
        position = piece.port_world_position(port)
        wanted = opposite_direction(piece.port_world_direction(port))

        for other in others:
            for other_port in other.open_ports():
                if other.port_world_direction(other_port) != wanted:
                    continue
                if distance(position, other.port_world_position(other_port)) > tolerance:
                    continue
                matches.append(
                    CoincidentMatch(
                        new_piece_port_id=port.id,
                        existing_piece_id=other.id,
                        existing_port_id=other_port.id,
                    )
                )

    return matches
