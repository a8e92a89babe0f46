"""Solve the pose that joins a dragged piece's port onto a placed port."""

from __future__ import annotations

from dataclasses import dataclass

from rail_layout.geometry_core import (
    Point,
    direction_to_angle,
    opposite_direction,
    rotate_about_origin,
    rotate_direction,
    subtract,
)
from rail_layout.model.pieces import ROTATION_STEP, PieceDefinition, PlacedPiece


class PortNotFoundError(LookupError):
    """Raised when a port id does not exist on the piece definition it names."""


@dataclass(frozen=True)
class SnapResult:
    position: Point
    rotation: int


def compute_snap_transform(
    dragged_definition: PieceDefinition,
    dragged_port_id: str,
    target_piece: PlacedPiece,
    target_port_id: str,
    pre_rotation: int = 0,
) -> SnapResult:
    """Return the pose that puts ``dragged_port_id`` onto the target port.

    ``pre_rotation`` is the rotation the user already applied to the dragged
    piece. The returned rotation is that plus whatever extra whole 45 degree
    steps make the two ports face each other; the returned position makes the
    ports coincide exactly.
    """

    dragged_port = dragged_definition.find_port(dragged_port_id)
    if dragged_port is None:
        raise PortNotFoundError(
            f"Port not found: '{dragged_port_id}' on {dragged_definition.kind} piece"
        )
    target_port = target_piece.definition.find_port(target_port_id)
    if target_port is None:
        raise PortNotFoundError(
            f"Port not found: '{target_port_id}' on piece {target_piece.id}"
        )

    target_world = target_piece.port_world_position(target_port)
    target_direction = rotate_direction(
        target_port.direction, target_piece.rotation / ROTATION_STEP
    )
    required_direction = opposite_direction(target_direction)
    current_direction = rotate_direction(dragged_port.direction, pre_rotation / ROTATION_STEP)

    diff = direction_to_angle(required_direction) - direction_to_angle(current_direction)
    extra_rotation = (round(diff / ROTATION_STEP) * ROTATION_STEP + 360) % 360
    final_rotation = int(pre_rotation + extra_rotation) % 360

    offset = rotate_about_origin(dragged_port.position, final_rotation)
    return SnapResult(position=subtract(target_world, offset), rotation=final_rotation)
