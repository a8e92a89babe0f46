from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from rail_layout.geometry.snap import compute_snap_transform
from rail_layout.geometry_core import Direction, Point, add, rotate_about_origin, rotate_direction
from rail_layout.model.connections import disconnect_piece
from rail_layout.model.pieces import ROTATION_STEP, PieceDefinition, PlacedPiece, Port
from rail_layout.preview.connection_detection import SnapTarget, find_snap_target


@dataclass(frozen=True)
class MoveDragOrigin:
    """Pose and connections of a piece before a move drag picked it up."""

    id: str
    position: Point
    rotation: int
    connections: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SnapTargetRef:
    piece_id: str
    port_id: str


class DragSession:
    """State of the piece currently being dragged, new or moved.

    The cursor position is where the dragged piece's origin would land. Port
    selection decides which of the dragged piece's ports looks for a snap.
    """

    def __init__(self) -> None:
        self.is_active = False
        self.active_definition: PieceDefinition | None = None
        self.cursor_position: Point = (0.0, 0.0)
        self.pre_rotation = 0
        self.selected_port_index: int | None = None
        self._reset_snap()
        self._reset_move()

    def _reset_snap(self) -> None:
        self.snap_target: SnapTargetRef | None = None
        self.snapped_position: Point | None = None
        self.snapped_rotation = 0
        self.snapped_port_id: str | None = None

    def _reset_move(self) -> None:
        self.source_piece_id: str | None = None
        self.original_position: Point | None = None
        self.original_rotation = 0
        self.original_connections: Dict[str, str] | None = None

    @property
    def is_move_drag(self) -> bool:
        return self.source_piece_id is not None

    @property
    def selected_port(self) -> Port | None:
        if self.active_definition is None or self.selected_port_index is None:
            return None
        ports = self.active_definition.ports
        if not ports:
            return None
        return ports[self.selected_port_index % len(ports)]

    def start_drag(self, definition: PieceDefinition) -> None:
        self.is_active = True
        self.active_definition = definition
        self.pre_rotation = 0
        self.selected_port_index = 0
        self._reset_snap()

    def start_move_drag(self, piece: PlacedPiece, all_pieces: Iterable[PlacedPiece]) -> None:
        """Pick up a placed piece, detaching it from its neighbours."""

        self.source_piece_id = piece.id
        self.original_position = piece.position
        self.original_rotation = piece.rotation
        self.original_connections = dict(piece.connections)

        disconnect_piece(piece, all_pieces)

        self.is_active = True
        self.active_definition = piece.definition
        self.pre_rotation = piece.rotation
        self.selected_port_index = 0
        self._reset_snap()

    def update_cursor_position(self, position: Point) -> None:
        self.cursor_position = position

    def rotate_preview(self, steps: int) -> None:
        self.pre_rotation = (self.pre_rotation + steps * ROTATION_STEP) % 360

    def cycle_port(self) -> None:
        if self.active_definition is None:
            return
        count = len(self.active_definition.ports)
        if count == 0:
            return
        current = -1 if self.selected_port_index is None else self.selected_port_index
        self.selected_port_index = (current + 1) % count

    def set_snap_target(self, piece_id: str | None, port_id: str | None) -> None:
        if piece_id and port_id:
            self.snap_target = SnapTargetRef(piece_id, port_id)
        else:
            self._reset_snap()

    def set_snapped_transform(self, position: Point, rotation: int, dragged_port_id: str) -> None:
        self.snapped_position = position
        self.snapped_rotation = rotation
        self.snapped_port_id = dragged_port_id

    def dragged_port_pose(self) -> Optional[tuple[Point, Direction]]:
        """World position and direction of the selected port at the cursor."""

        port = self.selected_port
        if port is None:
            return None
        position = add(self.cursor_position, rotate_about_origin(port.position, self.pre_rotation))
        direction = rotate_direction(port.direction, self.pre_rotation / ROTATION_STEP)
        return position, direction

    def track_cursor(
        self,
        position: Point,
        pieces: Iterable[PlacedPiece],
        snap_radius: float | None = None,
    ) -> Optional[SnapTarget]:
        """Move the cursor and refresh the snap target and snapped pose."""

        self.update_cursor_position(position)
        pose = self.dragged_port_pose()
        if not self.is_active or pose is None:
            self.set_snap_target(None, None)
            return None

        pieces = list(pieces)
        port_position, port_direction = pose
        target = find_snap_target(
            port_position, port_direction, pieces, self.source_piece_id, snap_radius
        )
        if target is None:
            self.set_snap_target(None, None)
            return None

        target_piece = next(piece for piece in pieces if piece.id == target.piece_id)
        port = self.selected_port
        snap = compute_snap_transform(
            self.active_definition, port.id, target_piece, target.port.id, self.pre_rotation
        )
        self.set_snap_target(target.piece_id, target.port.id)
        self.set_snapped_transform(snap.position, snap.rotation, port.id)
        return target

    def preview_pose(self) -> tuple[Point, int]:
        """Pose a renderer should draw the dragged piece at."""

        if self.snapped_position is not None:
            return self.snapped_position, self.snapped_rotation
        return self.cursor_position, self.pre_rotation

    def end_drag(self) -> None:
        self.is_active = False
        self.active_definition = None
        self.pre_rotation = 0
        self.selected_port_index = None
        self._reset_snap()
        self._reset_move()

    def cancel_drag(self) -> MoveDragOrigin | None:
        """End the drag; for a move drag, return where the piece came from."""

        origin = None
        if (
            self.source_piece_id is not None
            and self.original_position is not None
            and self.original_connections is not None
        ):
            origin = MoveDragOrigin(
                id=self.source_piece_id,
                position=self.original_position,
                rotation=self.original_rotation,
                connections=dict(self.original_connections),
            )
        self.end_drag()
        return origin
