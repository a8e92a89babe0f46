"""Model-layer owner of the placed pieces in a layout.

The store applies placement in a fixed order: solve the pose, write it to
the piece, then scan for coincident ports and connect every match. All
connection edits are delegated to :mod:`rail_layout.model.connections`.
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Mapping, Optional

from PyQt5 import QtCore

from rail_layout.geometry.snap import compute_snap_transform
from rail_layout.geometry_core import Point
from rail_layout.model.connections import connect_ports, disconnect_piece
from rail_layout.model.pieces import (
    PieceDefinition,
    PlacedPiece,
    normalize_rotation,
    parse_connection_ref,
)
from rail_layout.preview.connection_detection import (
    CoincidentMatch,
    find_coincident_connections,
)

logger = logging.getLogger(__name__)


class LayoutStore(QtCore.QObject):
    """Mutable, in-memory collection of placed pieces."""

    piece_added = QtCore.pyqtSignal(str)
    piece_removed = QtCore.pyqtSignal(str)
    piece_moved = QtCore.pyqtSignal(str)
    connections_changed = QtCore.pyqtSignal()

    def __init__(self) -> None:
        super().__init__()
        self._pieces: List[PlacedPiece] = []

    @property
    def pieces(self) -> List[PlacedPiece]:
        return list(self._pieces)

    def __len__(self) -> int:
        return len(self._pieces)

    def clear(self) -> None:
        removed = [piece.id for piece in self._pieces]
        self._pieces = []
        for piece_id in removed:
            self.piece_removed.emit(piece_id)

    @staticmethod
    def new_piece_id() -> str:
        return f"piece-{uuid.uuid4().hex[:12]}"

    def get_piece(self, piece_id: str) -> Optional[PlacedPiece]:
        for piece in self._pieces:
            if piece.id == piece_id:
                return piece
        return None

    def _require_piece(self, piece_id: str) -> PlacedPiece:
        piece = self.get_piece(piece_id)
        if piece is None:
            raise KeyError(f"No placed piece with id {piece_id!r}")
        return piece

    def add_piece(self, piece: PlacedPiece) -> None:
        if self.get_piece(piece.id) is not None:
            raise ValueError(f"Piece id {piece.id!r} is already in the layout")
        piece.rotation = normalize_rotation(piece.rotation)
        self._pieces.append(piece)
        logger.debug(
            "Added %s piece %s at %s rot %d",
            piece.definition.kind,
            piece.id,
            piece.position,
            piece.rotation,
        )
        self.piece_added.emit(piece.id)

    def update_piece(self, piece_id: str, **fields: object) -> bool:
        """Update pose fields on a piece; unknown ids are ignored.

        Only ``position`` and ``rotation`` may change this way. Connections
        must be edited through the connection functions.
        """

        piece = self.get_piece(piece_id)
        if piece is None:
            return False
        unknown = set(fields) - {"position", "rotation"}
        if unknown:
            raise ValueError(f"Cannot update fields {sorted(unknown)} on piece {piece_id}")
        position = piece.position
        rotation = piece.rotation
        if "position" in fields:
            x, y = fields["position"]  # type: ignore[misc]
            position = (float(x), float(y))
        if "rotation" in fields:
            rotation = normalize_rotation(fields["rotation"])  # type: ignore[arg-type]
        piece.position = position
        piece.rotation = rotation
        self.piece_moved.emit(piece_id)
        return True

    def remove_piece(self, piece_id: str) -> bool:
        piece = self.get_piece(piece_id)
        if piece is None:
            return False
        had_connections = bool(piece.connections)
        disconnect_piece(piece, self._pieces)
        self._pieces = [p for p in self._pieces if p is not piece]
        logger.debug("Removed piece %s", piece_id)
        self.piece_removed.emit(piece_id)
        if had_connections:
            self.connections_changed.emit()
        return True

    def connect_coincident(
        self, piece: PlacedPiece, tolerance: float | None = None
    ) -> List[CoincidentMatch]:
        """Connect every open port of ``piece`` that coincides with another open port."""

        matches = find_coincident_connections(piece, self._pieces, tolerance)
        applied: List[CoincidentMatch] = []
        for match in matches:
            other = self.get_piece(match.existing_piece_id)
            if other is None:
                continue
            # Two ports of the new piece can sit on the same spot only in
            # degenerate layouts; the first match keeps the port.
            if not piece.is_port_open(match.new_piece_port_id):
                continue
            if not other.is_port_open(match.existing_port_id):
                continue
            connect_ports(piece, match.new_piece_port_id, other, match.existing_port_id)
            applied.append(match)
            logger.debug(
                "Connected %s:%s <-> %s:%s",
                piece.id,
                match.new_piece_port_id,
                other.id,
                match.existing_port_id,
            )
        if applied:
            self.connections_changed.emit()
        return applied

    def place_piece(
        self,
        definition: PieceDefinition,
        position: Point,
        rotation: int = 0,
        piece_id: str | None = None,
        tolerance: float | None = None,
    ) -> PlacedPiece:
        piece = PlacedPiece(
            id=piece_id or self.new_piece_id(),
            definition=definition,
            position=(float(position[0]), float(position[1])),
            rotation=rotation,
        )
        self.add_piece(piece)
        self.connect_coincident(piece, tolerance)
        return piece

    def snap_piece(
        self,
        definition: PieceDefinition,
        dragged_port_id: str,
        target_piece_id: str,
        target_port_id: str,
        pre_rotation: int = 0,
        piece_id: str | None = None,
        tolerance: float | None = None,
    ) -> PlacedPiece:
        """Place a new piece with ``dragged_port_id`` joined to the target port."""

        target = self._require_piece(target_piece_id)
        snap = compute_snap_transform(
            definition, dragged_port_id, target, target_port_id, pre_rotation
        )
        return self.place_piece(definition, snap.position, snap.rotation, piece_id, tolerance)

    def move_piece(self, piece_id: str, position: Point, rotation: int) -> List[CoincidentMatch]:
        """Pick a piece up, put it down at a new pose, and reconnect it."""

        piece = self._require_piece(piece_id)
        position = (float(position[0]), float(position[1]))
        rotation = normalize_rotation(rotation)
        if piece.connections:
            disconnect_piece(piece, self._pieces)
            self.connections_changed.emit()
        self.update_piece(piece_id, position=position, rotation=rotation)
        return self.connect_coincident(piece)

    def restore_piece(
        self,
        piece_id: str,
        position: Point,
        rotation: int,
        connections: Mapping[str, str],
    ) -> None:
        """Put a piece back where a cancelled drag found it.

        Saved connections are re-made only when the remote piece still exists
        and its port is still open.
        """

        piece = self._require_piece(piece_id)
        position = (float(position[0]), float(position[1]))
        rotation = normalize_rotation(rotation)
        disconnect_piece(piece, self._pieces)
        self.update_piece(piece_id, position=position, rotation=rotation)
        for port_id, ref in connections.items():
            remote_id, remote_port_id = parse_connection_ref(ref)
            remote = self.get_piece(remote_id)
            if remote is None or not remote.is_port_open(remote_port_id):
                logger.info(
                    "Skipping stale connection %s:%s -> %s while restoring", piece_id, port_id, ref
                )
                continue
            if not piece.is_port_open(port_id):
                continue
            connect_ports(piece, port_id, remote, remote_port_id)
        self.connections_changed.emit()
