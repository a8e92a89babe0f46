"""Invariant checks for a layout of placed pieces."""

from __future__ import annotations

from math import isfinite
from typing import Sequence

from rail_layout.model.pieces import (
    ROTATION_STEP,
    PlacedPiece,
    format_connection_ref,
    parse_connection_ref,
)


class InvariantError(ValueError):
    """Raised when the layout violates a structural or geometric invariant."""


def assert_unique_piece_ids(pieces: Sequence[PlacedPiece]) -> None:
    seen: set[str] = set()
    for piece in pieces:
        if piece.id in seen:
            raise InvariantError(f"Duplicate piece id detected: {piece.id!r}.")
        seen.add(piece.id)


def assert_rotations_quantized(pieces: Sequence[PlacedPiece]) -> None:
    """Assert every rotation is one of 0, 45, ..., 315 and positions are finite."""

    for piece in pieces:
        rotation = piece.rotation
        if not 0 <= rotation < 360 or rotation % ROTATION_STEP != 0:
            raise InvariantError(
                f"Piece {piece.id} has rotation {rotation}, expected a multiple of "
                f"{ROTATION_STEP} in [0, 360)."
            )
        x, y = piece.position
        if not (isfinite(x) and isfinite(y)):
            raise InvariantError(f"Piece {piece.id} has non-finite position {piece.position}.")


def assert_ports_exist(pieces: Sequence[PlacedPiece]) -> None:
    """Assert connection keys name ports that exist on the owning definition."""

    for piece in pieces:
        port_ids = set(piece.definition.port_ids)
        for port_id in piece.connections:
            if port_id not in port_ids:
                raise InvariantError(
                    f"Piece {piece.id} has a connection on unknown port {port_id!r}."
                )


def assert_symmetric_connections(pieces: Sequence[PlacedPiece]) -> None:
    """Assert every connection entry is mirrored on the remote piece.

    ``P.connections[k] == "Q:j"`` implies ``Q.connections[j] == "P:k"``.
    """

    by_id = {piece.id: piece for piece in pieces}
    for piece in pieces:
        for port_id, ref in piece.connections.items():
            remote_id, remote_port_id = parse_connection_ref(ref)
            remote = by_id.get(remote_id)
            if remote is None:
                raise InvariantError(
                    f"Piece {piece.id} port {port_id} points at missing piece {remote_id!r}."
                )
            back = remote.connections.get(remote_port_id)
            expected = format_connection_ref(piece.id, port_id)
            if back != expected:
                raise InvariantError(
                    "Connection mismatch: "
                    f"{piece.id}.{port_id} -> {ref}, "
                    f"but {remote_id}.{remote_port_id} -> {back}."
                )


def validate_layout(pieces: Sequence[PlacedPiece]) -> None:
    """Run all layout invariants."""

    assert_unique_piece_ids(pieces)
    assert_rotations_quantized(pieces)
    assert_ports_exist(pieces)
    assert_symmetric_connections(pieces)
