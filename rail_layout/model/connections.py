"""Symmetric port connection graph.

Every connection is written on both pieces. All changes to a piece's
``connections`` map go through these functions so the two sides never
disagree.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from rail_layout.model.pieces import PlacedPiece, format_connection_ref, parse_connection_ref

logger = logging.getLogger(__name__)


def _find_piece(pieces: Iterable[PlacedPiece], piece_id: str) -> Optional[PlacedPiece]:
    for piece in pieces:
        if piece.id == piece_id:
            return piece
    return None


def connect_ports(
    piece_a: PlacedPiece, port_a: str, piece_b: PlacedPiece, port_b: str
) -> None:
    """Join two ports. Callers only pass ports that are currently open."""

    piece_a.connections[port_a] = format_connection_ref(piece_b.id, port_b)
    piece_b.connections[port_b] = format_connection_ref(piece_a.id, port_a)


def disconnect_port(
    piece: PlacedPiece, port_id: str, all_pieces: Iterable[PlacedPiece]
) -> None:
    ref = piece.connections.get(port_id)
    if ref is None:
        return

    remote_piece_id, remote_port_id = parse_connection_ref(ref)
    remote = _find_piece(all_pieces, remote_piece_id)

    del piece.connections[port_id]
    if remote is None:
        logger.warning(
            "Piece %s port %s pointed at missing piece %s; cleared local side only",
            piece.id,
            port_id,
            remote_piece_id,
        )
        return

    # Only drop the remote entry when it still points back here.
    if remote.connections.get(remote_port_id) == format_connection_ref(piece.id, port_id):
        del remote.connections[remote_port_id]


def disconnect_piece(piece: PlacedPiece, all_pieces: Iterable[PlacedPiece]) -> None:
    """Disconnect every occupied port on ``piece`` from its neighbours."""

    all_pieces = list(all_pieces)
    for port_id in list(piece.connections):
        disconnect_port(piece, port_id, all_pieces)
