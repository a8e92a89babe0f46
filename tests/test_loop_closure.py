from rail_layout.geometry.snap import compute_snap_transform
from rail_layout.model.catalog import curve45, short_straight, turnout
from rail_layout.model.invariants import validate_layout
from rail_layout.model.layout_store import LayoutStore
from rail_layout.model.pieces import PlacedPiece
from rail_layout.preview.connection_detection import find_coincident_connections


def _place_snapped(piece_id, definition, dragged_port_id, target, target_port_id):
    snap = compute_snap_transform(definition, dragged_port_id, target, target_port_id, 0)
    return PlacedPiece(
        id=piece_id, definition=definition, position=snap.position, rotation=snap.rotation
    )


def _chain(definitions_and_exits):
    first = PlacedPiece(id="curve-0", definition=curve45)
    pieces = [first]
    prev, prev_exit = first, "B"
    for index, (definition, exit_port) in enumerate(definitions_and_exits, start=1):
        nxt = _place_snapped(f"piece-{index}", definition, "A", prev, prev_exit)
        pieces.append(nxt)
        prev, prev_exit = nxt, exit_port
    return pieces, prev, prev_exit


def test_eight_curves_close_a_loop():
    pieces, last, last_exit = _chain([(curve45, "B")] * 7)

    matches = find_coincident_connections(last, pieces, 0.5)

    assert any(
        m.new_piece_port_id == last_exit and m.existing_piece_id == "curve-0" and m.existing_port_id == "A"
        for m in matches
    )


def test_loop_closes_through_turnout_branch():
    spec = [(turnout, "C") if i == 4 else (curve45, "B") for i in range(1, 8)]
    pieces, last, last_exit = _chain(spec)

    matches = find_coincident_connections(last, pieces, 0.5)

    assert any(
        m.new_piece_port_id == last_exit and m.existing_piece_id == "curve-0" for m in matches
    )


def test_seven_curves_leave_a_gap():
    pieces, last, _ = _chain([(curve45, "B")] * 6)

    matches = find_coincident_connections(last, pieces, 0.5)

    assert all(m.existing_piece_id != "curve-0" for m in matches)


def test_layout_store_connects_closing_piece_at_both_ends():
    layout = LayoutStore()
    prev = layout.place_piece(curve45, (0.0, 0.0), 0, piece_id="curve-0")
    for i in range(1, 8):
        prev = layout.snap_piece(curve45, "A", prev.id, "B", piece_id=f"curve-{i}")

    first = layout.get_piece("curve-0")
    assert prev.connections == {"A": "curve-6:B", "B": "curve-0:A"}
    assert first.connections == {"A": "curve-7:B", "B": "curve-1:A"}
    validate_layout(layout.pieces)


def test_oval_with_straights_closes():
    layout = LayoutStore()
    prev = layout.place_piece(curve45, (0.0, 0.0), 0, piece_id="p0")
    plan = [curve45] * 3 + [short_straight] + [curve45] * 4 + [short_straight]
    for index, definition in enumerate(plan, start=1):
        prev = layout.snap_piece(definition, "A", prev.id, "B", piece_id=f"p{index}")

    for piece in layout.pieces:
        assert len(piece.connections) == 2, piece.id
    validate_layout(layout.pieces)
