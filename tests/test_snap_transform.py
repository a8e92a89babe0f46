import pytest

from rail_layout.geometry.snap import PortNotFoundError, compute_snap_transform
from rail_layout.geometry_core import opposite_direction
from rail_layout.model.catalog import DEFAULT_CATALOG, curve45, short_straight, turnout
from rail_layout.model.pieces import PlacedPiece


def _make_piece(definition=short_straight, position=(0.0, 0.0), rotation=0, piece_id="target"):
    return PlacedPiece(id=piece_id, definition=definition, position=position, rotation=rotation)


def _assert_aligned(definition, port_id, result, target, target_port_id):
    dragged = PlacedPiece(
        id="dragged", definition=definition, position=result.position, rotation=result.rotation
    )
    dragged_port = definition.find_port(port_id)
    target_port = target.definition.find_port(target_port_id)

    assert dragged.port_world_position(dragged_port) == pytest.approx(
        target.port_world_position(target_port), abs=1e-6
    )
    assert dragged.port_world_direction(dragged_port) is opposite_direction(
        target.port_world_direction(target_port)
    )


def test_straight_onto_straight():
    target = _make_piece()
    result = compute_snap_transform(short_straight, "A", target, "B", 0)

    assert result.rotation == 0
    assert result.position == pytest.approx((0.0, 54.0))


def test_straight_onto_rotated_straight():
    target = _make_piece(position=(100.0, 100.0), rotation=90)
    result = compute_snap_transform(short_straight, "A", target, "B", 0)

    assert result.rotation == 90
    assert result.position == pytest.approx((46.0, 100.0))


def test_pre_rotation_is_kept_when_already_aligned():
    target = _make_piece()
    result = compute_snap_transform(short_straight, "B", target, "B", 180)

    assert result.rotation == 180
    assert result.position == pytest.approx((0.0, 54.0))


def test_curve_onto_straight():
    target = _make_piece()
    result = compute_snap_transform(curve45, "A", target, "B")

    assert result.rotation == 0
    assert result.position == pytest.approx((0.0, 27.0))


def test_straight_onto_curve_exit():
    target = _make_piece(definition=curve45)
    result = compute_snap_transform(short_straight, "A", target, "B")

    assert result.rotation == 315
    _assert_aligned(short_straight, "A", result, target, "B")


def test_rotated_curve_target_gives_quantized_rotation():
    target = _make_piece(definition=curve45, position=(100.0, 100.0), rotation=45)
    result = compute_snap_transform(short_straight, "A", target, "A")

    assert result.rotation % 45 == 0
    assert 0 <= result.rotation < 360
    _assert_aligned(short_straight, "A", result, target, "A")


def test_every_pre_rotation_lands_on_the_same_pose():
    target = _make_piece(position=(10.0, -20.0))
    for step in range(8):
        result = compute_snap_transform(short_straight, "A", target, "B", step * 45)
        assert result.rotation == 0
        assert result.position == pytest.approx((10.0, 34.0))


def test_every_pairing_aligns_exactly():
    for target_def in DEFAULT_CATALOG.values():
        for dragged_def in DEFAULT_CATALOG.values():
            for rotation in range(0, 360, 45):
                target = _make_piece(target_def, (12.5, -3.0), rotation)
                for target_port in target_def.ports:
                    for dragged_port in dragged_def.ports:
                        for pre in (0, 135, 270):
                            result = compute_snap_transform(
                                dragged_def, dragged_port.id, target, target_port.id, pre
                            )
                            _assert_aligned(
                                dragged_def, dragged_port.id, result, target, target_port.id
                            )


def test_turnout_branch_snaps():
    target = _make_piece(definition=turnout)
    result = compute_snap_transform(curve45, "A", target, "C")
    _assert_aligned(curve45, "A", result, target, "C")


def test_unknown_dragged_port_raises():
    with pytest.raises(PortNotFoundError, match="Port not found"):
        compute_snap_transform(short_straight, "INVALID", _make_piece(), "B", 0)


def test_unknown_target_port_raises():
    with pytest.raises(PortNotFoundError, match="Port not found"):
        compute_snap_transform(short_straight, "A", _make_piece(), "INVALID", 0)


def test_port_not_found_is_a_lookup_error():
    with pytest.raises(LookupError):
        compute_snap_transform(short_straight, "Z", _make_piece(), "B", 0)
