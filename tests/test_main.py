import pytest

from rail_layout import main as main_mod
from rail_layout.core import config_store as store_mod
from rail_layout.core.config_backend import ConfigBackend
from rail_layout.core.config_store import ConfigStore
from rail_layout.model.catalog import DEFAULT_CATALOG, build_catalog
from rail_layout.model.layout_store import LayoutStore


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    monkeypatch.setattr(store_mod, "_CONFIG_STORE", None)


def _run(tmp_path, *pieces):
    argv = [
        *pieces,
        "--config",
        str(tmp_path / "rail_layout.ini"),
        "--log-file",
        str(tmp_path / "rail_layout_log.txt"),
    ]
    return main_mod.main(argv)


def test_parse_piece_spec():
    assert main_mod.parse_piece_spec("curve45", DEFAULT_CATALOG) == ("curve45", None)
    assert main_mod.parse_piece_spec("turnout:C", DEFAULT_CATALOG) == ("turnout", "C")
    with pytest.raises(ValueError, match="Unknown piece"):
        main_mod.parse_piece_spec("flextrack", DEFAULT_CATALOG)


def test_default_chain_closes(tmp_path, capsys):
    assert _run(tmp_path) == 0

    out = capsys.readouterr().out
    assert "curve45-0" in out
    assert "curve45-7" in out
    assert "Chain closes on itself." in out


def test_short_chain_is_open(tmp_path, capsys):
    assert _run(tmp_path, "short_straight", "curve45", "long_straight") == 0

    out = capsys.readouterr().out
    assert "Chain is open." in out


def test_unknown_piece_returns_error(tmp_path):
    assert _run(tmp_path, "curve45", "flextrack") == 2


def test_unknown_exit_port_returns_error(tmp_path):
    assert _run(tmp_path, "turnout:X", "curve45") == 2


def test_build_chain_follows_turnout_branch():
    layout = LayoutStore()
    placed = main_mod.build_chain(["turnout:C", "curve45"], DEFAULT_CATALOG, layout)

    switch, curve = placed
    assert switch.connections == {"C": "curve45-1:A"}
    assert curve.connections == {"A": "turnout-0:C"}
    assert curve.rotation == 315


def _install_config(tmp_path, monkeypatch, text):
    ini_path = tmp_path / "rail_layout.ini"
    ini_path.write_text(text, encoding="utf-8")
    store = ConfigStore(ConfigBackend(str(ini_path)))
    monkeypatch.setattr(store_mod, "_CONFIG_STORE", store)
    return store


# Four curves out, a long straight, four curves back and a short straight
# leave the chain one short straight length away from its start.
_ALMOST_LOOP = ["curve45"] * 4 + ["long_straight"] + ["curve45"] * 4 + ["short_straight"]


def test_tolerance_override_is_tighter_than_config(tmp_path, monkeypatch):
    store = _install_config(
        tmp_path, monkeypatch, "[track]\nstraight_length = 0.3\n[snap]\ncoincidence_tolerance = 0.5\n"
    )
    catalog = build_catalog(store.config)

    placed = main_mod.build_chain(_ALMOST_LOOP, catalog, LayoutStore(), tolerance=0.01)

    first, last = placed[0], placed[-1]
    assert "A" not in first.connections
    assert "B" not in last.connections
    assert first.connections == {"B": "curve45-1:A"}


def test_config_tolerance_closes_small_gap(tmp_path, monkeypatch):
    store = _install_config(
        tmp_path, monkeypatch, "[track]\nstraight_length = 0.3\n[snap]\ncoincidence_tolerance = 0.5\n"
    )
    catalog = build_catalog(store.config)

    placed = main_mod.build_chain(_ALMOST_LOOP, catalog, LayoutStore())

    assert placed[0].connections["A"] == "short_straight-9:B"


def test_non_positive_tolerance_rejected(tmp_path, monkeypatch):
    _install_config(tmp_path, monkeypatch, "")
    layout = LayoutStore()

    with pytest.raises(ValueError, match="must be positive"):
        main_mod.build_chain(["curve45"], DEFAULT_CATALOG, layout, tolerance=0.0)
    assert len(layout) == 0


def test_non_positive_tolerance_exit_status(tmp_path):
    assert _run(tmp_path, "curve45", "--tolerance", "-1") == 2
