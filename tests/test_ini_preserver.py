from pathlib import Path

from rail_layout.utils.ini_preserver import update_ini_file


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def test_update_keeps_comments_and_layout(tmp_path: Path):
    ini = tmp_path / "rail_layout.ini"
    ini.write_text(
        "; layout defaults\n[track]\n# millimeters\nstraight_length = 54 ; short piece\n\n"
        "[snap]\nsnap_radius = 10\n",
        encoding="utf-8",
    )

    update_ini_file(
        str(ini),
        {
            "track": {"straight_length": "60", "curve_radius": "150"},
            "snap": {"snap_radius": "12"},
        },
    )

    assert _read(ini) == (
        "; layout defaults\n[track]\n# millimeters\nstraight_length = 60 ; short piece\n"
        "curve_radius = 150\n\n[snap]\nsnap_radius = 12\n"
    )


def test_new_section_appended(tmp_path: Path):
    ini = tmp_path / "rail_layout.ini"
    ini.write_text("[track]\ntrack_width = 10\n", encoding="utf-8")

    update_ini_file(str(ini), {"snap": {"coincidence_tolerance": "0.25"}})

    assert _read(ini) == "[track]\ntrack_width = 10\n\n[snap]\ncoincidence_tolerance = 0.25\n"


def test_keys_match_case_insensitively(tmp_path: Path):
    ini = tmp_path / "rail_layout.ini"
    ini.write_text("[Snap]\nSnap_Radius=10\n", encoding="utf-8")

    update_ini_file(str(ini), {"Snap": {"snap_radius": "8"}})

    assert _read(ini) == "[Snap]\nsnap_radius=8\n"


def test_create_new_file(tmp_path: Path):
    ini = tmp_path / "nested" / "rail_layout.ini"

    update_ini_file(str(ini), {"track": {"curve_angle": "45"}})

    assert _read(ini) == "[track]\ncurve_angle = 45\n"
