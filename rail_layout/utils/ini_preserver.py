"""Targeted INI edits that keep comments and untouched lines in place.

:meth:`configparser.ConfigParser.write` regenerates the whole file and drops
every comment, so saving layout settings goes through these helpers instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Optional, Tuple

_COMMENT_MARKERS = (";", "#")


def _section_bounds(lines: List[str], name: str) -> Optional[Tuple[int, int]]:
    """Return ``(header_index, end_index)`` for section *name*, or ``None``."""

    start: Optional[int] = None
    for idx, line in enumerate(lines):
        stripped = line.strip()
        if not (stripped.startswith("[") and stripped.endswith("]")):
            continue
        if start is not None:
            return start, idx
        if stripped[1:-1].strip() == name:
            start = idx
    if start is not None:
        return start, len(lines)
    return None


def _split_comment(line: str) -> Tuple[str, str]:
    positions = [line.find(marker) for marker in _COMMENT_MARKERS if marker in line]
    if not positions:
        return line, ""
    cut = min(positions)
    return line[:cut], line[cut:]


def _replace_value(line: str, key: str, value: str) -> str:
    body, comment = _split_comment(line)
    before_eq, _, after_eq = body.partition("=")
    indent = before_eq[: len(before_eq) - len(before_eq.lstrip())]
    key_gap = before_eq[len(before_eq.rstrip()) :]
    value_gap = after_eq[: len(after_eq) - len(after_eq.lstrip())]
    tail_gap = after_eq[len(after_eq.rstrip()) :] if comment else ""
    return f"{indent}{key}{key_gap}={value_gap}{value}{tail_gap}{comment}"


def set_option(lines: List[str], section: str, key: str, value: str) -> None:
    """Set ``key = value`` in *section*, editing *lines* in place."""

    bounds = _section_bounds(lines, section)
    if bounds is None:
        if lines and lines[-1].strip():
            lines.append("")
        lines.extend([f"[{section}]", f"{key} = {value}"])
        return

    start, end = bounds
    wanted = key.lower()
    for idx in range(start + 1, end):
        stripped = lines[idx].strip()
        if not stripped or stripped.startswith(_COMMENT_MARKERS) or "=" not in stripped:
            continue
        if stripped.split("=", 1)[0].strip().lower() == wanted:
            lines[idx] = _replace_value(lines[idx], key, value)
            return

    # New options go after the last non-blank line of the section.
    insert_at = end
    while insert_at > start + 1 and not lines[insert_at - 1].strip():
        insert_at -= 1
    lines.insert(insert_at, f"{key} = {value}")


def update_ini_file(
    path: str,
    updates: Mapping[str, Mapping[str, str]],
    *,
    encoding: str = "utf-8",
) -> None:
    """Write *updates* into the INI file at *path*, creating it if needed."""

    ini_path = Path(path)
    if ini_path.exists():
        raw = ini_path.read_text(encoding=encoding)
        newline = "\r\n" if "\r\n" in raw else "\n"
        lines = raw.splitlines()
    else:
        newline = "\n"
        lines = []

    for section, values in updates.items():
        for key, value in values.items():
            set_option(lines, section, key, value)

    ini_path.parent.mkdir(parents=True, exist_ok=True)
    text = newline.join(lines)
    if lines:
        text += newline
    ini_path.write_text(text, encoding=encoding)
