"""Low-level INI parsing helpers for layout configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import configparser
import os
import sys

from rail_layout.utils.ini_preserver import update_ini_file

DEFAULT_INI_NAME = "rail_layout.ini"


class ConfigBackend:
    """Encapsulates discovery, parsing, and persistence of rail_layout.ini."""

    def __init__(self, ini_path: Optional[str] = None) -> None:
        base_dir = os.path.dirname(sys.argv[0])
        self._path = Path(ini_path or (Path(base_dir) / DEFAULT_INI_NAME))

    @property
    def path(self) -> Path:
        return self._path

    def _parser(self) -> configparser.ConfigParser:
        return configparser.ConfigParser(inline_comment_prefixes=(";", "#"))

    def load(self) -> Dict[str, Dict[str, str]]:
        parser = self._parser()
        parser.read(self._path, encoding="utf-8")
        data: Dict[str, Dict[str, str]] = {}
        for section in parser.sections():
            data[section] = dict(parser.items(section))
        return data

    def save(self, section_updates: Mapping[str, Mapping[str, Any]]) -> None:
        """Merge *section_updates* into the INI file, keeping comments and other options."""

        if not section_updates:
            return
        normalized = {
            section: {key: str(value) for key, value in values.items()}
            for section, values in section_updates.items()
        }
        update_ini_file(str(self._path), normalized)

    def get_option(
        self,
        data: Mapping[str, Mapping[str, str]],
        section: str,
        option: str,
        fallback: str = "",
    ) -> str:
        section_map = data.get(section)
        if section_map is None:
            return fallback
        return section_map.get(option, fallback)
