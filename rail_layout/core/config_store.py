"""QObject-based singleton store for layout configuration."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Mapping, Optional

from PyQt5 import QtCore

from rail_layout.core.config_backend import ConfigBackend

logger = logging.getLogger(__name__)

TRACK_SECTION = "track"
SNAP_SECTION = "snap"


@dataclass
class LayoutConfig:
    # Track geometry, millimeters
    straight_length: float = 54.0
    curve_angle: float = 45.0
    curve_radius: float = 143.0
    track_width: float = 10.0
    bridge_span_multiplier: int = 5
    outline_segments: int = 16

    # Snapping
    snap_radius: float = 10.0
    coincidence_tolerance: float = 0.5


def _read_float(section: Mapping[str, str], option: str, fallback: float) -> float:
    raw = section.get(option)
    if raw is None:
        return fallback
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Option '{option}' must be a number, got {raw!r}") from exc


def _read_int(section: Mapping[str, str], option: str, fallback: int) -> int:
    raw = section.get(option)
    if raw is None:
        return fallback
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Option '{option}' must be an integer, got {raw!r}") from exc


def validate_config(cfg: LayoutConfig) -> None:
    positive = {
        "straight_length": cfg.straight_length,
        "curve_angle": cfg.curve_angle,
        "curve_radius": cfg.curve_radius,
        "track_width": cfg.track_width,
        "bridge_span_multiplier": cfg.bridge_span_multiplier,
        "outline_segments": cfg.outline_segments,
        "snap_radius": cfg.snap_radius,
        "coincidence_tolerance": cfg.coincidence_tolerance,
    }
    for name, value in positive.items():
        if value <= 0:
            raise ValueError(f"Option '{name}' must be positive, got {value}")
    if cfg.coincidence_tolerance > cfg.snap_radius:
        raise ValueError(
            "Option 'coincidence_tolerance' "
            f"({cfg.coincidence_tolerance}) must not exceed snap_radius ({cfg.snap_radius})"
        )


class ConfigStore(QtCore.QObject):
    config_changed = QtCore.pyqtSignal(object)

    def __init__(self, backend: Optional[ConfigBackend] = None) -> None:
        super().__init__()
        self._backend = backend or ConfigBackend()
        self._config = LayoutConfig()
        self.reload()

    @property
    def config(self) -> LayoutConfig:
        return self._config

    @property
    def backend(self) -> ConfigBackend:
        return self._backend

    def reload(self) -> LayoutConfig:
        data = self._backend.load()
        cfg = LayoutConfig()

        track = data.get(TRACK_SECTION, {})
        snap = data.get(SNAP_SECTION, {})

        cfg.straight_length = _read_float(track, "straight_length", cfg.straight_length)
        cfg.curve_angle = _read_float(track, "curve_angle", cfg.curve_angle)
        cfg.curve_radius = _read_float(track, "curve_radius", cfg.curve_radius)
        cfg.track_width = _read_float(track, "track_width", cfg.track_width)
        cfg.bridge_span_multiplier = _read_int(
            track, "bridge_span_multiplier", cfg.bridge_span_multiplier
        )
        cfg.outline_segments = _read_int(track, "outline_segments", cfg.outline_segments)

        cfg.snap_radius = _read_float(snap, "snap_radius", cfg.snap_radius)
        cfg.coincidence_tolerance = _read_float(
            snap, "coincidence_tolerance", cfg.coincidence_tolerance
        )

        validate_config(cfg)
        logger.debug("Loaded layout config from %s: %s", self._backend.path, cfg)

        self._config = cfg
        self.config_changed.emit(cfg)
        return cfg

    def save(self, section_updates: Mapping[str, Mapping[str, object]]) -> LayoutConfig:
        self._backend.save(section_updates)
        return self.reload()

    def subscribe(self, callback: Callable[[LayoutConfig], None]) -> None:
        self.config_changed.connect(callback)


_CONFIG_STORE: Optional[ConfigStore] = None


def get_config_store() -> ConfigStore:
    global _CONFIG_STORE
    if _CONFIG_STORE is None:
        _CONFIG_STORE = ConfigStore()
    return _CONFIG_STORE


def set_config_store(store: ConfigStore | None) -> None:
    global _CONFIG_STORE
    _CONFIG_STORE = store


def current_config() -> LayoutConfig:
    return get_config_store().config


__all__ = [
    "LayoutConfig",
    "ConfigStore",
    "SNAP_SECTION",
    "TRACK_SECTION",
    "current_config",
    "get_config_store",
    "set_config_store",
    "validate_config",
]
