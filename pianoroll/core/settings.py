"""User-facing editor settings - read from ~/.config/pianoroll/settings.json.

Covers grid density, tempo, snapping switches, the default key and the
gesture thresholds. Every key is optional; anything missing or unreadable
falls back to DEFAULTS. Writing the file is left to the host application.
"""

import json
import logging
from pathlib import Path

from .geometry import GridGeometry
from .quantize import TimeGrid
from ..state import KeyContext

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / '.config' / 'pianoroll' / 'settings.json'

DEFAULTS = {
    'bpm': 120,
    'divisions_per_beat': 4,        # 16th notes
    'row_height': 14,
    'beat_width': 80,
    'min_pitch': 24,
    'max_pitch': 96,
    'snap_to_grid': True,
    'snap_to_scale': True,
    'root_note': 'C',
    'scale_type': 'Major',
    'resize_threshold': 6,          # pixels from a note edge that grab it
    'double_click_interval': 0.3,   # seconds
    'double_click_radius': 4,       # pixels
    'default_velocity': 0.8,
    'new_note_beats': 1.0,
    'bar_seconds': 2.0,             # preview bucket width
}

_TYPES = {
    'bpm': float, 'divisions_per_beat': int, 'row_height': float,
    'beat_width': float, 'min_pitch': int, 'max_pitch': int,
    'snap_to_grid': bool, 'snap_to_scale': bool, 'root_note': str,
    'scale_type': str, 'resize_threshold': float,
    'double_click_interval': float, 'double_click_radius': float,
    'default_velocity': float, 'new_note_beats': float, 'bar_seconds': float,
}


def _convert(name, value):
    kind = _TYPES[name]
    # switches must be JSON booleans, not strings
    if kind is bool and not isinstance(value, bool):
        raise TypeError(f'{name} must be true or false, got {value!r}')
    return kind(value)


class Settings:
    def __init__(self, path=None, **overrides):
        self.path = Path(path) if path else CONFIG_PATH
        for name, value in DEFAULTS.items():
            setattr(self, name, value)
        self._load()
        for name, value in overrides.items():
            if name not in DEFAULTS:
                raise TypeError(f'unknown setting: {name}')
            setattr(self, name, _convert(name, value))

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path) as f:
                d = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read settings %s: %s", self.path, e)
            return
        if not isinstance(d, dict):
            logger.warning("Ignoring settings %s: not a JSON object", self.path)
            return
        for name, value in d.items():
            if name not in DEFAULTS:
                logger.debug("Ignoring unknown setting %r", name)
                continue
            try:
                setattr(self, name, _convert(name, value))
            except (TypeError, ValueError):
                logger.warning("Bad value for setting %r: %r", name, value)

    def as_dict(self):
        return {name: getattr(self, name) for name in DEFAULTS}

    def geometry(self) -> GridGeometry:
        return GridGeometry(row_height=self.row_height, beat_width=self.beat_width,
                            min_pitch=self.min_pitch, max_pitch=self.max_pitch,
                            bpm=self.bpm)

    def time_grid(self) -> TimeGrid:
        return TimeGrid(bpm=self.bpm, divisions_per_beat=self.divisions_per_beat,
                        snap_enabled=self.snap_to_grid)

    def key_context(self) -> KeyContext:
        return KeyContext.from_names(self.root_note, self.scale_type)
