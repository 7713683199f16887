"""Pixel <-> musical coordinate mapping for the note grid.

Time runs left to right, pitch runs bottom to top. One semitone is one
row of `row_height` pixels; one beat is `beat_width` pixels wide and the
tempo decides how many seconds that beat lasts.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class GridGeometry:
    row_height: float = 14     # note row height
    beat_width: float = 80     # pixels per beat
    min_pitch: int = 24        # lowest pitch displayed
    max_pitch: int = 96        # highest pitch displayed
    bpm: float = 120

    def __post_init__(self):
        if self.row_height <= 0 or self.beat_width <= 0 or self.bpm <= 0:
            raise ValueError('row height, beat width and bpm must be positive')
        if self.min_pitch > self.max_pitch:
            raise ValueError(f'empty pitch range {self.min_pitch}..{self.max_pitch}')

    @property
    def seconds_per_beat(self) -> float:
        return 60.0 / self.bpm

    @property
    def seconds_per_pixel(self) -> float:
        return self.seconds_per_beat / self.beat_width

    @property
    def pitch_count(self) -> int:
        return self.max_pitch - self.min_pitch + 1

    def pixel_to_musical(self, x, y):
        """Convert pixel coordinates to (pitch, seconds)."""
        pitch = self.max_pitch - math.floor(y / self.row_height)
        return pitch, x * self.seconds_per_pixel

    def musical_to_pixel(self, pitch, seconds):
        """Convert (pitch, seconds) to the top-left pixel of that cell."""
        return seconds / self.seconds_per_pixel, (self.max_pitch - pitch) * self.row_height

    def pixels_to_seconds(self, dx) -> float:
        return dx * self.seconds_per_pixel

    def seconds_to_pixels(self, seconds) -> float:
        return seconds / self.seconds_per_pixel

    def pixels_to_semitones(self, dy) -> int:
        """Vertical drag distance to a semitone delta, positive upwards."""
        return -round(dy / self.row_height)

    def clamp_pitch(self, pitch) -> int:
        return max(self.min_pitch, min(self.max_pitch, int(pitch)))

    def note_rect(self, note):
        """Pixel rectangle (left, top, right, bottom) covered by a note."""
        x, y = self.musical_to_pixel(note.pitch, note.start)
        return x, y, x + self.seconds_to_pixels(note.duration), y + self.row_height

    def canvas_size(self, seconds):
        return self.seconds_to_pixels(seconds), self.pitch_count * self.row_height

    def playhead_x(self, seconds) -> float:
        return self.seconds_to_pixels(max(0.0, seconds))


def contains(rect, x, y) -> bool:
    left, top, right, bottom = rect
    return left <= x <= right and top <= y <= bottom


def intersects(a, b) -> bool:
    """Inclusive overlap test for two (left, top, right, bottom) rectangles."""
    return a[0] <= b[2] and b[0] <= a[2] and a[1] <= b[3] and b[1] <= a[3]
