"""Rhythmic grid: snaps times to a fraction of a beat."""

from dataclasses import dataclass

# Fine grid divides the regular unit again by this factor
FINE_DIVISIONS = 4


@dataclass
class TimeGrid:
    bpm: float = 120
    divisions_per_beat: int = 4   # 4 = sixteenth notes
    snap_enabled: bool = True

    def __post_init__(self):
        if self.bpm <= 0 or self.divisions_per_beat <= 0:
            raise ValueError('bpm and divisions per beat must be positive')

    @property
    def seconds_per_beat(self) -> float:
        return 60.0 / self.bpm

    def unit(self, fine_grid=False) -> float:
        """Length of one grid step in seconds."""
        step = self.seconds_per_beat / self.divisions_per_beat
        return step / FINE_DIVISIONS if fine_grid else step

    @property
    def min_duration(self) -> float:
        """Shortest duration a note may have."""
        return self.unit()

    def quantize(self, time, fine_grid=False) -> float:
        """Round a time in seconds to the nearest grid step, never below 0."""
        if not self.snap_enabled:
            return max(0.0, time)
        step = self.unit(fine_grid)
        return max(0.0, round(time / step) * step)
