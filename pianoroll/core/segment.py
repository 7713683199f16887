"""Role classification for the four-lane preview.

`classify` splits a flat note collection into chord, melody, bass and
arpeggio lanes using nothing but timing and pitch. It is an approximate
musical heuristic, not an analysis: a sustained melody note can land in
the chord lane, a fast chord stab in the melody lane. What it does
guarantee is that it is total and deterministic, and that every input
note ends up in exactly one lane.

Per bar-sized time bucket:
  - short notes (< 0.35 s) are arpeggio when there are at least three of
    them over at least three pitch classes, otherwise melody;
  - the lowest long note is bass, the remaining long notes are chord.
"""

import math
from dataclasses import dataclass, field

from ..state import note_name

BAR_SECONDS = 2.0
SHORT_NOTE_SECONDS = 0.35
MIN_ARP_NOTES = 3
MIN_ARP_PITCH_CLASSES = 3


@dataclass
class SegmentedNotes:
    chord: list = field(default_factory=list)
    melody: list = field(default_factory=list)
    bass: list = field(default_factory=list)
    arp: list = field(default_factory=list)

    def lanes(self):
        return {'chord': self.chord, 'melody': self.melody,
                'bass': self.bass, 'arp': self.arp}

    def __len__(self):
        return len(self.chord) + len(self.melody) + len(self.bass) + len(self.arp)


def _sort_key(note):
    return (note.start, note.pitch, note.duration, str(note.id))


def _bucket(note, bar_seconds):
    start = note.start if math.isfinite(note.start) else 0.0
    return math.floor(max(0.0, start) / bar_seconds)


def classify(notes, bar_seconds=BAR_SECONDS, short_threshold=SHORT_NOTE_SECONDS):
    """Partition notes into chord / melody / bass / arp lanes.

    Args:
        notes: Iterable of Note objects, in any order
        bar_seconds: Width of a time bucket
        short_threshold: Durations below this count as short notes

    Returns a SegmentedNotes; an empty input gives four empty lanes.
    """
    result = SegmentedNotes()
    if bar_seconds <= 0:
        bar_seconds = BAR_SECONDS

    buckets = {}
    for n in notes:
        buckets.setdefault(_bucket(n, bar_seconds), []).append(n)

    for index in sorted(buckets):
        bucket = sorted(buckets[index], key=_sort_key)
        short = [n for n in bucket if n.duration < short_threshold]
        long_ = [n for n in bucket if not n.duration < short_threshold]

        pitch_classes = {n.pitch % 12 for n in short}
        if len(short) >= MIN_ARP_NOTES and len(pitch_classes) >= MIN_ARP_PITCH_CLASSES:
            result.arp.extend(short)
        else:
            result.melody.extend(short)

        if long_:
            # index, not identity: the same Note may appear twice in the input
            lowest = min(range(len(long_)),
                         key=lambda i: (long_[i].pitch,) + _sort_key(long_[i]))
            result.bass.append(long_[lowest])
            result.chord.extend(long_[:lowest] + long_[lowest + 1:])

    return result


def pitch_range_label(notes):
    """'C4 – G5' style label for a lane, or an em dash when it is empty."""
    if not notes:
        return '—'
    lo = min(n.pitch for n in notes)
    hi = max(n.pitch for n in notes)
    return f'{note_name(lo)} – {note_name(hi)}'
