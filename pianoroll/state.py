"""Note data model and the in-memory note store.

The editor core never owns the note collection. It reads notes from a
store and requests mutations through the narrow contract described by
`NoteStoreProtocol`. `NoteStore` is the reference implementation used by
the desktop app and the tests; it keeps the observer hooks the UI relies
on for repaints.
"""

from __future__ import annotations
import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Protocol


logger = logging.getLogger(__name__)


# Music constants
NOTE_NAMES = ['C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B']

SCALES = {
    'major': [0, 2, 4, 5, 7, 9, 11],
    'minor': [0, 2, 3, 5, 7, 8, 10],
    'dorian': [0, 2, 3, 5, 7, 9, 10],
    'phrygian': [0, 1, 3, 5, 7, 8, 10],
    'lydian': [0, 2, 4, 6, 7, 9, 11],
    'mixolydian': [0, 2, 4, 5, 7, 9, 10],
    'harmonic_minor': [0, 2, 3, 5, 7, 8, 11],
    'pentatonic': [0, 2, 4, 7, 9],
    'blues': [0, 3, 5, 6, 7, 10],
    'chromatic': [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11],
}

# Names offered in the key selector, in display order
SCALE_TYPES = ['Major', 'Minor', 'Dorian', 'Phrygian', 'Lydian',
               'Mixolydian', 'Harmonic Minor']


def scale_key(scale_name):
    """Normalise a display name ('Harmonic Minor') to a SCALES key."""
    return str(scale_name).strip().lower().replace(' ', '_')


def note_pc(name):
    """Get pitch class index (0-11) for a note name."""
    return NOTE_NAMES.index(name) if name in NOTE_NAMES else 0


def note_name(midi):
    """MIDI note number to a name with octave, e.g. 60 -> 'C4'."""
    return f'{NOTE_NAMES[midi % 12]}{midi // 12 - 1}'


@dataclass(frozen=True)
class KeyContext:
    """Root pitch class plus the interval pattern of the current scale."""

    root_pitch_class: int = 0
    scale_intervals: tuple = tuple(SCALES['major'])

    def __post_init__(self):
        if not 0 <= self.root_pitch_class <= 11:
            raise ValueError(f'root pitch class out of range: {self.root_pitch_class}')
        intervals = tuple(sorted(set(int(i) for i in self.scale_intervals)))
        if not intervals or intervals[0] != 0:
            raise ValueError('scale intervals must include 0')
        if intervals[-1] > 11:
            raise ValueError(f'scale interval out of range: {intervals[-1]}')
        object.__setattr__(self, 'scale_intervals', intervals)

    @property
    def allowed_pitch_classes(self) -> frozenset:
        return frozenset((self.root_pitch_class + i) % 12
                         for i in self.scale_intervals)

    def allows(self, pitch) -> bool:
        return pitch % 12 in self.allowed_pitch_classes

    @staticmethod
    def from_names(root='C', scale_name='Major'):
        intervals = SCALES.get(scale_key(scale_name))
        if intervals is None:
            logger.warning("Unknown scale %r, using major", scale_name)
            intervals = SCALES['major']
        return KeyContext(root_pitch_class=note_pc(root),
                          scale_intervals=tuple(intervals))


@dataclass(frozen=True)
class Note:
    id: object
    pitch: int
    start: float
    duration: float
    velocity: float = 0.8

    @property
    def end(self):
        return self.start + self.duration

    def to_dict(self):
        return {'id': self.id, 'pitch': self.pitch, 'start': self.start,
                'duration': self.duration, 'velocity': self.velocity}


NOTE_FIELDS = ('pitch', 'start', 'duration', 'velocity')


@dataclass(frozen=True)
class Modifiers:
    """Modifier keys held during a pointer event.

    additive: toggle membership (Ctrl/Cmd)
    range: add to the selection (Shift)
    chromatic: bypass scale snapping (Alt)
    fine: quantize to the fine grid (Shift)
    """
    additive: bool = False
    range: bool = False
    chromatic: bool = False
    fine: bool = False

    @property
    def extends_selection(self) -> bool:
        return self.additive or self.range


NO_MODIFIERS = Modifiers()


class NoteNotFoundError(KeyError):
    """Raised when a mutation targets a note id the store no longer has."""


class NoteStoreProtocol(Protocol):
    """What the editor needs from whoever owns the notes."""

    current_time: float

    def notes(self) -> list: ...

    def find_note(self, note_id) -> Optional[Note]: ...

    def add_note(self, **fields) -> object: ...

    def update_note(self, note_id, **fields) -> None: ...

    def update_notes(self, updates: dict) -> None: ...

    def delete_note(self, note_id) -> None: ...

    def get_selection(self) -> list: ...

    def set_selection(self, ids: Iterable) -> None: ...


class NoteStore:
    """In-memory note collection with observer pattern for UI updates."""

    def __init__(self, notes=None):
        self._notes: list[Note] = []
        self._selection: list = []
        self.current_time: float = 0.0  # playhead, in seconds

        # Internal
        self._next_id: int = 1
        self._listeners: list[Callable] = []

        for n in notes or []:
            self.add_note(pitch=n.pitch, start=n.start,
                          duration=n.duration, velocity=n.velocity)

    def new_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    def on_change(self, callback: Callable):
        self._listeners.append(callback)

    def notify(self, source=None):
        for cb in self._listeners:
            cb(source)

    # Lookup helpers
    def notes(self) -> list:
        return list(self._notes)

    def find_note(self, note_id) -> Optional[Note]:
        return next((n for n in self._notes if n.id == note_id), None)

    def _index(self, note_id) -> int:
        for i, n in enumerate(self._notes):
            if n.id == note_id:
                return i
        raise NoteNotFoundError(note_id)

    # Mutations
    def add_note(self, pitch, start, duration, velocity=0.8, source='note_add'):
        note = Note(id=self.new_id(), pitch=int(pitch), start=float(start),
                    duration=float(duration), velocity=float(velocity))
        self._notes.append(note)
        self.notify(source)
        return note.id

    def update_note(self, note_id, **fields):
        self.update_notes({note_id: fields})

    def update_notes(self, updates: dict):
        """Apply field updates to several notes as one batch.

        Every id and field name is checked before anything is written, so
        a stale id or an unknown field leaves the collection untouched.
        Listeners are notified once.
        """
        if not updates:
            return
        indices = {nid: self._index(nid) for nid in updates}
        unknown = set().union(*updates.values()) - set(NOTE_FIELDS)
        if unknown:
            raise TypeError(f'unknown note fields: {sorted(unknown)}')
        for nid, fields in updates.items():
            i = indices[nid]
            self._notes[i] = dataclasses.replace(self._notes[i], **fields)
        self.notify('note_edit')

    def delete_note(self, note_id):
        before = len(self._notes)
        self._notes = [n for n in self._notes if n.id != note_id]
        if len(self._notes) == before:
            logger.debug("Delete of unknown note %r ignored", note_id)
            return
        self._selection = [i for i in self._selection if i != note_id]
        self.notify('note_delete')

    def set_current_time(self, seconds):
        """Move the playhead; paste lands here by default."""
        self.current_time = max(0.0, float(seconds))
        self.notify('playhead')

    def clear(self):
        self._notes = []
        self._selection = []
        self.notify('note_delete')

    # Selection mirror
    def get_selection(self) -> list:
        return list(self._selection)

    def set_selection(self, ids):
        self._selection = list(ids)
        self.notify('selection')


def default_progression():
    """C - Am - F - G, two seconds per chord, around middle C."""
    chords = [(60, 64, 67), (69, 72, 76), (65, 69, 72), (67, 71, 74)]
    notes = []
    for bar, chord in enumerate(chords):
        for pitch in chord:
            notes.append(Note(id=f'default-{len(notes) + 1}', pitch=pitch,
                              start=bar * 2.0, duration=2.0, velocity=0.8))
    return notes
