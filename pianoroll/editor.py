"""Pointer-driven note editing engine.

NoteEditor turns a stream of pointer events into note mutations. A
pointer-down decides what the gesture is (move, resize either edge, or
box select) and captures an immutable snapshot of every note involved.
Each pointer-move recomputes the result from that snapshot and the total
pointer offset, so rounding and snapping never accumulate over a long
drag. Pointer-up ends the gesture.

Nothing here knows about Qt; the widgets in `pianoroll.ui` feed it pixel
coordinates and Modifiers.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .clipboard import MarqueeSelection, NoteClipboard, rect_bounds
from .core.geometry import GridGeometry
from .core.quantize import TimeGrid
from .core.scale import snap_to_scale, snap_to_scale_directional
from .ops import note_edit
from .ops.selection import SelectionModel
from .state import KeyContext, NO_MODIFIERS, Modifiers, Note, NoteNotFoundError

logger = logging.getLogger(__name__)


class DragMode(Enum):
    IDLE = 'idle'
    MOVING = 'moving'
    RESIZING_START = 'resizing_start'
    RESIZING_END = 'resizing_end'
    BOX_SELECTING = 'box_selecting'


_PART_MODES = {
    note_edit.EDGE_START: DragMode.RESIZING_START,
    note_edit.EDGE_END: DragMode.RESIZING_END,
    note_edit.BODY: DragMode.MOVING,
}


@dataclass(frozen=True)
class DragSession:
    """A move or resize gesture in progress.

    `snapshot` holds the notes as they were at pointer-down, anchor
    first. Every move is computed against these values.
    """
    mode: DragMode
    origin_x: float
    origin_y: float
    anchor_id: object
    snapshot: tuple
    collapse_to_anchor: bool = False

    @property
    def anchor(self) -> Note:
        return self.snapshot[0]


@dataclass
class BoxGesture:
    """A marquee selection in progress."""
    marquee: MarqueeSelection
    union: bool = False

    mode = DragMode.BOX_SELECTING


Gesture = Union[DragSession, BoxGesture, None]


class NoteEditor:
    """Interaction state machine for the piano roll grid."""

    def __init__(self, store, geometry: Optional[GridGeometry] = None,
                 grid: Optional[TimeGrid] = None, key: Optional[KeyContext] = None,
                 snap_to_scale=True, resize_threshold=6,
                 double_click_interval=0.3, double_click_radius=4,
                 default_velocity=0.8, new_note_beats=1.0, clock=time.monotonic):
        self.store = store
        self.geometry = geometry or GridGeometry()
        self.grid = grid or TimeGrid(bpm=self.geometry.bpm)
        self.key = key or KeyContext()
        self.snap_to_scale = snap_to_scale
        self.resize_threshold = resize_threshold
        self.double_click_interval = double_click_interval
        self.double_click_radius = double_click_radius
        self.default_velocity = default_velocity
        self.new_note_beats = new_note_beats
        self.clock = clock

        self.selection = SelectionModel(store)
        self.clipboard = NoteClipboard()

        self._gesture: Gesture = None
        self._moved = False
        self._last_empty_click = None  # (timestamp, x, y)

    @classmethod
    def from_settings(cls, store, settings, **kwargs):
        return cls(store,
                   geometry=settings.geometry(),
                   grid=settings.time_grid(),
                   key=settings.key_context(),
                   snap_to_scale=settings.snap_to_scale,
                   resize_threshold=settings.resize_threshold,
                   double_click_interval=settings.double_click_interval,
                   double_click_radius=settings.double_click_radius,
                   default_velocity=settings.default_velocity,
                   new_note_beats=settings.new_note_beats,
                   **kwargs)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def mode(self) -> DragMode:
        if self._gesture is None:
            return DragMode.IDLE
        return self._gesture.mode

    @property
    def session(self) -> Optional[DragSession]:
        return self._gesture if isinstance(self._gesture, DragSession) else None

    def marquee_rect(self):
        """Live box-selection rectangle as a QRectF, or None."""
        if isinstance(self._gesture, BoxGesture):
            return self._gesture.marquee.get_rect()
        return None

    def set_key(self, key: KeyContext):
        self.key = key

    def set_snap(self, grid=None, scale=None):
        if grid is not None:
            self.grid.snap_enabled = grid
        if scale is not None:
            self.snap_to_scale = scale

    def set_geometry(self, geometry: GridGeometry):
        self.geometry = geometry

    # ------------------------------------------------------------------
    # Snapping helpers
    # ------------------------------------------------------------------

    def snap_pitch(self, pitch, direction=0, chromatic=False):
        chromatic = chromatic or not self.snap_to_scale
        if direction:
            return snap_to_scale_directional(pitch, direction, self.key, chromatic)
        return snap_to_scale(pitch, self.key, chromatic)

    def hit_test(self, x, y):
        """Return (note, DragMode) under the pointer, or None."""
        n, part = note_edit.hit_note(self.store.notes(), self.geometry, x, y,
                                     self.resize_threshold)
        if n is None:
            return None
        return n, _PART_MODES[part]

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_down(self, x, y, modifiers: Modifiers = NO_MODIFIERS, timestamp=None):
        """Start a gesture at (x, y)."""
        if self._gesture is not None:
            # release never arrived; don't leave the old gesture stuck
            self.pointer_cancel()
        now = self.clock() if timestamp is None else timestamp
        self._moved = False

        hit = self.hit_test(x, y)
        if hit is not None:
            self._last_empty_click = None
            note, mode = hit
            self._start_drag(note, mode, x, y, modifiers)
            return self.mode

        if self._is_double_click(now, x, y):
            self._last_empty_click = None
            self.create_note_at(x, y, modifiers)
            return self.mode
        self._last_empty_click = (now, x, y)

        if not modifiers.extends_selection:
            self.selection.clear()
        marquee = MarqueeSelection()
        marquee.start(x, y)
        self._gesture = BoxGesture(marquee=marquee, union=modifiers.extends_selection)
        logger.debug("Box selection started at (%.1f, %.1f)", x, y)
        return self.mode

    def _is_double_click(self, now, x, y):
        if self._last_empty_click is None:
            return False
        t, px, py = self._last_empty_click
        return (0 <= now - t <= self.double_click_interval
                and abs(x - px) <= self.double_click_radius
                and abs(y - py) <= self.double_click_radius)

    def _start_drag(self, note, mode, x, y, modifiers):
        was_selected = note.id in self.selection
        self.selection.prune()
        selected = self.selection.click(note.id, modifiers)

        others = []
        if selected:
            others = [n for n in self.selection.selected_notes() if n.id != note.id]
        collapse = (was_selected and not modifiers.extends_selection
                    and len(self.selection) > 1)
        self._gesture = DragSession(
            mode=mode, origin_x=x, origin_y=y, anchor_id=note.id,
            snapshot=(note,) + tuple(others), collapse_to_anchor=collapse)
        logger.debug("%s started on note %r with %d others",
                     mode.value, note.id, len(others))

    def pointer_move(self, x, y, modifiers: Modifiers = NO_MODIFIERS):
        """Continue the current gesture; a no-op when idle."""
        gesture = self._gesture
        if gesture is None:
            return
        if isinstance(gesture, BoxGesture):
            gesture.marquee.update(x, y)
            return

        dx = x - gesture.origin_x
        dy = y - gesture.origin_y
        if dx or dy:
            self._moved = True
        if gesture.mode is DragMode.MOVING:
            updates = self._move_updates(gesture, dx, dy, modifiers)
        elif gesture.mode is DragMode.RESIZING_START:
            updates = self._resize_start_updates(gesture, dx, modifiers)
        else:
            updates = self._resize_end_updates(gesture, dx, modifiers)
        self._commit(updates)

    def _move_updates(self, session, dx, dy, modifiers):
        anchor = session.anchor
        semitones = self.geometry.pixels_to_semitones(dy)
        direction = (semitones > 0) - (semitones < 0)
        pitch = self.snap_pitch(anchor.pitch + semitones, direction, modifiers.chromatic)
        pitch = self.geometry.clamp_pitch(pitch)
        start = self.grid.quantize(anchor.start + self.geometry.pixels_to_seconds(dx),
                                   modifiers.fine)

        # one delta for the whole group keeps relative spacing intact
        pitch_delta = pitch - anchor.pitch
        time_delta = start - anchor.start
        updates = {}
        for n in session.snapshot:
            updates[n.id] = {
                'pitch': self.geometry.clamp_pitch(n.pitch + pitch_delta),
                'start': max(0.0, n.start + time_delta),
            }
        return updates

    def _resize_start_updates(self, session, dx, modifiers):
        anchor = session.anchor
        unit = self.grid.min_duration
        end = anchor.end
        start = self.grid.quantize(anchor.start + self.geometry.pixels_to_seconds(dx),
                                   modifiers.fine)
        start = max(0.0, min(start, end - unit))
        # a note shorter than one unit near 0 grows to one unit
        return {anchor.id: {'start': start, 'duration': max(unit, end - start)}}

    def _resize_end_updates(self, session, dx, modifiers):
        anchor = session.anchor
        duration = self.grid.quantize(anchor.duration + self.geometry.pixels_to_seconds(dx),
                                      modifiers.fine)
        return {anchor.id: {'duration': max(self.grid.min_duration, duration)}}

    def _commit(self, updates):
        """Send one batch of changed fields to the store."""
        changed = {}
        for nid, fields in updates.items():
            live = self.store.find_note(nid)
            if live is None:
                logger.debug("Note %r vanished mid-drag, ending gesture", nid)
                self._end_gesture()
                return
            diff = {k: v for k, v in fields.items() if getattr(live, k) != v}
            if diff:
                changed[nid] = diff
        if not changed:
            return
        try:
            self.store.update_notes(changed)
        except NoteNotFoundError as e:
            logger.debug("Note %s vanished mid-drag, ending gesture", e)
            self._end_gesture()

    def pointer_up(self, x=None, y=None, modifiers: Modifiers = NO_MODIFIERS):
        """Finish the current gesture.

        For a box selection the rectangle is closed at (x, y) when given,
        otherwise at the last move position.
        """
        gesture = self._gesture
        if gesture is None:
            return
        if isinstance(gesture, BoxGesture):
            if x is not None and y is not None:
                gesture.marquee.update(x, y)
            rect = rect_bounds(gesture.marquee.finish())
            ids = note_edit.marquee_select(self.store.notes(), rect, self.geometry)
            if gesture.union:
                self.selection.union(ids)
            else:
                self.selection.replace(ids)
            logger.debug("Box selection picked %d notes", len(ids))
        elif gesture.collapse_to_anchor and not self._moved:
            self.selection.replace([gesture.anchor_id])
        self._end_gesture()

    def pointer_cancel(self):
        """Abandon the gesture (pointer lost or capture broken)."""
        if isinstance(self._gesture, BoxGesture):
            self._gesture.marquee.cancel()
        self._end_gesture()

    def _end_gesture(self):
        self._gesture = None
        self._moved = False

    # ------------------------------------------------------------------
    # Note creation
    # ------------------------------------------------------------------

    def double_click(self, x, y, modifiers: Modifiers = NO_MODIFIERS):
        """Create a note at (x, y) unless a note is already there."""
        self.pointer_cancel()
        if self.hit_test(x, y) is not None:
            return None
        return self.create_note_at(x, y, modifiers)

    def create_note_at(self, x, y, modifiers: Modifiers = NO_MODIFIERS):
        """Add a note at the grid cell under (x, y) and select it.

        Returns the new note id.
        """
        pitch, seconds = self.geometry.pixel_to_musical(x, y)
        pitch = self.geometry.clamp_pitch(self.snap_pitch(pitch, 0, modifiers.chromatic))
        start = self.grid.quantize(seconds, modifiers.fine)
        duration = max(self.grid.min_duration,
                       self.new_note_beats * self.grid.seconds_per_beat)
        nid = self.store.add_note(pitch=pitch, start=start, duration=duration,
                                  velocity=note_edit.clamp_velocity(self.default_velocity))
        self.selection.replace([nid])
        logger.debug("Created note %r: pitch %d at %.3fs", nid, pitch, start)
        return nid

    # ------------------------------------------------------------------
    # Keyboard commands
    # ------------------------------------------------------------------

    def delete_selection(self):
        """Delete all selected notes."""
        if not len(self.selection):
            return 0
        ids = self.selection.ids
        self.pointer_cancel()
        note_edit.delete_selected(self.store, ids)
        self.selection.clear()
        return len(ids)

    def select_all(self):
        self.selection.select_all()

    def escape(self):
        """Cancel any gesture and clear the selection."""
        self.pointer_cancel()
        self.selection.clear()

    def copy(self):
        """Copy selected notes to the clipboard."""
        notes = self.selection.selected_notes()
        self.clipboard.copy(notes)
        return len(notes)

    def cut(self):
        """Copy, then delete the selection."""
        count = self.copy()
        if count:
            self.delete_selection()
        return count

    def paste(self, at_time=None):
        """Paste the clipboard at `at_time` (default: the playhead).

        The pasted notes become the selection. Returns their ids.
        """
        if not self.clipboard.has_data():
            return []
        if at_time is None:
            at_time = self.store.current_time or 0.0
        ids = note_edit.place_notes(self.store, self.clipboard.paste(at_time),
                                    self.geometry, self.grid.min_duration)
        self.selection.replace(ids)
        return ids

    def duplicate(self):
        """Copy the selection and paste it right after its own end."""
        notes = self.selection.selected_notes()
        if not notes:
            return []
        self.clipboard.copy(notes)
        end = max(n.end for n in notes)
        return self.paste(at_time=self.grid.quantize(end))

    def set_velocity(self, value):
        """Set velocity (0-1) of every selected note."""
        return note_edit.set_velocity(self.store, set(self.selection.ids), value)


class MoveCoalescer:
    """Keeps only the newest pointer-move until the next frame.

    Hosts call `push` for every move event and `flush` once per frame, so
    the store sees at most one mutation pass per frame. The final state is
    the same as applying every event, because moves are absolute offsets
    from the gesture origin.
    """

    def __init__(self, editor: NoteEditor):
        self.editor = editor
        self._pending = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def push(self, x, y, modifiers: Modifiers = NO_MODIFIERS):
        self._pending = (x, y, modifiers)

    def flush(self):
        if self._pending is None:
            return False
        x, y, modifiers = self._pending
        self._pending = None
        self.editor.pointer_move(x, y, modifiers)
        return True

    def release(self, x=None, y=None, modifiers: Modifiers = NO_MODIFIERS):
        self.flush()
        self.editor.pointer_up(x, y, modifiers)

    def cancel(self):
        self._pending = None
        self.editor.pointer_cancel()
