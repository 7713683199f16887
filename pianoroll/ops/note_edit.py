"""Note editing operations for the piano roll.

Functions that work on the note store and plain id collections. The
NoteEditor owns the selection and clipboard; these functions take them
as arguments and return results rather than touching editor state.
"""

import logging

from ..core.geometry import contains, intersects

logger = logging.getLogger(__name__)

EDGE_START = 'start'
EDGE_END = 'end'
BODY = 'body'


def hit_note(notes, geometry, x, y, edge_threshold):
    """Hit test for notes, first match in the given order wins.

    Returns (note, part) where part is EDGE_START, EDGE_END or BODY,
    or (None, None) when the point is on empty canvas.
    """
    for n in notes:
        rect = geometry.note_rect(n)
        if not contains(rect, x, y):
            continue
        left, _, right, _ = rect
        if x - left < edge_threshold:
            return n, EDGE_START
        if right - x < edge_threshold:
            return n, EDGE_END
        return n, BODY
    return None, None


def marquee_select(notes, rect, geometry):
    """Find notes touched by a marquee rectangle.

    Args:
        notes: Notes to test, in store order
        rect: (left, top, right, bottom), already normalized
        geometry: GridGeometry used to place the notes

    Returns list of note ids; a rectangle with no area selects nothing.
    """
    left, top, right, bottom = rect
    if right <= left or bottom <= top:
        return []
    return [n.id for n in notes if intersects(geometry.note_rect(n), rect)]


def get_selected_notes(store, selected):
    """Note objects for the selected ids, in store order."""
    return [n for n in store.notes() if n.id in selected]


def delete_selected(store, selected):
    """Delete the selected notes from the store.

    Returns new (empty) selection set.
    """
    for nid in list(selected):
        store.delete_note(nid)
    logger.debug("Deleted %d notes", len(selected))
    return set()


def place_notes(store, note_fields, geometry, min_duration):
    """Add notes to the store, clamped into the editable range.

    Args:
        store: Target note store
        note_fields: Dicts with pitch, start, duration, velocity
        geometry: GridGeometry supplying the visible pitch window
        min_duration: Shortest allowed duration

    Returns list of new note ids, in the order given.
    """
    new_ids = []
    for d in note_fields:
        new_ids.append(store.add_note(
            pitch=geometry.clamp_pitch(d['pitch']),
            start=max(0.0, d['start']),
            duration=max(min_duration, d['duration']),
            velocity=clamp_velocity(d.get('velocity', 0.8)),
        ))
    logger.debug("Placed %d notes", len(new_ids))
    return new_ids


def clamp_velocity(value):
    return max(0.0, min(1.0, float(value)))


def set_velocity(store, selected, value):
    """Set the velocity of every selected note in one batch."""
    vel = clamp_velocity(value)
    updates = {n.id: {'velocity': vel} for n in get_selected_notes(store, selected)
               if n.velocity != vel}
    store.update_notes(updates)
    return vel
