"""Scale snapping for pitches placed on the grid.

Both functions leave a pitch alone when its pitch class is already in the
key. `snap_to_scale` picks the nearest allowed pitch, preferring the upper
neighbour when two are equally close. `snap_to_scale_directional` keeps
moving in the drag direction so a note dragged upwards never jumps below
where the pointer put it.
"""

# A tritone is the furthest any pitch can be from the nearest member of a
# non-empty pitch-class set.
MAX_SNAP_DISTANCE = 6


def snap_to_scale(pitch, key, chromatic=False):
    """Snap a pitch to the nearest tone of `key`.

    Args:
        pitch: MIDI pitch to snap
        key: KeyContext supplying the allowed pitch classes
        chromatic: bypass snapping and return the pitch as-is

    Returns the snapped pitch.
    """
    if chromatic:
        return pitch
    allowed = key.allowed_pitch_classes
    if pitch % 12 in allowed:
        return pitch
    for delta in range(1, MAX_SNAP_DISTANCE + 1):
        if (pitch + delta) % 12 in allowed:
            return pitch + delta
        if (pitch - delta) % 12 in allowed:
            return pitch - delta
    return pitch


def snap_to_scale_directional(pitch, direction, key, chromatic=False):
    """Snap a pitch by stepping only in `direction` (+1 up, -1 down).

    A zero direction means the pointer has not left the original row, in
    which case the symmetric snap applies.
    """
    if chromatic:
        return pitch
    if direction == 0:
        return snap_to_scale(pitch, key)
    allowed = key.allowed_pitch_classes
    if pitch % 12 in allowed:
        return pitch
    step = 1 if direction > 0 else -1
    for delta in range(1, 13):
        candidate = pitch + step * delta
        if candidate % 12 in allowed:
            return candidate
    return pitch
