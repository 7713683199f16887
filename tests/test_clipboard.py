from pianoroll.clipboard import MarqueeSelection, NoteClipboard, rect_bounds
from pianoroll.state import Note


def test_marquee_rect_is_normalized():
    m = MarqueeSelection()
    m.start(100, 80)
    m.update(40, 20)
    assert rect_bounds(m.get_rect()) == (40, 20, 100, 80)
    assert rect_bounds(m.finish()) == (40, 20, 100, 80)
    assert not m.is_active


def test_inactive_marquee_is_empty():
    m = MarqueeSelection()
    m.update(10, 10)
    assert m.finish().isNull()
    m.start(5, 5)
    m.cancel()
    assert m.get_rect().isNull()


def test_copy_is_relative_to_earliest_note():
    cb = NoteClipboard()
    cb.copy([Note(id=2, pitch=64, start=3.0, duration=0.5, velocity=0.5),
             Note(id=1, pitch=60, start=1.0, duration=1.0)])
    assert cb.has_data()
    assert cb.notes == [
        {'pitch': 60, 'start': 0.0, 'duration': 1.0, 'velocity': 0.8},
        {'pitch': 64, 'start': 2.0, 'duration': 0.5, 'velocity': 0.5},
    ]


def test_paste_offsets_every_note():
    cb = NoteClipboard()
    cb.copy([Note(id=1, pitch=60, start=1.0, duration=1.0),
             Note(id=2, pitch=64, start=2.0, duration=0.5, velocity=0.3)])
    pasted = cb.paste(at_time=8.0)
    assert pasted == [
        {'pitch': 60, 'start': 8.0, 'duration': 1.0, 'velocity': 0.8},
        {'pitch': 64, 'start': 9.0, 'duration': 0.5, 'velocity': 0.3},
    ]
    # the clipboard itself is unchanged
    assert cb.paste(at_time=0.0)[1]['start'] == 1.0


def test_empty_copy_keeps_previous_contents():
    cb = NoteClipboard()
    cb.copy([Note(id=1, pitch=60, start=0.0, duration=1.0)])
    cb.copy([])
    assert cb.has_data()
    assert cb.paste()[0]['pitch'] == 60


def test_paste_from_empty_clipboard():
    cb = NoteClipboard()
    assert not cb.has_data()
    assert cb.paste() == []
