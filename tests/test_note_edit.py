import pytest

from pianoroll.core.geometry import GridGeometry
from pianoroll.ops import note_edit
from pianoroll.state import Note

GEO = GridGeometry()

# pitch 60 from 1.0 s to 2.0 s covers x 160..320, y 504..518
NOTE = Note(id='a', pitch=60, start=1.0, duration=1.0)


def test_hit_body_and_edges():
    assert note_edit.hit_note([NOTE], GEO, 240, 510, 6) == (NOTE, note_edit.BODY)
    assert note_edit.hit_note([NOTE], GEO, 162, 510, 6) == (NOTE, note_edit.EDGE_START)
    assert note_edit.hit_note([NOTE], GEO, 318, 510, 6) == (NOTE, note_edit.EDGE_END)


def test_hit_empty_canvas():
    assert note_edit.hit_note([NOTE], GEO, 240, 530, 6) == (None, None)
    assert note_edit.hit_note([], GEO, 240, 510, 6) == (None, None)


def test_hit_narrow_note_body_between_edges():
    short = Note(id='s', pitch=60, start=1.0, duration=0.125)  # 20 px wide
    assert note_edit.hit_note([short], GEO, 170, 510, 6) == (short, note_edit.BODY)


def test_first_note_in_order_wins():
    other = Note(id='b', pitch=60, start=1.5, duration=1.0)
    assert note_edit.hit_note([NOTE, other], GEO, 280, 510, 6)[0] is NOTE
    assert note_edit.hit_note([other, NOTE], GEO, 280, 510, 6)[0] is other


def test_marquee_select():
    far = Note(id='b', pitch=72, start=4.0, duration=0.5)
    notes = [NOTE, far]
    assert note_edit.marquee_select(notes, (0, 0, 400, 600), GEO) == ['a']
    assert note_edit.marquee_select(notes, (0, 0, 5000, 2000), GEO) == ['a', 'b']


def test_marquee_touching_edge_selects():
    assert note_edit.marquee_select([NOTE], (200, 518, 210, 530), GEO) == ['a']


@pytest.mark.parametrize('rect', [
    (240, 510, 240, 510),   # point
    (240, 0, 240, 1000),    # vertical line through the note
    (0, 510, 1000, 510),    # horizontal line through the note
])
def test_zero_area_marquee_selects_nothing(rect):
    assert note_edit.marquee_select([NOTE], rect, GEO) == []


def test_place_notes_clamps(store):
    ids = note_edit.place_notes(store, [
        {'pitch': 120, 'start': -1.0, 'duration': 0.01, 'velocity': 2.0},
        {'pitch': 60, 'start': 1.0, 'duration': 0.5},
    ], GEO, 0.125)
    first, second = (store.find_note(i) for i in ids)
    assert (first.pitch, first.start, first.duration, first.velocity) == (96, 0.0, 0.125, 1.0)
    assert (second.pitch, second.start, second.velocity) == (60, 1.0, 0.8)


def test_set_velocity_is_one_batch(store, events):
    a = store.add_note(60, 0.0, 0.5)
    b = store.add_note(62, 0.0, 0.5)
    c = store.add_note(64, 0.0, 0.5)
    events.clear()
    assert note_edit.set_velocity(store, {a, b}, -3) == 0.0
    assert events == ['note_edit']
    assert [n.velocity for n in store.notes()] == [0.0, 0.0, 0.8]
    assert store.find_note(c).velocity == 0.8


def test_delete_selected(store):
    a = store.add_note(60, 0.0, 0.5)
    b = store.add_note(62, 0.0, 0.5)
    assert note_edit.delete_selected(store, {a}) == set()
    assert [n.id for n in store.notes()] == [b]


@pytest.mark.parametrize('value, expected', [(-1, 0.0), (0.5, 0.5), (7, 1.0)])
def test_clamp_velocity(value, expected):
    assert note_edit.clamp_velocity(value) == expected
