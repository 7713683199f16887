import pytest

from pianoroll.state import (KeyContext, Modifiers, Note, NoteNotFoundError, NoteStore,
                             SCALES, default_progression, note_name, scale_key)


def test_note_end_and_dict():
    n = Note(id=7, pitch=60, start=1.5, duration=0.5, velocity=0.6)
    assert n.end == 2.0
    assert n.to_dict() == {'id': 7, 'pitch': 60, 'start': 1.5,
                           'duration': 0.5, 'velocity': 0.6}


def test_note_name():
    assert note_name(60) == 'C4'
    assert note_name(69) == 'A4'
    assert note_name(61) == 'C#4'
    assert note_name(0) == 'C-1'


def test_scale_helpers():
    assert scale_key('Harmonic Minor') == 'harmonic_minor'
    assert scale_key(' Major ') == 'major'


def test_key_context_defaults_to_c_major():
    key = KeyContext()
    assert key.allowed_pitch_classes == frozenset({0, 2, 4, 5, 7, 9, 11})
    assert key.allows(60)
    assert not key.allows(61)


def test_key_context_normalizes_intervals():
    key = KeyContext(root_pitch_class=2, scale_intervals=[7, 0, 4, 4])
    assert key.scale_intervals == (0, 4, 7)
    assert key.allowed_pitch_classes == frozenset({2, 6, 9})


@pytest.mark.parametrize('root, intervals', [
    (12, (0, 2, 4)),
    (-1, (0, 2, 4)),
    (0, ()),
    (0, (2, 4)),
    (0, (0, 12)),
])
def test_key_context_rejects_bad_values(root, intervals):
    with pytest.raises(ValueError):
        KeyContext(root_pitch_class=root, scale_intervals=intervals)


def test_key_context_from_names():
    key = KeyContext.from_names('D', 'Dorian')
    assert key.root_pitch_class == 2
    assert key.scale_intervals == tuple(SCALES['dorian'])
    assert KeyContext.from_names('E', 'Harmonic Minor').scale_intervals == tuple(SCALES['harmonic_minor'])


def test_key_context_unknown_scale_falls_back_to_major(caplog):
    key = KeyContext.from_names('G', 'nonsense')
    assert key.root_pitch_class == 7
    assert key.scale_intervals == tuple(SCALES['major'])
    assert 'Unknown scale' in caplog.text


def test_modifiers_extend_selection():
    assert not Modifiers().extends_selection
    assert Modifiers(additive=True).extends_selection
    assert Modifiers(range=True).extends_selection
    assert not Modifiers(chromatic=True, fine=True).extends_selection


def test_add_update_delete(store, events):
    """Every mutation lands in the collection and notifies listeners."""
    nid = store.add_note(pitch=60, start=0.0, duration=0.5)
    assert store.find_note(nid).pitch == 60

    store.update_note(nid, pitch=62, start=1.0)
    n = store.find_note(nid)
    assert (n.pitch, n.start, n.duration) == (62, 1.0, 0.5)

    store.delete_note(nid)
    assert store.notes() == []
    assert events == ['note_add', 'note_edit', 'note_delete']


def test_ids_are_unique(store):
    ids = [store.add_note(60, i * 0.5, 0.5) for i in range(10)]
    assert len(set(ids)) == 10


def test_notes_returns_a_copy(store):
    store.add_note(60, 0.0, 0.5)
    store.notes().clear()
    assert len(store.notes()) == 1


def test_update_notes_is_one_batch(store, events):
    a = store.add_note(60, 0.0, 0.5)
    b = store.add_note(64, 0.0, 0.5)
    events.clear()
    store.update_notes({a: {'pitch': 61}, b: {'pitch': 65}})
    assert events == ['note_edit']
    assert [n.pitch for n in store.notes()] == [61, 65]


def test_update_notes_with_stale_id_changes_nothing(store):
    a = store.add_note(60, 0.0, 0.5)
    with pytest.raises(NoteNotFoundError):
        store.update_notes({a: {'pitch': 61}, 999: {'pitch': 62}})
    assert store.find_note(a).pitch == 60


def test_update_note_missing_id_is_a_key_error(store):
    with pytest.raises(KeyError):
        store.update_note('gone', pitch=61)


def test_update_rejects_unknown_fields(store):
    a = store.add_note(60, 0.0, 0.5)
    with pytest.raises(TypeError):
        store.update_note(a, colour='red')


def test_delete_unknown_note_is_ignored(store, events):
    store.delete_note('nope')
    assert events == []


def test_delete_drops_note_from_selection(store):
    a = store.add_note(60, 0.0, 0.5)
    b = store.add_note(62, 0.0, 0.5)
    store.set_selection([a, b])
    store.delete_note(a)
    assert store.get_selection() == [b]


def test_seeded_store_assigns_fresh_ids():
    store = NoteStore(default_progression())
    notes = store.notes()
    assert len(notes) == 12
    assert len({n.id for n in notes}) == 12
    assert [n.pitch for n in notes[:3]] == [60, 64, 67]


def test_default_progression_is_four_bars():
    notes = default_progression()
    assert sorted({n.start for n in notes}) == [0.0, 2.0, 4.0, 6.0]
    assert all(n.duration == 2.0 for n in notes)


def test_unknown_field_in_batch_changes_nothing(store, events):
    """A bad field on a later entry must not leave earlier entries written."""
    a = store.add_note(60, 0.0, 0.5)
    b = store.add_note(64, 0.0, 0.5)
    events.clear()
    with pytest.raises(TypeError):
        store.update_notes({a: {'pitch': 61}, b: {'colour': 'red'}})
    assert store.find_note(a).pitch == 60
    assert events == []


def test_set_current_time(store, events):
    store.set_current_time(2.5)
    assert store.current_time == 2.5
    store.set_current_time(-1)
    assert store.current_time == 0.0
    assert events == ['playhead', 'playhead']
