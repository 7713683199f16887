import pytest
from PySide6.QtCore import QEvent, Qt
from PySide6.QtGui import QKeyEvent

from pianoroll.app import App
from pianoroll.core.settings import Settings
from pianoroll.editor import NoteEditor
from pianoroll.state import NoteStore
from pianoroll.ui.piano_roll import PianoRoll, modifiers_from_qt, vel_color
from pianoroll.ui.preview import PreviewPanel


@pytest.fixture
def app(qapp, tmp_path):
    window = App(settings=Settings(tmp_path / 'settings.json'))
    yield window
    window.close()
    window.deleteLater()


def key(k, mods=Qt.NoModifier):
    return QKeyEvent(QEvent.KeyPress, k, mods)


def test_modifiers_from_qt():
    mods = modifiers_from_qt(Qt.ShiftModifier | Qt.AltModifier)
    assert mods.range and mods.fine and mods.chromatic
    assert not mods.additive
    assert modifiers_from_qt(Qt.ControlModifier).additive
    assert not modifiers_from_qt(Qt.NoModifier).extends_selection


def test_vel_color():
    assert vel_color(0.0) == '#3c3cc8'
    assert vel_color(2.0) == vel_color(1.0)
    assert vel_color(1.0).startswith('#f0')


def test_app_seeds_default_progression(app):
    assert len(app.store.notes()) == 12
    lanes = app.preview.segmented
    assert len(lanes.bass) == 4
    assert len(lanes.chord) == 8
    assert app.preview.sections['bass'].count_label.text() == '4 notes'


def test_store_changes_refresh_both_views(app):
    app.editor.select_all()
    assert app.piano_roll.status_label.text() == '12 selected'
    app.editor.delete_selection()
    assert app.preview.sections['chord'].count_label.text() == '0 notes'
    assert app.preview.sections['chord'].range_label.text() == '—'


def test_keyboard_shortcuts(app):
    roll = app.piano_roll
    roll.keyPressEvent(key(Qt.Key_A, Qt.ControlModifier))
    assert len(app.editor.selection) == 12
    roll.keyPressEvent(key(Qt.Key_Escape))
    assert len(app.editor.selection) == 0

    roll.keyPressEvent(key(Qt.Key_A, Qt.ControlModifier))
    roll.keyPressEvent(key(Qt.Key_D, Qt.ControlModifier))
    assert len(app.store.notes()) == 24
    roll.keyPressEvent(key(Qt.Key_Delete))
    assert len(app.store.notes()) == 12


def test_key_selector_updates_editor(app):
    app.piano_roll.root_cb.setCurrentText('D')
    assert app.editor.key.root_pitch_class == 2
    app.piano_roll.scale_cb.setCurrentText('Minor')
    assert app.editor.key.allowed_pitch_classes == frozenset({2, 4, 5, 7, 9, 10, 0})


def test_snap_toggles(app):
    app.piano_roll.grid_btn.setChecked(False)
    assert not app.editor.grid.snap_enabled
    app.piano_roll.scale_btn.setChecked(False)
    assert not app.editor.snap_to_scale


def test_velocity_slider_sets_selected_notes(app):
    first = app.store.notes()[0].id
    app.editor.selection.replace([first])
    app.piano_roll.vel_slider.setValue(40)
    assert app.store.find_note(first).velocity == pytest.approx(0.4)
    assert app.store.notes()[1].velocity == 0.8


def test_widgets_on_empty_store(qapp):
    store = NoteStore()
    editor = NoteEditor(store)
    roll = PianoRoll(None, store, editor)
    preview = PreviewPanel(None, store)
    assert roll.status_label.text() == '0 selected'
    assert len(preview.segmented) == 0
    # painting must not fail with no notes and an active marquee
    editor.pointer_down(10, 10)
    editor.pointer_move(100, 100)
    roll.grid_widget.resize(400, 400)
    roll.grid_widget.grab()
    preview.grab()


def test_playhead_reaches_both_views(app):
    assert app.preview.sections['bass'].roll.playhead is None
    app.piano_roll.set_playhead_at(324)  # 2.025 s, on the grid at 2.0 s
    assert app.store.current_time == 2.0
    assert app.preview.sections['bass'].roll.playhead == 2.0
    app.piano_roll.grid_widget.resize(800, 400)
    app.piano_roll.grid_widget.grab()

    app.editor.select_all()
    app.editor.copy()
    ids = app.editor.paste()
    assert min(app.store.find_note(i).start for i in ids) == 2.0
