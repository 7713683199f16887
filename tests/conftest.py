import os

# Widgets are built without a display
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

import pytest

from pianoroll.editor import NoteEditor
from pianoroll.state import NoteStore


class FakeClock:
    """Clock that moves one second forward on every read."""

    def __init__(self, start=100.0, step=1.0):
        self.now = start
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def store():
    return NoteStore()


@pytest.fixture
def editor(store):
    return NoteEditor(store, clock=FakeClock())


@pytest.fixture
def events(store):
    """Sources of every store notification, in order."""
    seen = []
    store.on_change(seen.append)
    return seen


@pytest.fixture(scope='session')
def qapp():
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app
