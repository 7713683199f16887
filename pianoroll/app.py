"""Main application class - creates the window, wires up UI components."""

from PySide6.QtWidgets import QMainWindow, QWidget, QVBoxLayout, QSplitter
from PySide6.QtCore import Qt

from .core.settings import Settings
from .editor import NoteEditor
from .state import NoteStore, default_progression
from .ui.piano_roll import PianoRoll
from .ui.preview import PreviewPanel

STYLESHEET = """
    QMainWindow, QWidget {
        background-color: #16213e;
        color: #eeeeee;
    }
    QFrame {
        background-color: #16213e;
    }
    QPushButton {
        background-color: #1a1a2e;
        color: #eeeeee;
        border: 1px solid #2a2a4a;
        padding: 4px 8px;
        border-radius: 2px;
    }
    QPushButton:hover {
        background-color: #e94560;
        color: #ffffff;
    }
    QPushButton:checked {
        background-color: #e94560;
        color: #ffffff;
    }
    QComboBox {
        background-color: #1a1a2e;
        color: #eeeeee;
        border: 1px solid #2a2a4a;
        padding: 2px 4px;
    }
    QSlider::groove:horizontal {
        background: #1a1a2e;
        height: 4px;
    }
    QSlider::handle:horizontal {
        background: #e94560;
        width: 12px;
        margin: -4px 0;
        border-radius: 6px;
    }
"""


class App(QMainWindow):
    """Main application - owns the store, creates the window, coordinates UI."""

    def __init__(self, settings=None, seed=True):
        super().__init__()
        self.settings = settings or Settings()
        self.store = NoteStore(default_progression() if seed else None)
        self.editor = NoteEditor.from_settings(self.store, self.settings)

        self.setStyleSheet(STYLESHEET)
        self._build_ui()

        # Connect state observer after the widgets exist
        self.store.on_change(self._on_state_change)

    def _build_ui(self):
        """Build the main UI layout."""
        self.setWindowTitle('Piano Roll')
        self.resize(1200, 750)
        self.setMinimumSize(800, 500)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self.splitter = QSplitter(Qt.Vertical)
        self.splitter.setHandleWidth(4)

        self.piano_roll = PianoRoll(self.splitter, self.store, self.editor,
                                    root_note=self.settings.root_note,
                                    scale_type=self.settings.scale_type)
        self.splitter.addWidget(self.piano_roll)

        self.preview = PreviewPanel(self.splitter, self.store,
                                    bar_seconds=self.settings.bar_seconds,
                                    seconds_per_beat=self.editor.grid.seconds_per_beat)
        self.splitter.addWidget(self.preview)
        self.splitter.setSizes([480, 270])

        layout.addWidget(self.splitter)

    def _on_state_change(self, source=None):
        self.piano_roll.refresh()
        # selection changes do not affect the role lanes
        if source != 'selection':
            self.preview.refresh()
