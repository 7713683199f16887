"""Four-lane preview of the note collection by musical role."""

from PySide6.QtWidgets import QFrame, QWidget, QLabel, QGridLayout, QVBoxLayout, QHBoxLayout
from PySide6.QtCore import Qt, QRectF
from PySide6.QtGui import QPainter, QColor, QPen

from ..core.segment import classify, pitch_range_label

LANES = [
    ('chord', 'Chord', '#22c55e'),
    ('melody', 'Melody', '#60a5fa'),
    ('bass', 'Bass', '#f59e0b'),
    ('arp', 'Arp', '#a78bfa'),
]


class MiniRollWidget(QWidget):
    """Small read-only piano roll for one lane."""

    BEAT_WIDTH = 26
    BEATS = 16

    def __init__(self, parent, color, seconds_per_beat=0.5):
        super().__init__(parent)
        self.color = QColor(color)
        self.seconds_per_beat = seconds_per_beat
        self.notes = []
        self.playhead = None
        self.setFixedSize(self.BEAT_WIDTH * self.BEATS, 120)

    def set_notes(self, notes):
        self.notes = list(notes)
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor('#111827'))

        # Bar lines
        painter.setPen(QPen(QColor('#1f2937'), 1))
        for beat in range(0, self.BEATS + 1, 4):
            x = beat * self.BEAT_WIDTH
            painter.drawLine(x, 0, x, self.height())

        if not self.notes:
            return

        lo = min(n.pitch for n in self.notes)
        hi = max(n.pitch for n in self.notes)
        span = max(1, hi - lo + 1)
        row = min(6.0, self.height() / span)
        px_per_sec = self.BEAT_WIDTH / self.seconds_per_beat

        painter.setPen(Qt.NoPen)
        painter.setBrush(self.color)
        for n in self.notes:
            y = (hi - n.pitch) * row + (self.height() - span * row) / 2
            painter.drawRect(QRectF(n.start * px_per_sec, y,
                                    max(2.0, n.duration * px_per_sec), max(2.0, row - 1)))

        if self.playhead is not None:
            painter.setPen(QPen(QColor('#f43f5e'), 1))
            x = int(self.playhead * px_per_sec)
            painter.drawLine(x, 0, x, self.height())


class MiniSection(QFrame):
    """Lane title, note count, pitch range and mini roll."""

    def __init__(self, parent, title, color, seconds_per_beat=0.5):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)

        hdr = QHBoxLayout()
        self.title_label = QLabel(title)
        self.title_label.setStyleSheet(f'color: {color}; font-weight: bold;')
        hdr.addWidget(self.title_label)
        hdr.addStretch()
        self.count_label = QLabel('0 notes')
        hdr.addWidget(self.count_label)
        self.range_label = QLabel(pitch_range_label([]))
        hdr.addWidget(self.range_label)
        layout.addLayout(hdr)

        self.roll = MiniRollWidget(self, color, seconds_per_beat)
        layout.addWidget(self.roll)

    def set_notes(self, notes, playhead=None):
        self.count_label.setText(f'{len(notes)} notes')
        self.range_label.setText(pitch_range_label(notes))
        self.roll.playhead = playhead
        self.roll.set_notes(notes)


class PreviewPanel(QFrame):
    """Chord / melody / bass / arp lanes, reclassified on every refresh."""

    def __init__(self, parent, store, bar_seconds=2.0, seconds_per_beat=0.5):
        super().__init__(parent)
        self.store = store
        self.bar_seconds = bar_seconds
        self.segmented = classify([], bar_seconds)

        layout = QGridLayout(self)
        self.sections = {}
        for i, (lane, title, color) in enumerate(LANES):
            section = MiniSection(self, title, color, seconds_per_beat)
            layout.addWidget(section, i // 2, i % 2)
            self.sections[lane] = section
        self.refresh()

    def refresh(self):
        self.segmented = classify(self.store.notes(), self.bar_seconds)
        playhead = self.store.current_time if self.store.current_time > 0 else None
        for lane, notes in self.segmented.lanes().items():
            self.sections[lane].set_notes(notes, playhead)
