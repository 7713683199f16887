"""Piano roll editor - note editing on a pitch/time grid."""

from PySide6.QtWidgets import (QFrame, QWidget, QScrollArea, QLabel, QPushButton,
                               QComboBox, QSlider, QVBoxLayout, QHBoxLayout)
from PySide6.QtCore import Qt, QRect, QRectF, QTimer
from PySide6.QtGui import QPainter, QColor, QPen, QFont, QKeyEvent

from ..editor import DragMode, MoveCoalescer, NoteEditor
from ..state import NOTE_NAMES, SCALE_TYPES, KeyContext, Modifiers

FRAME_MS = 16
KEYS_WIDTH = 44


def modifiers_from_qt(flags) -> Modifiers:
    """Map Qt keyboard modifiers to editor Modifiers.

    Ctrl/Cmd toggles selection, Shift extends it and switches to the fine
    grid, Alt places notes chromatically.
    """
    shift = bool(flags & Qt.ShiftModifier)
    return Modifiers(
        additive=bool(flags & (Qt.ControlModifier | Qt.MetaModifier)),
        range=shift,
        chromatic=bool(flags & Qt.AltModifier),
        fine=shift,
    )


def vel_color(v):
    """Convert velocity (0-1) to an RGB hex color string."""
    t = max(0.0, min(1.0, v))
    if t < 0.33:
        u = t / 0.33
        r, g, b = 60, int(60 + u * 160), int(200 - u * 60)
    elif t < 0.66:
        u = (t - 0.33) / 0.33
        r, g, b = int(60 + u * 180), int(220 - u * 40), int(140 - u * 100)
    else:
        u = (t - 0.66) / 0.34
        r, g, b = 240, int(180 - u * 120), int(40 - u * 40)
    return f'#{max(0,min(255,r)):02x}{max(0,min(255,g)):02x}{max(0,min(255,b)):02x}'


class PianoRoll(QFrame):
    """Piano roll editor with piano keys, note grid and key/snap controls."""

    VISIBLE_SECONDS = 16.0  # minimum grid length

    def __init__(self, parent, store, editor: NoteEditor, root_note='C',
                 scale_type='Major'):
        super().__init__(parent)
        self.store = store
        self.editor = editor
        self.moves = MoveCoalescer(editor)

        self._frame_timer = QTimer(self)
        self._frame_timer.setSingleShot(True)
        self._frame_timer.setInterval(FRAME_MS)
        self._frame_timer.timeout.connect(self._on_frame)

        self._build(root_note, scale_type)

    def _build(self, root_note, scale_type):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        # Header bar
        hdr = QFrame()
        hdr_layout = QHBoxLayout(hdr)
        hdr_layout.setContentsMargins(8, 4, 8, 4)

        self.status_label = QLabel('0 selected')
        self.status_label.setFont(QFont('TkDefaultFont', 9))
        hdr_layout.addWidget(self.status_label)
        hdr_layout.addStretch()

        # Key
        hdr_layout.addWidget(QLabel('Key'))
        self.root_cb = QComboBox()
        self.root_cb.addItems(NOTE_NAMES)
        self.root_cb.setCurrentText(root_note)
        self.root_cb.currentTextChanged.connect(self._on_key_change)
        hdr_layout.addWidget(self.root_cb)

        self.scale_cb = QComboBox()
        self.scale_cb.addItems(SCALE_TYPES)
        self.scale_cb.setCurrentText(scale_type)
        self.scale_cb.currentTextChanged.connect(self._on_key_change)
        hdr_layout.addWidget(self.scale_cb)

        # Snap toggles
        self.grid_btn = QPushButton('Grid')
        self.grid_btn.setCheckable(True)
        self.grid_btn.setChecked(self.editor.grid.snap_enabled)
        self.grid_btn.toggled.connect(lambda on: self._set_snap(grid=on))
        hdr_layout.addWidget(self.grid_btn)

        self.scale_btn = QPushButton('Scale')
        self.scale_btn.setCheckable(True)
        self.scale_btn.setChecked(self.editor.snap_to_scale)
        self.scale_btn.toggled.connect(lambda on: self._set_snap(scale=on))
        hdr_layout.addWidget(self.scale_btn)

        # Velocity slider
        hdr_layout.addWidget(QLabel('Vel'))
        self.vel_slider = QSlider(Qt.Horizontal)
        self.vel_slider.setRange(0, 100)
        self.vel_slider.setValue(int(round(self.editor.default_velocity * 100)))
        self.vel_slider.valueChanged.connect(self._on_vel_change)
        self.vel_slider.setMaximumWidth(100)
        hdr_layout.addWidget(self.vel_slider)

        self.vel_label = QLabel(f'{self.vel_slider.value()}')
        self.vel_label.setMinimumWidth(30)
        hdr_layout.addWidget(self.vel_label)

        layout.addWidget(hdr)

        # Main area: piano keys + canvas
        body = QHBoxLayout()
        body.setContentsMargins(0, 0, 0, 0)
        body.setSpacing(0)

        self.keys_scroll = QScrollArea()
        self.keys_scroll.setFixedWidth(KEYS_WIDTH)
        self.keys_scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.keys_scroll.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.keys_scroll.setWidgetResizable(False)

        self.keys_widget = PianoKeysWidget(self)
        self.keys_scroll.setWidget(self.keys_widget)
        body.addWidget(self.keys_scroll)

        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(False)

        self.grid_widget = PianoGridWidget(self)
        self.scroll_area.setWidget(self.grid_widget)
        body.addWidget(self.scroll_area, 1)

        # Sync scrolling
        self.scroll_area.verticalScrollBar().valueChanged.connect(
            self.keys_scroll.verticalScrollBar().setValue
        )

        layout.addLayout(body)

        self.setFocusPolicy(Qt.StrongFocus)
        self.refresh()

    def _on_key_change(self, _text=None):
        self.editor.set_key(KeyContext.from_names(self.root_cb.currentText(),
                                                  self.scale_cb.currentText()))
        self.refresh()

    def _set_snap(self, grid=None, scale=None):
        self.editor.set_snap(grid=grid, scale=scale)

    def _on_vel_change(self, value):
        self.vel_label.setText(str(value))
        self.editor.default_velocity = value / 100
        # If notes are selected, update their velocities
        if len(self.editor.selection):
            self.editor.set_velocity(value / 100)

    def refresh(self):
        """Resize the canvas to fit the notes and redraw."""
        geo = self.editor.geometry
        last_end = max((n.end for n in self.store.notes()), default=0.0)
        seconds = max(self.VISIBLE_SECONDS, last_end + 4 * geo.seconds_per_beat)
        total_w, total_h = geo.canvas_size(seconds)

        self.keys_widget.setMinimumSize(KEYS_WIDTH, int(total_h))
        self.grid_widget.setMinimumSize(int(total_w), int(total_h))
        self.status_label.setText(f'{len(self.editor.selection)} selected')

        self.keys_widget.update()
        self.grid_widget.update()

    def set_playhead_at(self, x):
        """Move the playhead to the grid step under x."""
        geo = self.editor.geometry
        self.store.set_current_time(self.editor.grid.quantize(geo.pixels_to_seconds(x)))

    # Pointer plumbing used by PianoGridWidget
    def _schedule_frame(self):
        if not self._frame_timer.isActive():
            self._frame_timer.start()

    def _on_frame(self):
        self.moves.flush()
        self.grid_widget.update()

    def keyPressEvent(self, event: QKeyEvent):
        """Handle keyboard shortcuts."""
        modifiers = event.modifiers()
        key = event.key()
        ctrl = bool(modifiers & (Qt.ControlModifier | Qt.MetaModifier))

        if key == Qt.Key_Escape:
            self.moves.cancel()
            self.editor.escape()
        elif ctrl and key == Qt.Key_C:
            self.editor.copy()
        elif ctrl and key == Qt.Key_X:
            self.editor.cut()
        elif ctrl and key == Qt.Key_V:
            self.editor.paste()
        elif ctrl and key == Qt.Key_D:
            self.editor.duplicate()
        elif ctrl and key == Qt.Key_A:
            self.editor.select_all()
        elif key in (Qt.Key_Delete, Qt.Key_Backspace):
            self.editor.delete_selection()
        else:
            super().keyPressEvent(event)
            return
        self.refresh()


class PianoKeysWidget(QWidget):
    """Piano keyboard on left side."""

    def __init__(self, parent):
        super().__init__(parent)
        self.parent_roll = parent

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)

        geo = self.parent_roll.editor.geometry
        nh = int(geo.row_height)

        for p in range(geo.min_pitch, geo.max_pitch + 1):
            y = int((geo.max_pitch - p) * geo.row_height)
            nm = NOTE_NAMES[p % 12]
            is_black = '#' in nm
            is_c = p % 12 == 0
            ik = self.parent_roll.editor.key.allows(p)
            oct = p // 12 - 1

            if is_black:
                bg = QColor('#2a1a50') if ik else QColor('#111')
            else:
                bg = QColor('#2e2450') if ik else QColor('#16213e')

            painter.fillRect(0, y, KEYS_WIDTH, nh, bg)
            painter.setPen(QColor('#1a1a2e'))
            painter.drawRect(0, y, KEYS_WIDTH, nh)

            if is_c:
                painter.setPen(QColor('#eee'))
                painter.setFont(QFont('TkDefaultFont', 6))
                painter.drawText(QRect(0, y, 40, nh),
                                 Qt.AlignRight | Qt.AlignVCenter, f'C{oct}')
                painter.setPen(QColor('#533483'))
                painter.drawLine(0, y + nh, KEYS_WIDTH, y + nh)
            elif not is_black:
                painter.setPen(QColor('#888'))
                painter.setFont(QFont('TkDefaultFont', 5))
                painter.drawText(QRect(0, y, 40, nh),
                                 Qt.AlignRight | Qt.AlignVCenter, f'{nm}{oct}')


class PianoGridWidget(QWidget):
    """Note grid for piano roll."""

    def __init__(self, parent):
        super().__init__(parent)
        self.parent_roll = parent
        self.setFocusPolicy(Qt.StrongFocus)

    def keyPressEvent(self, event):
        """Forward keyboard events to parent roll."""
        self.parent_roll.keyPressEvent(event)

    def mousePressEvent(self, event):
        # Qt routes the second press of a double-click here as well; the
        # editor recognises it from the timestamps.
        self.setFocus()
        pos = event.position()
        if event.button() == Qt.RightButton:
            self.parent_roll.set_playhead_at(pos.x())
            return
        if event.button() != Qt.LeftButton:
            return
        self.parent_roll.editor.pointer_down(
            pos.x(), pos.y(), modifiers_from_qt(event.modifiers()),
            timestamp=event.timestamp() / 1000.0)
        self.parent_roll.refresh()

    def mouseMoveEvent(self, event):
        if not event.buttons() & Qt.LeftButton:
            return
        pos = event.position()
        self.parent_roll.moves.push(pos.x(), pos.y(), modifiers_from_qt(event.modifiers()))
        self.parent_roll._schedule_frame()

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.LeftButton:
            return
        pos = event.position()
        self.parent_roll.moves.release(pos.x(), pos.y(),
                                       modifiers_from_qt(event.modifiers()))
        self.parent_roll.refresh()

    def focusOutEvent(self, event):
        # A release delivered elsewhere must not leave a drag stuck.
        if self.parent_roll.editor.mode is not DragMode.IDLE:
            self.parent_roll.moves.cancel()
            self.parent_roll.refresh()
        super().focusOutEvent(event)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)

        roll = self.parent_roll
        editor = roll.editor
        geo = editor.geometry
        nh = geo.row_height
        total_w = self.width()
        total_h = int(geo.pitch_count * nh)

        # Row backgrounds
        for p in range(geo.min_pitch, geo.max_pitch + 1):
            y = int((geo.max_pitch - p) * nh)
            is_black = '#' in NOTE_NAMES[p % 12]
            is_c = p % 12 == 0
            ik = editor.key.allows(p)

            if is_black:
                bg = QColor('#1e1a40') if ik else QColor('#15152a')
            else:
                bg = QColor('#252050') if ik else QColor('#1a1a30')

            painter.fillRect(0, y, total_w, int(nh), bg)

            line_color = QColor('#3a3a6a') if is_c else QColor('#222244')
            width = 1 if is_c else 0.5
            painter.setPen(QPen(line_color, width))
            painter.drawLine(0, y, total_w, y)

        # Beat lines, one per grid division
        divs = editor.grid.divisions_per_beat
        step = geo.beat_width / divs
        b = 0
        while b * step <= total_w:
            x = int(b * step)
            if b % (divs * 4) == 0:
                color, width = QColor('#4a4a8a'), 1.5
            elif b % divs == 0:
                color, width = QColor('#3a3a6a'), 1
            else:
                color, width = QColor('#222244'), 0.5
            painter.setPen(QPen(color, width))
            painter.drawLine(x, 0, x, total_h)
            b += 1

        # Notes
        selected = set(editor.selection.ids)
        for n in roll.store.notes():
            left, top, right, _ = geo.note_rect(n)
            color = QColor('#ffffff') if n.id in selected else QColor(vel_color(n.velocity))
            painter.setPen(QPen(QColor('#0ea5e9') if n.id in selected else QColor('#10b981'), 1))
            painter.setBrush(color)
            painter.drawRect(QRectF(left, top + 1, max(2.0, right - left - 1), nh - 2))

        # Marquee
        rect = editor.marquee_rect()
        if rect is not None:
            painter.setPen(QPen(QColor('#ffffff'), 1, Qt.DashLine))
            painter.setBrush(QColor(255, 255, 255, 30))
            painter.drawRect(rect)

        # Playhead
        if roll.store.current_time > 0:
            x = geo.playhead_x(roll.store.current_time)
            painter.setPen(QPen(QColor('#f43f5e'), 2))
            painter.drawLine(int(x), 0, int(x), total_h)

