"""Clipboard and marquee selection for the piano roll.

Each editor owns its own NoteClipboard, so two editors open side by side
never share copied notes by accident.
"""

import logging
from typing import List

from PySide6.QtCore import QRectF

logger = logging.getLogger(__name__)


class MarqueeSelection:
    """Handles marquee (rectangular) selection on the note grid."""

    def __init__(self):
        self.is_active = False
        self.start_x = 0
        self.start_y = 0
        self.current_x = 0
        self.current_y = 0

    def start(self, x: float, y: float):
        """Start marquee selection."""
        self.is_active = True
        self.start_x = x
        self.start_y = y
        self.current_x = x
        self.current_y = y

    def update(self, x: float, y: float):
        """Move the live corner."""
        if self.is_active:
            self.current_x = x
            self.current_y = y

    def finish(self) -> QRectF:
        """Finish marquee and return the normalized selection rectangle."""
        if not self.is_active:
            return QRectF()
        rect = self.get_rect()
        self.is_active = False
        return rect

    def cancel(self):
        """Cancel marquee selection."""
        self.is_active = False

    def get_rect(self) -> QRectF:
        """Get current selection rectangle (for drawing)."""
        if not self.is_active:
            return QRectF()
        x1 = min(self.start_x, self.current_x)
        y1 = min(self.start_y, self.current_y)
        x2 = max(self.start_x, self.current_x)
        y2 = max(self.start_y, self.current_y)
        return QRectF(x1, y1, x2 - x1, y2 - y1)


def rect_bounds(rect: QRectF):
    """QRectF to a (left, top, right, bottom) tuple."""
    return rect.left(), rect.top(), rect.right(), rect.bottom()


class NoteClipboard:
    """Copied notes, stored relative to the earliest copied start."""

    def __init__(self):
        self.notes: List[dict] = []

    def copy(self, notes):
        """Copy notes to clipboard.

        Args:
            notes: List of Note objects to copy
        """
        if not notes:
            return
        min_start = min(n.start for n in notes)
        self.notes = []
        for n in sorted(notes, key=lambda n: (n.start, n.pitch)):
            d = n.to_dict()
            del d['id']  # pasted notes get fresh ids
            d['start'] -= min_start
            self.notes.append(d)
        logger.debug("Copied %d notes", len(self.notes))

    def paste(self, at_time=0.0):
        """Get clipboard contents placed at `at_time`.

        Returns:
            List of field dicts ready for NoteStore.add_note
        """
        if not self.notes:
            logger.debug("Nothing to paste")
            return []
        pasted = [dict(d, start=d['start'] + at_time) for d in self.notes]
        logger.debug("Pasted %d notes at %.3fs", len(pasted), at_time)
        return pasted

    def has_data(self) -> bool:
        """Check if clipboard has notes."""
        return len(self.notes) > 0
