"""PySide6 widgets hosting the editor and the preview lanes."""
