"""Operations modules — editing logic extracted from the editor.

Each module contains functions or small classes that work against the
note store contract. NoteEditor wires these to pointer and keyboard
input and owns any gesture state.
"""
