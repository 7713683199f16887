"""Piano roll note editor.

The interaction engine (`pianoroll.editor`) and everything under
`pianoroll.core` and `pianoroll.ops` is toolkit-free; `pianoroll.ui` and
`pianoroll.app` host it in PySide6 widgets.
"""

__version__ = '0.3.0'
