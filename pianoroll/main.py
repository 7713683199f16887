#!/usr/bin/env python3
"""Piano Roll - standalone note editor.

A grid editor for placing, moving and resizing notes with scale and
rhythm snapping, plus a role-by-role preview. Built with PySide6.

Usage:
    pianoroll [--settings FILE] [--empty] [--debug]
    python -m pianoroll.main [--settings FILE] [--empty] [--debug]
"""
import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication

from .core.settings import Settings

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Piano Roll - note editor')
    parser.add_argument('--settings', type=str, default=None,
                        help='Path to a settings.json (default: ~/.config/pianoroll/settings.json)')
    parser.add_argument('--empty', action='store_true',
                        help='Start with no notes instead of the default progression')
    parser.add_argument('--debug', action='store_true',
                        help='Log gesture and clipboard details')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='[%(name)s] %(levelname)s %(message)s')

    settings = Settings(args.settings)
    logger.debug("Settings from %s: %s", settings.path, settings.as_dict())

    app = QApplication(sys.argv[:1])
    app.setStyle('Fusion')

    # Import here so the Qt application exists before any widget module
    from .app import App
    main_window = App(settings=settings, seed=not args.empty)
    main_window.show()

    return app.exec()


if __name__ == '__main__':
    sys.exit(main())
