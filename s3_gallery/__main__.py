"""Module entry point for the S3 image gallery application."""
import logging
import sys

from PySide6 import QtWidgets

from .qt_view import GalleryWindow
from .settings import SettingsStorage


def main() -> None:
    settings = SettingsStorage().load()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QtWidgets.QApplication(sys.argv)
    app.setApplicationName("S3 Image Gallery")
    window = GalleryWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
