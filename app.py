import logging
import os
import sys
from pathlib import Path

from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QApplication

from core.constants import APP_NAME, LOG_LEVEL_ENV
from ui.main_window import MainWindow


def _asset_path(*parts: str) -> Path:
    # PyInstaller onefile extracts bundled files under sys._MEIPASS.
    if getattr(sys, "frozen", False):
        return Path(getattr(sys, "_MEIPASS")) / Path(*parts)
    return Path(__file__).resolve().parent / Path(*parts)


def _configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> int:
    _configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_NAME)

    logo_path = _asset_path("assets", "Logo.png")
    if logo_path.exists():
        app.setWindowIcon(QIcon(str(logo_path)))

    w = MainWindow(logo_path=logo_path)
    w.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
