import faulthandler
import logging
import sys

from PySide6.QtWidgets import QApplication

from disk_info.gui.main_window import MainWindow


def run() -> None:
    faulthandler.enable()
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    app.setApplicationName("Disk Info")

    w = MainWindow()
    w.show()

    raise SystemExit(app.exec())
