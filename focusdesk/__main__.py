"""Allow running FocusDesk as a module: python -m focusdesk."""

import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .app import FocusDeskApp


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("FOCUSDESK_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    logging.getLogger(__name__).info("FocusDesk ready")

    app = QApplication(sys.argv)
    app.setApplicationName("FocusDesk")
    app.setOrganizationName("FocusDesk")

    window = FocusDeskApp()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
