from PySide6.QtWidgets import QApplication
from PySide6.QtCore import QCoreApplication, QSettings

import sys
import os

ORG_ID = "mindcanvas"
APP_ID = "mindcanvas"
ORG_DOMAIN = "mindcanvas.local"

VISIBLE_APP_NAME = "MindCanvas"


def create_app(argv: list[str] | None = None) -> QApplication:
    """Create and configure the QApplication instance (reuses a running one)."""
    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")

    QCoreApplication.setOrganizationName(ORG_ID)
    QCoreApplication.setOrganizationDomain(ORG_DOMAIN)
    QCoreApplication.setApplicationName(APP_ID)
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv if argv is None else argv)

    # Set the visible, translatable display name
    visible_name = QCoreApplication.translate("App", VISIBLE_APP_NAME)
    app.setApplicationDisplayName(visible_name)

    return app


def last_store_path() -> str | None:
    """Store file used in the previous session, if any."""
    value = QSettings().value("store/path", "", type=str)
    return value or None
