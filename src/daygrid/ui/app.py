from __future__ import annotations

import logging
import sys

from PyQt6.QtWidgets import QApplication

from ..bootstrap import configure_logging
from ..config import AppPalette, get_settings
from ..core import ensure_data_dir
from ..services import ServiceContext
from .main_window import MainWindow
from .styles.theme import apply_palette

logger = logging.getLogger(__name__)


def run_gui() -> None:
    configure_logging()
    ensure_data_dir()
    app = QApplication.instance() or QApplication(sys.argv)
    settings = get_settings()
    app.setApplicationName(settings.ui.app_name)
    app.setOrganizationName(settings.ui.organization)
    palette = AppPalette()
    apply_palette(app, palette)

    if not settings.supabase.is_configured:
        logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY are not set; the calendar will fail to load")

    window = MainWindow(context=ServiceContext(settings=settings), palette=palette)
    window.show()
    sys.exit(app.exec())
