import logging
import os
from logging.handlers import RotatingFileHandler

from config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"


def setup_logging() -> None:
    """Configure the root logger once.

    Logs always go to stderr. When LOG_DIR is set, a rotating
    ``daily_report.log`` is written there as well.
    """
    root = logging.getLogger()
    if getattr(root, "_daily_report_configured", False):
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if settings.LOG_DIR:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        handler = RotatingFileHandler(
            os.path.join(settings.LOG_DIR, "daily_report.log"),
            maxBytes=1_000_000,
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root.setLevel(settings.LOG_LEVEL.upper())
    root._daily_report_configured = True
