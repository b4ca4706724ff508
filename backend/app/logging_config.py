"""Logging configuration for the Chart Signals API."""
import logging
import sys
from typing import Optional

# Loggers that record money movements; their level can be set apart from the app's
LEDGER_LOGGERS = ("app.services.earnings", "app.routers.webhooks")


def _resolve_level(level: Optional[str], default: int = logging.INFO) -> int:
    if not level:
        return default
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else default


def setup_logging(level: Optional[str] = None, ledger_level: Optional[str] = None) -> None:
    """
    Configure logging for the API process and the admin scripts.

    Args:
        level: Root level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Unknown or missing names fall back to INFO.
        ledger_level: Level for the earnings and webhook loggers. Defaults
               to ``level`` so ledger events follow the root level.
    """
    log_level = _resolve_level(level)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    ledger_log_level = _resolve_level(ledger_level, default=log_level)
    for name in LEDGER_LOGGERS:
        logging.getLogger(name).setLevel(ledger_log_level)

    logging.getLogger("uvicorn").setLevel(log_level)
    logging.getLogger("uvicorn.access").setLevel(log_level)
    # Third-party clients only report problems
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)
