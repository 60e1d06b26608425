"""
GridBazaar - Logger Configuration
Centralized logging with loguru

Sinks:
- stdout, colourised
- gridbazaar.log: everything
- error.log: errors only
- activity.log: marketplace activity (realtime events, announcements,
  notifications, email verification)

Verification codes are masked in every sink.
"""
import re
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from gridbazaar.config import settings


FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

ACTIVITY_MODULES = (
    "gridbazaar.realtime",
    "gridbazaar.core.social",
    "gridbazaar.core.verification",
)

_CODE_RE = re.compile(r"(verification code\W{0,3})\d{4,12}", re.IGNORECASE)


def redact_codes(record: dict) -> None:
    """Mask digits following 'verification code' in the message."""
    record["message"] = _CODE_RE.sub(r"\1******", record["message"])


def is_activity(record: dict) -> bool:
    name = record["name"] or ""
    return name.startswith(ACTIVITY_MODULES)


def configure_logging(log_dir: Optional[str] = None, level: Optional[str] = None) -> None:
    """Replace all sinks with the GridBazaar set."""
    level = level or ("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)
    log_path = Path(log_dir or settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(patcher=redact_codes)

    logger.add(sys.stdout, colorize=True, format=CONSOLE_FORMAT, level=level)

    rotating = {"rotation": "10 MB", "retention": "30 days", "compression": "gz", "format": FILE_FORMAT}
    logger.add(log_path / "gridbazaar.log", level="DEBUG", **rotating)
    logger.add(log_path / "error.log", level="ERROR", **rotating)
    logger.add(log_path / "activity.log", level="INFO", filter=is_activity, **rotating)


configure_logging()

__all__ = ["logger", "configure_logging"]
