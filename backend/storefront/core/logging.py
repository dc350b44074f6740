import logging
import sys
from typing import Optional

from storefront.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure root logging once per process."""
    global _configured
    if _configured:
        return
    handlers: list = [logging.StreamHandler(sys.stdout)]
    target_file = log_file if log_file is not None else settings.LOG_FILE
    if target_file:
        handlers.append(logging.FileHandler(target_file))
    logging.basicConfig(
        level=str(level or settings.LOG_LEVEL or "INFO").upper(),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
