"""Service logging: one stdout handler on the root logger.

Chatty client libraries are held at WARNING so request logs stay readable;
httpx would otherwise log every SMS gateway call at INFO.
"""

import logging
import sys

from school_auth.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "asyncio")


def setup_logging() -> None:
    """Configure root logging from settings.

    DEBUG when settings.debug is set, otherwise settings.log_level. Calling
    it again (a second app in the same process) replaces the handler.
    """
    settings = get_settings()
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
