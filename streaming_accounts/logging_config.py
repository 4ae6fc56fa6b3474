"""
Logging setup for the Streaming Accounts API.

Every module logs through the standard library:

    logger = logging.getLogger(__name__)

configure_logging() is called once from the application lifespan and installs
a single console handler on the root logger at settings.LOG_LEVEL.

What is NOT logged:
  - Plaintext passwords and parental-control PINs
  - Full session tokens (they are bearer credentials; only a short prefix
    may appear, and only at DEBUG level)
"""

import logging
import sys

from streaming_accounts.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str | None = None) -> None:
    """
    Install the console handler on the root logger.

    Safe to call more than once: later calls only adjust the level, so
    repeated app startups in tests don't stack duplicate handlers.
    """
    global _configured

    numeric_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)
        _configured = True

    # SQL echo is controlled by DEBUG on the engine; keep the driver quiet otherwise
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
