import logging
import sys
from typing import Optional

import structlog

from qcm_bank.core.config import settings


def configure_logging(debug: Optional[bool] = None, level: Optional[str] = None) -> None:
    """Configure stdlib logging and structlog for the whole process.

    Service modules log through ``logging.getLogger(__name__)``; entry points
    use ``structlog.get_logger()``. Both end up on the same stderr handler.
    """
    debug = settings.DEBUG if debug is None else debug
    level = (level or settings.LOG_LEVEL).upper()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
        force=True,
    )

    # Configure structured logging
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
