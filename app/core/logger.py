import sys
from loguru import logger
import logging

from app.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[env]}</magenta> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

class InterceptHandler(logging.Handler):
    def emit(self, record):
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())

def _is_audit(record) -> bool:
    return record["extra"].get("audit", False)

def setup_logging(level: str = None):
    """
    Console output for everything, plus two files:
    logs/bookings.log keeps every created/deleted booking (records bound with audit=True),
    logs/errors.log keeps errors only.
    """
    level = (level or settings.LOG_LEVEL).upper()

    logger.remove() # Remove default handler
    logger.configure(extra={"env": settings.ENVIRONMENT, "audit": False})

    logger.add(sys.stdout, level=level, format=CONSOLE_FORMAT)

    # Booking changes, kept longer than errors
    logger.add(
        "logs/bookings.log",
        level="INFO",
        filter=_is_audit,
        rotation="1 week",
        retention="6 months",
        format="{time:YYYY-MM-DDTHH:mm:ss.SSSZ} | {message}"
    )

    logger.add(
        "logs/errors.log",
        level="ERROR",
        rotation="10 MB",
        retention="1 month",
        compression="zip",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
    )

    # Uvicorn and FastAPI log through the stdlib
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("filelock").setLevel(logging.WARNING)

# Export singleton logger
__all__ = ["logger", "setup_logging"]
