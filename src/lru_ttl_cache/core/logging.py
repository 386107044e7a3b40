import logging
import sys
from typing import Optional
from loguru import logger
from lru_ttl_cache.core.settings import LogLevel, get_settings

PACKAGE = "lru_ttl_cache"


class InterceptHandler(logging.Handler):
    """Route stdlib logging records into loguru."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(level: Optional[LogLevel] = None) -> None:
    settings = get_settings()
    level_name = (level or settings.log_level).value

    logger.remove()
    logger.enable(PACKAGE)
    logger.add(
        sys.stderr,
        level=level_name,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> | {extra}",
    )
    if settings.log_file is not None:
        logger.add(
            settings.log_file,
            rotation="10 MB",
            retention="1 week",
            level=level_name,
            compression="zip",
            enqueue=True,  # sweeper thread logs too
            backtrace=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
