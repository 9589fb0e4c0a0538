"""Logger module for the order service."""

import sys
from typing import Optional

from loguru import logger as loguru_logger

SERVICE_NAME = "order-service"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_service_logger(
    service_name: str = SERVICE_NAME,
    log_level: str = "INFO",
    log_file: Optional[str] = None,
):
    """Configure loguru sinks for the service.

    Args:
        service_name: Name bound to every record (e.g., 'order-service')
        log_level: Logging level (default: INFO)
        log_file: Optional path to a rotating log file

    Returns:
        logger: Configured loguru logger bound to the service name
    """
    # Remove any existing handlers
    loguru_logger.remove()

    loguru_logger.add(
        sys.stderr,
        level=log_level,
        format=CONSOLE_FORMAT,
        colorize=True,
        enqueue=True,
        catch=True,
        backtrace=True,
        diagnose=True,
    )

    if log_file:
        loguru_logger.add(
            log_file,
            level=log_level,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="10 MB",
            retention="1 week",
            compression="gz",
        )

    return loguru_logger.bind(service=service_name)


logger = loguru_logger.bind(service=SERVICE_NAME)

__all__ = ["logger", "setup_service_logger"]
