"""
============================================================================
HOSTWATCH - LOGGING UTILITY
============================================================================
Logging setup built on loguru: console sink, optional rotating file sink
(text or JSON) and a separate error log.

Call ``setup_logging(settings.logging)`` once at start-up. Until then
loguru's default stderr sink is used, which is what the tests rely on.
============================================================================
"""

import sys
from typing import Optional

from loguru import logger

from config.settings import LoggingSettings


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}"


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================

def setup_logging(settings: LoggingSettings) -> None:
    """
    Configure loguru sinks from the logging settings.

    Args:
        settings: Logging section of the application settings
    """
    logger.remove()
    logger.configure(extra={"name": "root"})

    log_level = settings.level.value

    # Console Handler
    if settings.to_console:
        logger.add(
            sys.stdout,
            format=CONSOLE_FORMAT,
            level=log_level,
            colorize=settings.colorize,
            backtrace=False,
            diagnose=False,
        )

    # File Handler
    if settings.to_file:
        log_file_path = settings.file_path
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file_path,
            format=FILE_FORMAT,
            level=log_level,
            rotation=settings.rotation,
            retention=settings.retention,
            compression="zip",
            serialize=settings.format == "json",
            backtrace=True,
            diagnose=False,
        )

        # Error log file (separate file for errors)
        logger.add(
            log_file_path.with_name("errors.log"),
            format=FILE_FORMAT,
            level="ERROR",
            rotation="1 day",
            retention="7 days",
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.bind(name="Logging").info(
        f"Logging initialized — level={log_level}, "
        f"console={settings.to_console}, file={settings.to_file}"
    )


def get_logger(name: Optional[str] = None):
    """
    Get logger instance with optional name.

    Args:
        name: Logger name shown in every record

    Returns:
        Bound loguru logger
    """
    return logger.bind(name=name or "root")


# ============================================================================
# END OF LOGGER MODULE
# ============================================================================
