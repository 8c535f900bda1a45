"""
Logging configuration for Storefront API.

Console output is colored through colorlog, file output rotates under
LOG_DIR. Until setup_logging() applies the settings, the first get_logger()
call installs a console-only handler at INFO.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import colorlog


LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def line_format(debug_mode: bool) -> str:
    """Record layout; debug mode adds function and line number."""
    origin = "%(name)s.%(funcName)s:%(lineno)d" if debug_mode else "%(name)s"
    return "%(asctime)s [%(levelname)8s] " + origin + " - %(message)s"


class StorefrontLogger:
    """Configures a named logger with console and rotating file handlers."""

    def __init__(self, name: str = "storefront", level: str = "INFO",
                 log_dir: Optional[str] = None, debug_mode: bool = False):
        self.name = name
        self.logger = logging.getLogger(name)
        self._setup_logger(level.upper(), log_dir, debug_mode)

    def _setup_logger(self, log_level: str, log_dir: Optional[str], debug_mode: bool) -> None:
        """Console always; a rotating file under ``log_dir`` when one is given."""
        self.logger.setLevel(getattr(logging, log_level, logging.INFO))

        # Re-running setup must not stack handlers
        self.logger.handlers.clear()

        self._setup_console_handler(debug_mode)
        if log_dir:
            Path(log_dir).mkdir(parents=True, exist_ok=True)
            self._setup_file_handler(log_dir, debug_mode)

        self.logger.propagate = False

    def _setup_console_handler(self, debug_mode: bool) -> None:
        handler = colorlog.StreamHandler(sys.stdout)
        handler.setFormatter(colorlog.ColoredFormatter(
            "%(log_color)s" + line_format(debug_mode),
            datefmt=DATE_FORMAT,
            log_colors=LOG_COLORS,
        ))
        self.logger.addHandler(handler)

    def _setup_file_handler(self, log_dir: str, debug_mode: bool) -> None:
        """storefront.log, rotated at 5MB with 5 backups."""
        handler = logging.handlers.RotatingFileHandler(
            Path(log_dir) / "storefront.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(line_format(debug_mode), datefmt=DATE_FORMAT))
        self.logger.addHandler(handler)

    def get_logger(self) -> logging.Logger:
        return self.logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for the given name.

    Modules under the ``storefront`` package get a plain child logger that
    propagates to the configured ``storefront`` root, so handlers are set
    up once and shared.

    Args:
        name: Logger name. If None, uses the caller's module name.

    Returns:
        Logger instance.
    """
    if name is None:
        frame = sys._getframe(1)
        name = frame.f_globals.get('__name__', 'storefront')

    root = logging.getLogger("storefront")
    if not root.handlers:
        StorefrontLogger("storefront")

    return logging.getLogger(name)


def setup_logging() -> None:
    """
    Setup application-wide logging configuration from settings.

    Called once at application startup and by the CLI.
    """
    from storefront.utils.config import get_settings

    settings = get_settings()
    logger = StorefrontLogger(
        "storefront",
        level=settings.log_level,
        log_dir=settings.log_dir if settings.log_to_file else None,
        debug_mode=settings.debug_mode,
    ).get_logger()
    logger.info("Logging system initialized")
    logger.debug(f"Log level: {logger.level}")
    logger.debug(f"Handlers: {[h.__class__.__name__ for h in logger.handlers]}")
