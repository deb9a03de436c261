"""
Logging Configuration Module.

This module provides centralized logging configuration for the invoice
manager. It supports both file and console logging with configurable
levels and formats. Records logged while an invoice is being processed
carry that invoice's id (the ``%(invoice)s`` format field).

Usage:
    from invoice_manager.utils.logger import setup_logger, get_logger

    # Initialize logging (call once at startup)
    setup_logger()

    # Get logger in any module
    logger = get_logger(__name__)
    logger.info("Processing invoice...")

    # Tag every record logged inside the block
    with invoice_context(42):
        logger.info("Extracting text")
"""

import logging
import logging.handlers
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Iterator, Optional

import colorama
from colorama import Fore, Style

colorama.init()

ROOT_LOGGER_NAME = "invoice_manager"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(invoice)s | %(message)s"
NO_INVOICE = "-"

_current_invoice: ContextVar[Optional[int]] = ContextVar("current_invoice", default=None)


@contextmanager
def invoice_context(invoice_id: Optional[int]) -> Iterator[None]:
    """Attach ``invoice_id`` to every record logged inside the block."""
    token = _current_invoice.set(invoice_id)
    try:
        yield
    finally:
        _current_invoice.reset(token)


class InvoiceContextFilter(logging.Filter):
    """Sets ``record.invoice`` to "invoice <id>", or "-" outside an invoice."""

    def filter(self, record: logging.LogRecord) -> bool:
        invoice_id = _current_invoice.get()
        record.invoice = NO_INVOICE if invoice_id is None else f"invoice {invoice_id}"
        return True


class ColoredFormatter(logging.Formatter):
    """
    Console formatter that colors the level name and brightens the
    invoice tag, leaving the message itself uncolored.

    Colors:
        - DEBUG: Cyan
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Red (bold)
    """

    COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }
    RESET = Style.RESET_ALL

    def format(self, record: logging.LogRecord) -> str:
        # The record is shared with the file handler
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelno, '')
        record.levelname = f"{color}{record.levelname:<8}{self.RESET}"
        invoice = getattr(record, 'invoice', NO_INVOICE)
        if invoice != NO_INVOICE:
            record.invoice = f"{Style.BRIGHT}{invoice}{self.RESET}"
        return super().format(record)


def setup_logger(
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,  # 10 MB
    backup_count: int = 5,
    colorize: bool = True
) -> logging.Logger:
    """
    Configure the application logger.

    This function should be called once at application startup. All
    subsequent calls to get_logger() inherit this configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Custom log format string.
        date_format: Custom date format string.
        log_file: Path to log file. If None, file logging is disabled.
        max_bytes: Maximum log file size before rotation.
        backup_count: Number of backup files to keep.
        colorize: Whether to colorize console output.

    Returns:
        Configured application logger.

    Example:
        >>> setup_logger(level="DEBUG", log_file="logs/app.log")
    """
    if log_format is None:
        log_format = DEFAULT_FORMAT
    if date_format is None:
        date_format = "%Y-%m-%d %H:%M:%S"

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper()))

    if colorize:
        console_formatter = ColoredFormatter(log_format, datefmt=date_format)
    else:
        console_formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler.setFormatter(console_formatter)
    console_handler.addFilter(InvoiceContextFilter())
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(getattr(logging, level.upper()))
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        file_handler.addFilter(InvoiceContextFilter())
        root_logger.addHandler(file_handler)

    root_logger.propagate = False

    root_logger.debug("Logging initialized successfully")
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Name for the logger, typically __name__.

    Returns:
        Logger instance under the application namespace.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Processing started")
    """
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logger_from_config(level: Optional[str] = None) -> logging.Logger:
    """
    Initialize logging using settings from the configuration file.

    Args:
        level: Optional level overriding the configured one.

    Returns:
        Configured application logger.
    """
    from invoice_manager.config import get_config

    log_file = None
    if get_config("logging.file.enabled", False):
        log_file = get_config("logging.file.path")

    return setup_logger(
        level=level or get_config("logging.level", "INFO"),
        log_format=get_config("logging.format"),
        date_format=get_config("logging.date_format"),
        log_file=log_file,
        max_bytes=get_config("logging.file.max_bytes", 10485760),
        backup_count=get_config("logging.file.backup_count", 5),
        colorize=get_config("logging.console.colorize", True)
    )
