"""Logging configuration and utilities."""

import logging
import logging.handlers
import os
from pathlib import Path
from config.settings import settings

# Set once the TUI takes over the terminal
_console_suppressed = False

class CaptureContextFilter(logging.Filter):
    """Filter to add the capture interface to log records."""

    def __init__(self):
        super().__init__()
        self.capture_interface = None

    def set_capture_context(self, capture_interface: str):
        """Set the capture interface for this filter."""
        self.capture_interface = capture_interface

    def filter(self, record):
        """Add capture context to the log record."""
        record.capture_interface = self.capture_interface or 'default'
        return True

def get_logger(name: str, capture_interface: str = None) -> logging.Logger:
    """Get configured logger instance with optional capture context."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        # Configure logger
        level = getattr(logging, str(settings.get('logging.level', 'INFO')).upper(), logging.INFO)
        logger.setLevel(level)
        logger.propagate = False

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - [%(capture_interface)s] - %(levelname)s - %(message)s'
        )

        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.CRITICAL + 1 if _console_suppressed else level)
        console_handler.setFormatter(formatter)
        console_filter = CaptureContextFilter()
        if capture_interface:
            console_filter.set_capture_context(capture_interface)
        console_handler.addFilter(console_filter)
        logger.addHandler(console_handler)

        # File handler
        log_file = settings.get('logging.file', 'logs/heatbar.log')
        log_dir = os.path.dirname(log_file)
        if log_dir:
            Path(log_dir).mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=settings.get('logging.max_bytes', 10485760),
            backupCount=settings.get('logging.backup_count', 5)
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        file_filter = CaptureContextFilter()
        if capture_interface:
            file_filter.set_capture_context(capture_interface)
        file_handler.addFilter(file_filter)
        logger.addHandler(file_handler)

    if capture_interface:
        update_logger_capture_context(logger, capture_interface)

    return logger

def update_logger_capture_context(logger: logging.Logger, capture_interface: str):
    """Update the capture context for an existing logger."""
    for handler in logger.handlers:
        for filter_obj in handler.filters:
            if isinstance(filter_obj, CaptureContextFilter):
                filter_obj.set_capture_context(capture_interface)

def update_capture_context(capture_interface: str):
    """Tag every heatbar logger created so far with the capture interface."""
    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and name.startswith('src.'):
            update_logger_capture_context(logger, capture_interface)

def suppress_console_logging():
    """Silence console handlers while the TUI owns the terminal; file logging continues."""
    global _console_suppressed
    _console_suppressed = True
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger):
            continue
        for handler in logger.handlers:
            if type(handler) is logging.StreamHandler:
                handler.setLevel(logging.CRITICAL + 1)
