import os
import sys
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Tuple
from datetime import datetime

from nearby_weather.const import APP_TZ, LOG_DIR

# --- Configuration ---
LOG_LEVEL_CONSOLE = logging.INFO
LOG_LEVEL_GENERAL = logging.INFO
LOG_LEVEL_ERROR = logging.ERROR
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024 # 5 MB
LOG_FILE_BACKUP_COUNT = 3


# --- Utility Functions ---
def ensure_log_directory(log_dir: str = LOG_DIR) -> bool:
    """Ensure the log directory exists and is writable."""
    try:
        os.makedirs(log_dir, exist_ok=True)
        test_log_path = os.path.join(log_dir, 'permission_test.log')
        with open(test_log_path, 'w') as f:
            f.write('Test log write\n')
        os.remove(test_log_path)
        return True
    except OSError as e:
        print(f"WARNING: Log directory {log_dir} is not writable, logging to console only: {e}", file=sys.stderr)
        return False


# --- Custom Formatters ---

class AppTimezoneFormatter(logging.Formatter):
    """Formatter that renders timestamps in the configured application timezone."""

    def formatTime(self, record, datefmt=None):
        """Formats the timestamp to always include milliseconds."""
        dt = datetime.fromtimestamp(record.created, APP_TZ)
        if datefmt:
            return dt.strftime(datefmt.replace('%f', f'{dt.microsecond // 1000:03d}'))
        return f"{dt.strftime('%Y-%m-%d %H:%M:%S')},{dt.microsecond // 1000:03d} {dt.strftime('%z')}"


class ViewContextFormatter(AppTimezoneFormatter):
    """Formatter that includes the presenting screen and chat in every line."""
    def format(self, record):
        record.screen = getattr(record, 'screen', 'N/A')
        record.chat_id = getattr(record, 'chat_id', 'N/A')
        return super().format(record)


# --- Logging System Initialization ---

def _file_handler(filename: str, formatter: logging.Formatter, log_dir: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        os.path.join(log_dir, filename),
        maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUP_COUNT, encoding='utf-8'
    )
    handler.setFormatter(formatter)
    return handler


def initialize_logging(log_dir: Optional[str] = None) -> Tuple[logging.Logger, logging.Logger]:
    """Set up the general and error loggers with console and rotating file handlers."""
    log_dir = log_dir or LOG_DIR
    files_enabled = ensure_log_directory(log_dir)

    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    log_format_with_context = '%(asctime)s - %(name)s - %(levelname)s - Ctx:[%(screen)s][%(chat_id)s] - %(message)s'
    time_format = '%Y-%m-%d %H:%M:%S,%f %z'

    console_formatter = AppTimezoneFormatter(log_format, datefmt=time_format)
    context_formatter = ViewContextFormatter(log_format_with_context, datefmt=time_format)

    # --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL_CONSOLE)
    console_handler.setFormatter(console_formatter)

    # --- General Logger ---
    general_logger = logging.getLogger('nearby_weather.general')
    general_logger.setLevel(LOG_LEVEL_GENERAL)
    general_logger.handlers.clear()
    general_logger.addHandler(console_handler)
    if files_enabled:
        general_logger.addHandler(_file_handler('general.log', context_formatter, log_dir))
    general_logger.propagate = False

    # --- Error Logger ---
    error_logger = logging.getLogger('nearby_weather.error')
    error_logger.setLevel(LOG_LEVEL_ERROR)
    error_logger.handlers.clear()
    error_logger.addHandler(console_handler)
    if files_enabled:
        error_logger.addHandler(_file_handler('error.log', context_formatter, log_dir))
    error_logger.propagate = False

    # --- Suppress noisy library logs ---
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("telegram.ext").setLevel(logging.INFO)

    return general_logger, error_logger


def shutdown_logging() -> None:
    """Flush and close every handler owned by the application loggers."""
    for name in ('nearby_weather.general', 'nearby_weather.error'):
        for handler in list(logging.getLogger(name).handlers):
            handler.flush()
            handler.close()
    logging.shutdown()


# --- Initialize logging when this module is imported ---
general_logger, error_logger = initialize_logging()
