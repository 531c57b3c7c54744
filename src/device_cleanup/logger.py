# Centralized logging configuration for the device cleanup tool

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional


LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def setup_logging(log_level: str = "INFO",
                  log_to_file: bool = False,
                  log_dir: str = "logs",
                  max_file_size: int = 10 * 1024 * 1024,  # 10MB
                  backup_count: int = 5) -> logging.Logger:
    """
    Set up logging for a device cleanup run.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to files as well as the console
        log_dir: Directory for log files
        max_file_size: Maximum size of each log file in bytes
        backup_count: Number of backup log files to keep

    Returns:
        Configured root logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    # Clear any existing handlers so repeated runs don't double-log
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path / "device_cleanup.log",
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        # Errors only
        error_handler = logging.handlers.RotatingFileHandler(
            log_path / "device_cleanup_errors.log",
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        logger.addHandler(error_handler)

    logging.getLogger('requests').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    logger.debug(f"Logging initialized (level={log_level}, to_file={log_to_file})")
    if log_to_file:
        logger.debug(f"Log directory: {os.path.abspath(log_dir)}")

    return logger


def log_device_action(device_name: str, action: str, result: str,
                      details: Optional[str] = None):
    """
    Log a single device action with structured format.

    Args:
        device_name: Name of the device being processed
        action: Action being performed (e.g., "INVENTORY_DELETE", "DIRECTORY_LOOKUP")
        result: Result of the action ("SUCCESS", "FAILED", "SKIPPED", "DRY_RUN")
        details: Additional details about the action
    """
    logger = logging.getLogger(__name__)

    message = f"DEVICE_ACTION | {device_name} | {action} | {result}"
    if details:
        message += f" | {details}"

    if result == "SUCCESS":
        logger.info(message)
    elif result == "FAILED":
        logger.error(message)
    else:
        logger.warning(message)


def log_system_event(event_type: str, message: str, level: str = "INFO"):
    """
    Log a system event with consistent formatting.

    Args:
        event_type: Type of event (e.g., "RUN_START", "RUN_END", "AUTH")
        message: Event message
        level: Log level name
    """
    logger = logging.getLogger(__name__)
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.log(log_level, f"SYSTEM_EVENT | {event_type} | {message}")


def log_performance_metric(operation: str, duration_seconds: float,
                           device_count: int = 0, success_count: int = 0):
    """Log run timing and success rate."""
    logger = logging.getLogger(__name__)

    message = f"PERFORMANCE | {operation} | Duration: {duration_seconds:.2f}s"
    if device_count > 0:
        message += f" | Devices: {device_count}"
        success_rate = (success_count / device_count) * 100
        message += f" | Success Rate: {success_rate:.1f}%"

    logger.info(message)
