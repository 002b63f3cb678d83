"""Logging setup for the telemetry engine."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from devflow.telemetry.config import LogRotationConfig
from devflow.telemetry.constants import LOGGER_NAME


def configure_logging(
    log_level: str,
    log_file: Path | None = None,
    log_rotation: LogRotationConfig | None = None,
) -> logging.Logger:
    """Configure the ``devflow`` logger.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional log file path; stderr when omitted.
        log_rotation: Optional log rotation configuration.

    Returns:
        The configured package logger.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(level)
    # Host processes often configure the root logger; avoid duplicate lines
    app_logger.propagate = False
    # Reconfiguring must not stack handlers
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    if level == logging.DEBUG:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
            datefmt="%H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%H:%M:%S",
        )

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            rotation = log_rotation or LogRotationConfig()

            file_handler: logging.Handler
            if rotation.enabled:
                file_handler = RotatingFileHandler(
                    log_file,
                    mode="a",
                    maxBytes=rotation.get_max_bytes(),
                    backupCount=rotation.backup_count,
                    encoding="utf-8",
                )
            else:
                file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")

            file_handler.setFormatter(formatter)
            app_logger.addHandler(file_handler)
            return app_logger
        except OSError as e:
            stream_handler = logging.StreamHandler()
            stream_handler.setFormatter(formatter)
            app_logger.addHandler(stream_handler)
            app_logger.warning(f"Could not set up file logging to {log_file}: {e}")
            return app_logger

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    app_logger.addHandler(stream_handler)
    return app_logger
