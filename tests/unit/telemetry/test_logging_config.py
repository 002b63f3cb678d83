"""Tests for devflow logger configuration."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from devflow.telemetry.config import LogRotationConfig
from devflow.telemetry.logging_config import configure_logging


class TestConfigureLogging:
    def test_stream_handler_by_default(self) -> None:
        logger = configure_logging("WARNING")
        assert logger.name == "devflow"
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert type(logger.handlers[0]) is logging.StreamHandler

    def test_reconfigure_does_not_stack_handlers(self) -> None:
        configure_logging("INFO")
        logger = configure_logging("DEBUG")
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_rotating_file_handler(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "telemetry.log"
        logger = configure_logging(
            "INFO", log_file=log_file, log_rotation=LogRotationConfig(max_size_mb=1)
        )
        handler = logger.handlers[0]
        assert isinstance(handler, RotatingFileHandler)
        assert handler.maxBytes == 1024 * 1024

        logger.info("hello")
        handler.flush()
        assert "hello" in log_file.read_text(encoding="utf-8")

    def test_plain_file_handler_without_rotation(self, tmp_path: Path) -> None:
        logger = configure_logging(
            "INFO",
            log_file=tmp_path / "telemetry.log",
            log_rotation=LogRotationConfig(enabled=False),
        )
        assert type(logger.handlers[0]) is logging.FileHandler
