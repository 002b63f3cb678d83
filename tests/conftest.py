"""Pytest configuration and fixtures for devflow tests."""

import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from devflow.telemetry.config import TelemetryConfig
from devflow.telemetry.constants import LOGGER_NAME
from devflow.telemetry.engine import TelemetryEngine
from devflow.telemetry.host import CallbackHost
from devflow.telemetry.scheduling import VirtualClock, VirtualScheduler
from devflow.telemetry.sinks import MemorySink


@pytest.fixture
def temp_project_dir() -> Iterator[Path]:
    """Create a temporary project directory and chdir into it.

    Yields:
        Path to temporary directory
    """
    temp_dir = Path(tempfile.mkdtemp(prefix="devflow-test-"))
    original_cwd = Path.cwd()
    try:
        os.chdir(temp_dir)
        yield temp_dir
    finally:
        os.chdir(original_cwd)
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer DEVFLOW_* environment variables out of tests."""
    for name in list(os.environ):
        if name.startswith("DEVFLOW_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def _propagate_devflow_logs() -> Iterator[None]:
    """Let caplog see devflow records even after configure_logging ran."""
    app_logger = logging.getLogger(LOGGER_NAME)
    handlers = list(app_logger.handlers)
    propagate = app_logger.propagate
    level = app_logger.level
    app_logger.propagate = True
    yield
    for handler in list(app_logger.handlers):
        if handler not in handlers:
            app_logger.removeHandler(handler)
            handler.close()
    app_logger.propagate = propagate
    app_logger.setLevel(level)


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def scheduler(clock: VirtualClock) -> VirtualScheduler:
    return VirtualScheduler(clock)


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def host() -> CallbackHost:
    return CallbackHost()


@pytest.fixture
def engine(
    host: CallbackHost,
    sink: MemorySink,
    clock: VirtualClock,
    scheduler: VirtualScheduler,
) -> Iterator[TelemetryEngine]:
    """Started engine on virtual time with default thresholds."""
    telemetry_engine = TelemetryEngine(
        host, sink, TelemetryConfig(), clock=clock, scheduler=scheduler
    )
    telemetry_engine.start()
    yield telemetry_engine
    telemetry_engine.dispose()
