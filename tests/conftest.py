"""Shared pytest fixtures for inapplog tests."""

from datetime import datetime

import pytest

from inapplog.app import create_app
from inapplog.config import Settings
from inapplog.console import InAppLog
from inapplog.log_buffer import LogBuffer
from inapplog.models import LogLevel, LogRecord


@pytest.fixture
def buffer():
    """An initialized buffer with a small capacity."""
    buf = LogBuffer(capacity=5)
    buf.initialize()
    yield buf
    buf.dispose()


@pytest.fixture
def console():
    c = InAppLog(settings=Settings(capacity=100))
    c.initialize()
    yield c
    c.dispose()


@pytest.fixture
def client(console):
    app = create_app(console)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def sample_records():
    """The two records used by the filter scenarios."""
    ts = datetime(2024, 1, 1, 12, 0, 0)
    return [
        LogRecord(timestamp=ts, message="hello world", level=LogLevel.INFO),
        LogRecord(timestamp=ts, message="login failed", level=LogLevel.ERROR, tag="Auth"),
    ]
