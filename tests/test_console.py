import logging

import pytest

from inapplog.config import Settings
from inapplog.console import InAppLog
from inapplog.log_buffer import LogBuffer, LogBufferHandler
from inapplog.models import LogLevel


def test_buffer_built_from_settings_capacity():
    c = InAppLog(settings=Settings(capacity=7))
    assert c.buffer.capacity == 7


def test_injected_buffer_is_used():
    buf = LogBuffer(capacity=3)
    assert InAppLog(buffer=buf).buffer is buf


def test_helpers_are_noops_before_initialize():
    c = InAppLog()
    c.info("ignored")
    c.add_log("ignored")
    assert not c.enabled
    assert c.buffer.count() == 0


def test_initialize_disabled_leaves_capture_off():
    c = InAppLog()
    c.initialize(enabled=False)
    c.error("ignored")
    assert c.buffer.count() == 0


def test_add_log_and_level_helpers(console):
    console.add_log("Test message", level=LogLevel.INFO)
    console.add_log("tagged", tag="TestTag")
    console.debug("d")
    console.info("i", tag="T")
    console.warning("w")
    console.error("e")
    recs = console.buffer.snapshot()
    assert recs[0].message == "Test message"
    assert recs[0].level is LogLevel.INFO
    assert recs[1].tag == "TestTag"
    assert recs[1].level is LogLevel.DEBUG
    assert [r.level for r in recs[2:]] == [
        LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARNING, LogLevel.ERROR]
    assert recs[3].tag == "T"


def test_error_with_exception_appends_traceback(console):
    try:
        raise ValueError("bad value")
    except ValueError as exc:
        console.error("parse failed", tag="Parser", exc=exc)
    rec = console.buffer.snapshot()[0]
    assert rec.message.startswith("parse failed\nTraceback")
    assert "ValueError: bad value" in rec.message
    assert rec.tag == "Parser"


def test_use_logging_routes_through_stdlib_logger():
    c = InAppLog()
    c.initialize(use_logging=True, level=LogLevel.INFO)
    try:
        assert c.logger is not None
        assert c.logger.level == logging.INFO
        c.debug("below level")
        c.warning("kept", tag="Net")
        c.info("untagged")
        recs = c.buffer.snapshot()
        assert [(r.level, r.tag, r.message) for r in recs] == [
            (LogLevel.WARNING, "Net", "kept"),
            (LogLevel.INFO, "inapplog.host", "untagged"),
        ]
    finally:
        c.dispose()


def test_create_logger_does_not_propagate(console):
    logger = console.create_logger("inapplog.tests.isolated")
    try:
        assert logger.propagate is False
        assert any(isinstance(h, LogBufferHandler) for h in logger.handlers)
        logger.debug("captured")
        assert console.buffer.snapshot()[-1].message == "captured"
    finally:
        console.dispose()
    assert not any(isinstance(h, LogBufferHandler) for h in logger.handlers)


def test_capture_logging_on_named_logger(console):
    target = logging.getLogger("inapplog.tests.captured")
    target.setLevel(logging.DEBUG)
    target.propagate = False
    handler = console.capture_logging(target)
    target.info("mirrored")
    assert console.buffer.snapshot()[-1].tag == "inapplog.tests.captured"
    console.dispose()
    assert handler not in target.handlers


def test_dispose_disables(console):
    console.dispose()
    console.info("after dispose")
    assert not console.enabled
    assert console.buffer.count() == 0


@pytest.mark.parametrize("enabled", [True, False])
def test_use_logging_requires_enabled(enabled):
    c = InAppLog()
    c.initialize(enabled=enabled, use_logging=True)
    assert (c.logger is not None) is enabled
    c.dispose()
