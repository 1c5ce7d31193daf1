import json
import threading

import pytest
from simple_websocket import Client, ConnectionClosed
from werkzeug.serving import make_server

from inapplog.app import create_app
from inapplog.filters import LogFilter
from inapplog.log_buffer import CLEARED_MESSAGE
from inapplog.models import LogLevel
from inapplog.routes.ws import stream_records


class FakeSocket:
    """Collects sent frames; optionally stops accepting after `limit` frames."""

    def __init__(self, limit=None):
        self.frames = []
        self.limit = limit
        self.connected = True

    def send(self, data):
        if self.limit is not None and len(self.frames) >= self.limit:
            self.connected = False
            raise ConnectionClosed()
        self.frames.append(json.loads(data))


def _run(ws, sub, log_filter, **kw):
    t = threading.Thread(target=stream_records, args=(ws, sub, log_filter),
                         kwargs={"poll_interval": 0.05, **kw})
    t.start()
    return t


def test_streams_until_buffer_disposed(buffer):
    ws = FakeSocket()
    sub = buffer.subscribe()
    t = _run(ws, sub, LogFilter())
    buffer.append_text("one", level=LogLevel.INFO)
    buffer.append_text("two", tag="T")
    buffer.dispose()
    t.join(timeout=5)
    assert not t.is_alive()
    assert [f["message"] for f in ws.frames] == ["one", "two"]
    assert ws.frames[0]["type"] == "record"
    assert ws.frames[1]["tag"] == "T"
    assert sub.ended


def test_filter_applies_but_clear_marker_always_sent(buffer):
    ws = FakeSocket()
    sub = buffer.subscribe()
    t = _run(ws, sub, LogFilter(level=LogLevel.ERROR))
    buffer.append_text("skipped", level=LogLevel.INFO)
    buffer.append_text("kept", level=LogLevel.ERROR)
    buffer.clear()
    buffer.dispose()
    t.join(timeout=5)
    assert [(f["type"], f["message"]) for f in ws.frames] == [
        ("record", "kept"),
        ("cleared", "--- Logs cleared ---"),
    ]


def test_replay_sends_history_first(buffer):
    buffer.append_text("old")
    ws = FakeSocket()
    t = _run(ws, buffer.subscribe(replay=True), LogFilter())
    buffer.append_text("new")
    buffer.dispose()
    t.join(timeout=5)
    assert [f["message"] for f in ws.frames] == ["old", "new"]


def test_client_disconnect_closes_subscription(buffer):
    ws = FakeSocket(limit=1)
    sub = buffer.subscribe()
    for i in range(3):
        buffer.append_text(f"m{i}")
    sent = stream_records(ws, sub, LogFilter(), poll_interval=0.05)
    assert sent == 1
    assert sub.ended
    buffer.append_text("after")
    assert sub.drain() == []


def test_stops_when_socket_reports_disconnected(buffer):
    ws = FakeSocket()
    ws.connected = False
    sub = buffer.subscribe()
    assert stream_records(ws, sub, LogFilter(), poll_interval=0.01) == 0
    assert sub.ended


def test_lookalike_message_is_filtered_like_any_record(buffer):
    ws = FakeSocket()
    t = _run(ws, buffer.subscribe(), LogFilter(level=LogLevel.ERROR))
    buffer.append_text(CLEARED_MESSAGE, level=LogLevel.INFO)
    buffer.append_text("kept", level=LogLevel.ERROR)
    buffer.dispose()
    t.join(timeout=5)
    assert [(f["type"], f["message"]) for f in ws.frames] == [("record", "kept")]


def test_lookalike_message_unfiltered_is_a_record(buffer):
    ws = FakeSocket()
    t = _run(ws, buffer.subscribe(), LogFilter())
    buffer.append_text(CLEARED_MESSAGE, level=LogLevel.INFO)
    buffer.clear()
    buffer.dispose()
    t.join(timeout=5)
    assert [f["type"] for f in ws.frames] == ["record", "cleared"]


@pytest.fixture
def live_server(console):
    """The viewer app served on an ephemeral port; yields (console, port)."""
    server = make_server("127.0.0.1", 0, create_app(console), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield console, server.server_port
    console.dispose()
    server.shutdown()
    thread.join(timeout=5)


def test_route_replays_filters_and_tails(live_server):
    console, port = live_server
    console.info("chatter")
    console.error("boom", tag="Net")
    client = Client.connect(f"ws://127.0.0.1:{port}/logs/ws?replay=1&level=error")
    try:
        first = json.loads(client.receive(timeout=5))
        assert (first["type"], first["message"], first["tag"]) == ("record", "boom", "Net")

        console.info("still chatter")
        console.error("again")
        assert json.loads(client.receive(timeout=5))["message"] == "again"

        console.buffer.clear()
        cleared = json.loads(client.receive(timeout=5))
        assert (cleared["type"], cleared["message"]) == ("cleared", CLEARED_MESSAGE)
    finally:
        client.close()


def test_route_rejects_unknown_level(live_server):
    _, port = live_server
    client = Client.connect(f"ws://127.0.0.1:{port}/logs/ws?level=verbose")
    with pytest.raises(ConnectionClosed) as excinfo:
        client.receive(timeout=5)
    assert excinfo.value.reason == 1008
