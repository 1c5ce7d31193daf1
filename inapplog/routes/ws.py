"""
WebSocket live tail at /logs/ws.

Query args are the same filter args as GET /logs (search, level, api_only)
plus replay=1 to receive the retained history before live records. Each
record is sent as one JSON text frame:

  {"type": "record",  "ts": ..., "level": ..., "tag": ..., "message": ...}
  {"type": "cleared", ...}     # the buffer was cleared; always sent

The stream ends when the client disconnects or the buffer is disposed.
"""
import json
import logging

from flask import Blueprint, current_app, request
from flask_sock import Sock
from simple_websocket import ConnectionClosed

from inapplog.filters import LogFilter
from inapplog.log_buffer import Subscription, is_clear_marker
from inapplog.models import LogRecord

log = logging.getLogger("inapplog.routes.ws")

bp   = Blueprint("ws", __name__)
sock = Sock()   # routes attach to `bp`; no init_app needed

_POLL_INTERVAL = 1.0   # seconds between connection checks while idle


def _frame(record: LogRecord) -> str:
    payload = {"type": "cleared" if is_clear_marker(record) else "record"}
    payload.update(record.to_dict())
    return json.dumps(payload)


def stream_records(ws, subscription: Subscription, log_filter: LogFilter,
                   poll_interval: float = _POLL_INTERVAL) -> int:
    """
    Pump records from `subscription` to `ws` until either side ends.

    Returns the number of frames sent. The subscription is always closed.
    """
    sent = 0
    try:
        while getattr(ws, "connected", True):
            record = subscription.get(timeout=poll_interval)
            if record is None:
                if subscription.ended:
                    break
                continue
            if not (is_clear_marker(record) or log_filter.matches(record)):
                continue
            ws.send(_frame(record))
            sent += 1
    except ConnectionClosed:
        log.debug("Log tail client went away after %d frame(s)", sent)
    finally:
        subscription.close()
    return sent


@sock.route("/logs/ws", bp=bp)
def logs_ws(ws):
    console = current_app.extensions["inapplog"]
    try:
        log_filter = LogFilter.from_args(request.args, api_tag=console.settings.api_tag)
    except ValueError as e:
        try:
            ws.close(reason=1008, message=str(e))
        except ConnectionClosed:
            pass
        return
    replay = request.args.get("replay", "0").strip().lower() in ("1", "true", "yes", "on")

    log.info("Log tail opened from %s", request.remote_addr)
    sent = stream_records(ws, console.buffer.subscribe(replay=replay), log_filter)
    log.info("Log tail closed for %s (%d frame(s) sent)", request.remote_addr, sent)
