import logging

from flask import Blueprint, Response, current_app, jsonify, request

from inapplog.filters import LogFilter, export_text
from inapplog.models import LogLevel
from inapplog.presentation import describe_level

log = logging.getLogger("inapplog.routes.logs")

bp = Blueprint("logs", __name__)

TAIL_DEFAULT = 200
TAIL_MAX = 5000


def _console():
    return current_app.extensions["inapplog"]


@bp.route("/logs")
def get_logs():
    console = _console()
    tail = request.args.get("tail", default=TAIL_DEFAULT, type=int)
    tail = max(1, min(TAIL_MAX, tail))
    fmt = (request.args.get("format") or "json").strip().lower()
    with_time = request.args.get("time", "1").strip().lower() not in ("0", "false", "no", "off")

    try:
        log_filter = LogFilter.from_args(request.args, api_tag=console.settings.api_tag)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    records = console.buffer.snapshot()
    matched = log_filter.apply(records)
    lines = matched[-tail:]

    if fmt == "text":
        return Response(export_text(lines, with_time=with_time),
                        mimetype="text/plain; charset=utf-8")

    return jsonify({
        "lines": [r.to_dict() for r in lines],
        "count": len(records),
        "matched": len(matched),
    })


@bp.route("/logs", methods=["POST"])
def add_log():
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify({"error": "body must be a JSON object"}), 400
    message = data.get("message")
    if not isinstance(message, str):
        return jsonify({"error": "message must be a string"}), 400
    tag = data.get("tag")
    if tag is not None and not isinstance(tag, str):
        return jsonify({"error": "tag must be a string"}), 400

    console = _console()
    if not console.enabled:
        return jsonify({"ok": False, "reason": "log capture is disabled"})
    console.add_log(message, level=LogLevel.parse(data.get("level")), tag=tag or None)
    return jsonify({"ok": True})


@bp.route("/logs", methods=["DELETE"])
def clear_logs():
    _console().buffer.clear()
    return jsonify({"ok": True})


@bp.route("/status")
def status():
    console = _console()
    return jsonify({
        "enabled": console.enabled,
        "count": console.buffer.count(),
        "capacity": console.buffer.capacity,
    })


@bp.route("/settings")
def settings():
    return jsonify(_console().settings.to_dict())


@bp.route("/levels")
def levels():
    return jsonify([describe_level(lvl) for lvl in LogLevel])
