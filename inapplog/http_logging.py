"""
requests.Session that logs its HTTP traffic into a LogBuffer (or an InAppLog's buffer).

Each request, response and transport error becomes one boxed multi-line
record tagged "API" (configurable), so the viewer's API-only filter can
isolate network traffic:

  ┌─ Request ──────────────
  │ GET https://example.com/data
  │ Headers:
  │   Accept: application/json
  └────────────────────────

Responses outside 2xx are logged at warning; RequestException at error
and then re-raised unchanged.
"""
import json
import logging

import requests

from inapplog.console import InAppLog
from inapplog.filters import API_TAG
from inapplog.log_buffer import LogBuffer
from inapplog.models import LogLevel

log = logging.getLogger("inapplog.http_logging")

_RULE = "─" * 55


def _format_data(data) -> str:
    """Pretty-print JSON-ish payloads; anything else is rendered as text."""
    if data is None:
        return "null"
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8", errors="replace")
    if isinstance(data, (dict, list)):
        try:
            return json.dumps(data, indent=2, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            return str(data)
    if isinstance(data, str):
        trimmed = data.strip()
        if trimmed.startswith(("{", "[")):
            try:
                return json.dumps(json.loads(trimmed), indent=2, ensure_ascii=False)
            except ValueError:
                return data
        return data
    return str(data)


class _Block:
    def __init__(self, title: str):
        self._lines = [f"┌─ {title} " + "─" * max(0, 52 - len(title))]

    def line(self, text: str) -> None:
        self._lines.append(f"│ {text}")

    def section(self, title: str, body: str) -> None:
        self.line(f"{title}:")
        for ln in body.split("\n"):
            self.line(f"  {ln}")

    def headers(self, headers) -> None:
        if not headers:
            return
        self.line("Headers:")
        for key, value in headers.items():
            self.line(f"  {key}: {value}")

    def render(self) -> str:
        return "\n".join(self._lines + ["└" + _RULE])


class LoggedSession(requests.Session):
    def __init__(self, target: LogBuffer | InAppLog, *,
                 log_request: bool = True,
                 log_response: bool = True,
                 log_error: bool = True,
                 log_request_headers: bool = True,
                 log_response_headers: bool = True,
                 log_request_body: bool = True,
                 log_response_body: bool = True,
                 tag: str = API_TAG):
        super().__init__()
        self.buffer = target.buffer if isinstance(target, InAppLog) else target
        self.log_request = log_request
        self.log_response = log_response
        self.log_error = log_error
        self.log_request_headers = log_request_headers
        self.log_response_headers = log_response_headers
        self.log_request_body = log_request_body
        self.log_response_body = log_response_body
        self.tag = tag

    def send(self, request, **kwargs):
        if self.log_request:
            self._log_request(request)
        try:
            response = super().send(request, **kwargs)
        except requests.RequestException as exc:
            if self.log_error:
                self._log_error(request, exc)
            raise
        if self.log_response:
            self._log_response(response, streamed=bool(kwargs.get("stream")))
        return response

    def _emit(self, block: _Block, level: LogLevel) -> None:
        self.buffer.append_text(block.render(), level=level, tag=self.tag)

    def _log_request(self, request: requests.PreparedRequest) -> None:
        block = _Block("Request")
        block.line(f"{request.method} {request.url}")
        if self.log_request_headers:
            block.headers(request.headers)
        if self.log_request_body and request.body is not None:
            block.section("Body", _format_data(request.body))
        self._emit(block, LogLevel.INFO)

    def _log_response(self, response: requests.Response, streamed: bool = False) -> None:
        block = _Block("Response")
        req = response.request
        if req is not None:
            block.line(f"{req.method} {req.url}")
        block.line(f"Status: {response.status_code} {response.reason or ''}".rstrip())
        if self.log_response_headers:
            block.headers(response.headers)
        if self.log_response_body:
            if streamed:
                block.line("Body: <streamed>")
            elif response.content:
                block.section("Body", _format_data(response.text))
        ok = 200 <= response.status_code < 300
        self._emit(block, LogLevel.INFO if ok else LogLevel.WARNING)

    def _log_error(self, request: requests.PreparedRequest, exc: requests.RequestException) -> None:
        block = _Block("Error")
        block.line(f"{request.method} {request.url}")
        block.line(f"Type: {type(exc).__name__}")
        resp = exc.response
        if resp is not None:
            block.line(f"Status: {resp.status_code} {resp.reason or ''}".rstrip())
            if self.log_response_body and resp.content:
                block.section("Error Body", _format_data(resp.text))
        else:
            block.line(f"Message: {exc}")
        self._emit(block, LogLevel.ERROR)
        log.debug("HTTP %s %s failed: %s", request.method, request.url, exc)
