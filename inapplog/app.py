"""
Flask app factory for the log viewer API.

The InAppLog console is injected rather than imported, and handlers read
it back from app.extensions["inapplog"].
"""
import logging

from flask import Flask

from inapplog.config import Settings
from inapplog.console import InAppLog
from inapplog.routes import docs as docs_bp
from inapplog.routes import logs as logs_bp
from inapplog.routes import ws as ws_bp

log = logging.getLogger("inapplog.app")


def create_app(console: InAppLog, settings: Settings | None = None) -> Flask:
    if settings is not None:
        console.settings = settings
    app = Flask(__name__)
    app.extensions["inapplog"] = console

    app.register_blueprint(logs_bp.bp)
    app.register_blueprint(ws_bp.bp)
    app.register_blueprint(docs_bp.bp)

    log.debug("Viewer app created (capacity=%d, enabled=%s)",
              console.buffer.capacity, console.enabled)
    return app
