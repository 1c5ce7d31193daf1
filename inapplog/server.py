"""
Development log viewer entrypoint.

Reads Settings from the environment, builds the InAppLog console, mirrors
stdlib logging into it and serves the viewer API. Does nothing when
INAPPLOG_ENABLED is off.
"""
import logging

from inapplog.app import create_app
from inapplog.config import Settings
from inapplog.console import InAppLog

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
)
log = logging.getLogger("inapplog.server")


def build_console(settings: Settings) -> InAppLog:
    console = InAppLog(settings=settings)
    if not settings.enabled:
        return console
    console.initialize()
    if settings.capture_logging:
        console.capture_logging()
    return console


def main():
    settings = Settings.from_env()
    logging.getLogger().setLevel(getattr(logging, settings.log_level, logging.INFO))

    if not settings.enabled:
        log.info("In-app log viewer disabled (INAPPLOG_ENABLED is off)")
        return

    console = build_console(settings)
    app = create_app(console, settings)
    log.info("Log viewer on http://%s:%d (capacity=%d)",
             settings.host, settings.port, settings.capacity)
    try:
        app.run(host=settings.host, port=settings.port, threaded=True)
    finally:
        console.dispose()


if __name__ == "__main__":
    main()
