"""
Runtime settings, read once from the environment at startup.

  INAPPLOG_ENABLED          — master switch; off in production builds (default on)
  INAPPLOG_CAPACITY         — max retained records (default 100000)
  INAPPLOG_LOG_LEVEL        — root logger level: DEBUG, INFO, WARNING or ERROR
  INAPPLOG_CAPTURE_LOGGING  — feed stdlib logging into the buffer (default on)
  INAPPLOG_API_TAG          — tag treated as "API" traffic by the viewer filter
  INAPPLOG_HOST / INAPPLOG_PORT — viewer API bind address
"""
import logging
import os
from dataclasses import dataclass

from inapplog.filters import API_TAG
from inapplog.log_buffer import DEFAULT_CAPACITY

log = logging.getLogger("inapplog.config")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _env_bool(env, key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    log.warning("%s=%r is not a boolean, using %s", key, raw, default)
    return default


def _env_int(env, key: str, default: int, minimum: int = 0) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning("%s=%r is not an integer, using %d", key, raw, default)
        return default
    if value < minimum:
        log.warning("%s=%d is below %d, using %d", key, value, minimum, default)
        return default
    return value


@dataclass
class Settings:
    enabled: bool = True
    capacity: int = DEFAULT_CAPACITY
    log_level: str = "INFO"
    capture_logging: bool = True
    api_tag: str = API_TAG
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls, env=None) -> "Settings":
        env = os.environ if env is None else env
        level = (env.get("INAPPLOG_LOG_LEVEL") or "INFO").strip().upper()
        if level not in LOG_LEVELS:
            log.warning("INAPPLOG_LOG_LEVEL=%r must be one of %s, using INFO", level, LOG_LEVELS)
            level = "INFO"
        return cls(
            enabled=_env_bool(env, "INAPPLOG_ENABLED", True),
            capacity=_env_int(env, "INAPPLOG_CAPACITY", DEFAULT_CAPACITY),
            log_level=level,
            capture_logging=_env_bool(env, "INAPPLOG_CAPTURE_LOGGING", True),
            api_tag=(env.get("INAPPLOG_API_TAG") or API_TAG).strip() or API_TAG,
            host=env.get("INAPPLOG_HOST") or "127.0.0.1",
            port=_env_int(env, "INAPPLOG_PORT", 8000, minimum=1),
        )

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "capacity": self.capacity,
            "log_level": self.log_level,
            "capture_logging": self.capture_logging,
            "api_tag": self.api_tag,
            "host": self.host,
            "port": self.port,
        }
