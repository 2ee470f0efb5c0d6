from __future__ import annotations
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
import fcntl
import os
from typing import Any, Dict, Mapping
import yaml

from repostguard.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path(os.getenv("REPOSTGUARD_CONFIG", "./config/app_config.yml")).resolve()

DEFAULT_DATABASE_PATH = "./data/repostguard.db"
DEFAULT_TIMEOUT_HOURS = 3.0
DEFAULT_BAN_DELETE_MESSAGE_DAYS = 7
DEFAULT_TIMEOUT_REASON = "Reposting the same video"
DEFAULT_KICK_REASON = "Do not spam the same video! Next time it is a ban"
DEFAULT_BAN_REASON = "Do not spam the same video!"

# Environment variables that take precedence over the YAML file
ENV_CHANNEL_ID = "CHANNEL_ID"
ENV_LOG_LEVEL = "LOGGER_LEVEL"


@dataclass(frozen=True, slots=True)
class ModerationSettings:
    """Immutable settings the moderation engine is constructed with.

    Attributes:
        target_channel_id: Channel to moderate, 0 means every channel
        timeout_duration: Length of the first-offense timeout
        ban_delete_message_days: Days of history removed when banning (0-7)
        timeout_reason: Audit-log reason for timeouts
        kick_reason: Audit-log reason for kicks
        ban_reason: Audit-log reason for bans
    """
    target_channel_id: int = 0
    timeout_duration: timedelta = timedelta(hours=DEFAULT_TIMEOUT_HOURS)
    ban_delete_message_days: int = DEFAULT_BAN_DELETE_MESSAGE_DAYS
    timeout_reason: str = DEFAULT_TIMEOUT_REASON
    kick_reason: str = DEFAULT_KICK_REASON
    ban_reason: str = DEFAULT_BAN_REASON

    @property
    def channel_filter_active(self) -> bool:
        return self.target_channel_id != 0


def _coerce_int(value: Any, default: int, key: str) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.error("[APP CONFIGURATION] Invalid integer for %s: %r; using %s", key, value, default)
        return default


def _coerce_float(value: Any, default: float, key: str) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.error("[APP CONFIGURATION] Invalid number for %s: %r; using %s", key, value, default)
        return default


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml`` and exposes
    typed properties for every key the bot reads. ``CHANNEL_ID`` and
    ``LOGGER_LEVEL`` environment variables override the file.
    """

    def __init__(self, config_path: Path, environ: Mapping[str, str] | None = None) -> None:
        self.config_path = config_path
        self._environ = environ if environ is not None else os.environ
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.warning("[APP CONFIGURATION] Config file %s not found, using defaults.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.error("[APP CONFIGURATION] Config %s is not a mapping; ignoring it.", self.config_path)
            return {}
        return data

    def _section(self, key: str) -> Dict[str, Any]:
        value = self._data.get(key, {})
        return value if isinstance(value, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Re-read the YAML file, replace the in-memory cache and return it.

        The returned mapping is empty when the file is missing or invalid.
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """The cached configuration mapping. Callers should not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def channel_id(self) -> int:
        """Channel to moderate; 0 leaves moderation unrestricted."""
        raw = self._environ.get(ENV_CHANNEL_ID) or self._data.get("channel_id")
        return _coerce_int(raw, 0, "channel_id")

    @property
    def log_level(self) -> str:
        value = self._environ.get(ENV_LOG_LEVEL) or self._data.get("log_level") or "info"
        return str(value)

    @property
    def database_path(self) -> Path:
        value = self._data.get("database_path") or DEFAULT_DATABASE_PATH
        return Path(str(value)).resolve()

    @property
    def timeout_duration(self) -> timedelta:
        hours = _coerce_float(
            self._section("escalation").get("timeout_hours"), DEFAULT_TIMEOUT_HOURS, "escalation.timeout_hours"
        )
        if hours <= 0:
            logger.error("[APP CONFIGURATION] escalation.timeout_hours must be positive; using %s", DEFAULT_TIMEOUT_HOURS)
            hours = DEFAULT_TIMEOUT_HOURS
        return timedelta(hours=hours)

    @property
    def ban_delete_message_days(self) -> int:
        days = _coerce_int(
            self._section("escalation").get("ban_delete_message_days"),
            DEFAULT_BAN_DELETE_MESSAGE_DAYS,
            "escalation.ban_delete_message_days",
        )
        # Discord accepts 0 to 7 days of message deletion on ban
        return min(max(days, 0), 7)

    def moderation_settings(self) -> ModerationSettings:
        """Snapshot the current configuration into the settings the engine is built with."""
        escalation = self._section("escalation")
        return ModerationSettings(
            target_channel_id=self.channel_id,
            timeout_duration=self.timeout_duration,
            ban_delete_message_days=self.ban_delete_message_days,
            timeout_reason=str(escalation.get("timeout_reason") or DEFAULT_TIMEOUT_REASON),
            kick_reason=str(escalation.get("kick_reason") or DEFAULT_KICK_REASON),
            ban_reason=str(escalation.get("ban_reason") or DEFAULT_BAN_REASON),
        )
