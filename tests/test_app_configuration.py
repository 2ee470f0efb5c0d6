from datetime import timedelta
from pathlib import Path

import pytest

from repostguard.configuration.app_configuration import (
    DEFAULT_BAN_REASON,
    AppConfig,
    ModerationSettings,
)


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "app_config.yml"


def test_app_config_reload_parses_yaml(config_path: Path) -> None:
    config_path.write_text(
        "channel_id: 123456\n"
        "log_level: debug\n"
        "database_path: data/test.db\n"
        "escalation:\n"
        "  timeout_hours: 1.5\n"
        "  ban_delete_message_days: 2\n"
        "  kick_reason: Bye\n",
        encoding="utf-8",
    )

    config = AppConfig(config_path, environ={})

    assert config.channel_id == 123456
    assert config.log_level == "debug"
    assert config.database_path == Path("data/test.db").resolve()
    assert config.timeout_duration == timedelta(hours=1.5)
    assert config.ban_delete_message_days == 2

    settings = config.moderation_settings()
    assert settings.target_channel_id == 123456
    assert settings.channel_filter_active is True
    assert settings.kick_reason == "Bye"
    assert settings.ban_reason == DEFAULT_BAN_REASON


def test_app_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = AppConfig(tmp_path / "does_not_exist.yml", environ={})

    assert config.data == {}
    assert config.channel_id == 0
    assert config.log_level == "info"
    assert config.moderation_settings() == ModerationSettings()


def test_environment_overrides_file(config_path: Path) -> None:
    config_path.write_text("channel_id: 1\nlog_level: info\n", encoding="utf-8")

    config = AppConfig(config_path, environ={"CHANNEL_ID": "999", "LOGGER_LEVEL": "warning"})

    assert config.channel_id == 999
    assert config.log_level == "warning"


def test_invalid_values_fall_back_to_defaults(config_path: Path) -> None:
    config_path.write_text(
        "channel_id: general\n"
        "escalation:\n"
        "  timeout_hours: -3\n"
        "  ban_delete_message_days: 30\n",
        encoding="utf-8",
    )

    config = AppConfig(config_path, environ={})

    assert config.channel_id == 0
    assert config.timeout_duration == timedelta(hours=3)
    assert config.ban_delete_message_days == 7


def test_non_mapping_yaml_is_ignored(config_path: Path) -> None:
    config_path.write_text("- just\n- a list\n", encoding="utf-8")

    config = AppConfig(config_path, environ={})

    assert config.data == {}


def test_broken_yaml_is_ignored(config_path: Path) -> None:
    config_path.write_text("channel_id: [unclosed\n", encoding="utf-8")

    config = AppConfig(config_path, environ={})

    assert config.data == {}


def test_reload_picks_up_changes(config_path: Path) -> None:
    config_path.write_text("channel_id: 1\n", encoding="utf-8")
    config = AppConfig(config_path, environ={})

    config_path.write_text("channel_id: 2\n", encoding="utf-8")
    config.reload()

    assert config.channel_id == 2


def test_moderation_settings_are_immutable() -> None:
    settings = ModerationSettings(target_channel_id=5)

    with pytest.raises(AttributeError):
        settings.target_channel_id = 6  # type: ignore[misc]
