"""Config – relay settings, loaders and validation errors."""
from mp_outbox.config.relay import ALL_TOPICS, RelaySettings, topic_selected
from mp_outbox.config.settings import DotenvSettingsLoader, EnvSettingsLoader, Settings, SettingsLoader
from mp_outbox.config.validation import ConfigError, InvalidSettingValueError, MissingRequiredSettingError

__all__ = [
    "ALL_TOPICS",
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "RelaySettings",
    "Settings",
    "SettingsLoader",
    "topic_selected",
]
