"""Config settings – 12-factor env-based configuration."""
from mp_outbox.config.settings.base import Settings
from mp_outbox.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = ["DotenvSettingsLoader", "EnvSettingsLoader", "Settings", "SettingsLoader"]
