"""Config settings – Settings, validated environment-driven configuration."""
from __future__ import annotations

import dataclasses
from typing import Any, ClassVar
from urllib.parse import urlsplit, urlunsplit


def mask_url_password(url: str) -> str:
    """``mysql://relay:secret@db/app`` -> ``mysql://relay:***@db/app``."""
    parts = urlsplit(url)
    if parts.password is None:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return urlunsplit(parts._replace(netloc=netloc))


@dataclasses.dataclass
class Settings:
    """Dataclass settings read by :class:`EnvSettingsLoader`, checked on construction.

    ``_prefix`` is the environment variable prefix. Fields named in
    ``_url_fields`` hold connection URLs and are masked in :meth:`log_fields`.
    """

    _prefix: ClassVar[str] = ""
    _url_fields: ClassVar[tuple[str, ...]] = ()

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Raise :class:`InvalidSettingValueError` for unusable combinations."""

    def log_fields(self) -> dict[str, Any]:
        fields = dataclasses.asdict(self)
        for name in self._url_fields:
            if fields.get(name):
                fields[name] = mask_url_password(fields[name])
        return fields


__all__ = ["Settings", "mask_url_password"]
