"""BaseError – root of the relay's errors, shaped for structured log events."""

from __future__ import annotations

from typing import Any


class BaseError(Exception):
    """Root of every error the relay raises on purpose.

    Args:
        message: What went wrong, without the context already in *detail*.
        code: Stable slug for dashboards and alerts (``default_code`` if omitted).
        detail: Topic, batch size and other context; see :meth:`log_fields`.
        cause: Driver or broker exception behind this one.
    """

    default_code: str = "outbox_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = detail or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if not self.detail:
            return self.message
        context = " ".join(f"{key}={value}" for key, value in self.detail.items())
        return f"{self.message} [{context}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def log_fields(self) -> dict[str, Any]:
        """Flat key/values to pass to a structlog event alongside the event name."""
        fields: dict[str, Any] = {"error_code": self.code, **self.detail}
        if self.cause is not None:
            fields["error_cause"] = repr(self.cause)
        return fields


__all__ = ["BaseError"]
