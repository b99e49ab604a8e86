"""Infrastructure errors – broker and database failures seen by the relay."""

from __future__ import annotations

from typing import Any

from mp_outbox.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure."""

    default_code = "infrastructure_error"


class PublishError(InfrastructureError):
    """The broker rejected or failed to acknowledge a batch."""

    default_code = "publish_error"

    def __init__(
        self,
        topic: str,
        message: str | None = None,
        *,
        batch_size: int | None = None,
        **kwargs: Any,
    ) -> None:
        detail = {"topic": topic}
        if batch_size is not None:
            detail["batch_size"] = batch_size
        kwargs.setdefault("detail", detail)
        super().__init__(message or f"Failed to publish to '{topic}'", **kwargs)
        self.topic = topic
        self.batch_size = batch_size


class OversizedBatchError(PublishError):
    """A message or batch exceeds the broker's size limit.

    Retrying can never succeed, so the relay purges the batch before
    re-raising.
    """

    default_code = "oversized_batch"

    def __init__(self, topic: str, message: str | None = None, **kwargs: Any) -> None:
        super().__init__(topic, message or f"Message batch too large for '{topic}'", **kwargs)


class DeleteRetryExhaustedError(InfrastructureError):
    """Published rows could not be deleted after all retry attempts.

    The rows stay in the outbox and will be published again on a later pass.
    """

    default_code = "delete_retry_exhausted"

    def __init__(self, topic: str, attempts: int, **kwargs: Any) -> None:
        kwargs.setdefault("detail", {"topic": topic, "attempts": attempts})
        super().__init__(
            f"Gave up deleting published rows for '{topic}' after {attempts} attempts",
            **kwargs,
        )
        self.topic = topic
        self.attempts = attempts


__all__ = [
    "DeleteRetryExhaustedError",
    "InfrastructureError",
    "OversizedBatchError",
    "PublishError",
]
