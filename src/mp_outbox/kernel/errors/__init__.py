"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    └── InfrastructureError
        ├── PublishError
        │   └── OversizedBatchError
        └── DeleteRetryExhaustedError

Configuration errors (``ConfigError``) live in :mod:`mp_outbox.config`.
"""

from mp_outbox.kernel.errors.base import BaseError
from mp_outbox.kernel.errors.infrastructure import (
    DeleteRetryExhaustedError,
    InfrastructureError,
    OversizedBatchError,
    PublishError,
)

__all__ = [
    "BaseError",
    "DeleteRetryExhaustedError",
    "InfrastructureError",
    "OversizedBatchError",
    "PublishError",
]
