"""Observability – structured logging helpers."""
from mp_outbox.observability.logging.factory import configure_logging
from mp_outbox.observability.logging.processors import get_logger

__all__ = ["configure_logging", "get_logger"]
