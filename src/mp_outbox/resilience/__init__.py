"""Resilience – backoff, jitter and explicit retry state."""
