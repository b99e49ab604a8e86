"""Kernel – errors, time, messaging ports and the runner interface."""
