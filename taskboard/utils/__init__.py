"""Shared utilities: structured logging and metrics."""
