"""Taskboard recurring-task scheduling service."""

__version__ = "1.0.0"
