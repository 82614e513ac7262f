"""Service module exports."""

from . import backup, goals, habits, normalization, timer

__all__ = ["backup", "goals", "habits", "normalization", "timer"]
