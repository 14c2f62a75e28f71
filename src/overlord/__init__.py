"""overlord: personal task tracking, task record core."""

__version__ = "0.1.0"
