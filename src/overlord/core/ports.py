# src/overlord/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task core.

The core depends on Protocols instead of concrete implementations.
This keeps the clock and the directory layout swappable and makes testing easier.
"""

from datetime import datetime
from pathlib import Path
from typing import Protocol


class Clock(Protocol):
    """Wall-clock time source used for 'started' stamping and elapsed time."""

    def now(self) -> datetime: ...


class DirectoryResolver(Protocol):
    """
    Maps (module name, year) to a base directory that exists on disk.

    Must be idempotent for the same inputs.
    Raises PathResolutionError when the directory can't be produced.
    """

    def __call__(self, module: str, year: str) -> Path: ...

