# src/overlord/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (.env is loaded if present).
- Module directories (data_dir/<module>/<year>) are resolved here and nowhere else.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .tasks.errors import PathResolutionError

ENV_PREFIX = "OVERLORD"

logger = logging.getLogger(__name__)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- Local data ----
    data_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "overlord").strip() or "overlord"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/overlord"))
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            data_dir=data_dir,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS


class ModuleDirResolver:
    """
    Resolve (module, year) to data_dir/module/year, creating it on demand.

    Calling it twice with the same arguments returns the same path.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir).expanduser()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def __call__(self, module: str, year: str) -> Path:
        module = (module or "").strip()
        year = (year or "").strip()
        if not module or not year:
            raise PathResolutionError(f"module and year are required, got {module!r}/{year!r}")
        if os.sep in module or os.sep in year:
            raise PathResolutionError(f"invalid module directory {module!r}/{year!r}")

        path = self._data_dir / module / year
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PathResolutionError(f"cannot create module directory {path}: {e}") from e

        logger.debug("Module dir resolved module=%s year=%s path=%s", module, year, path)
        return path


def module_dir(module: str, year: str, *, settings: Settings | None = None) -> Path:
    if settings is None:
        settings = get_settings()
    return ModuleDirResolver(settings.data_dir)(module, year)
