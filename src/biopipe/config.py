"""Runtime settings resolved from the environment.

Settings are read fresh from the environment on every call to
``get_settings()``. Resolution is cheap and caching made tests that
flip ``BIOPIPE_HOME`` or ``BIOPIPE_ENV`` fragile.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .errors import OptionError


def _default_home() -> Path:
    """Return the user global directory for biopipe (~/.biopipe)."""
    return Path.home() / ".biopipe"


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Process-wide settings."""

    home: Path = Field(default_factory=_default_home)
    env: str = "production"
    debug: bool = False
    verbose: bool = False
    tmpdir: Optional[Path] = None
    smtp_host: str = "localhost"
    smtp_port: int = 25
    mail_from: Optional[str] = None
    cores_max: int = Field(default_factory=lambda: os.cpu_count() or 1)

    @property
    def is_test(self) -> bool:
        return self.env == "test"

    @property
    def log_path(self) -> Path:
        return self.home / "biopipe.log"

    @property
    def history_path(self) -> Path:
        return self.home / "history"

    @property
    def rc_path(self) -> Path:
        return self.home / "rc.json"


def get_settings(home_option: Optional[str] = None) -> Settings:
    """Resolve settings.

    Resolution order for the home directory:
    1. ``home_option`` (the CLI --home flag)
    2. $BIOPIPE_HOME
    3. ~/.biopipe

    Args:
        home_option: Value of --home CLI option if provided

    Returns:
        Settings built from the current environment
    """
    env = os.environ
    data: Dict[str, Any] = {
        "env": env.get("BIOPIPE_ENV", "production"),
        "debug": _flag(env.get("BIOPIPE_DEBUG")),
        "verbose": _flag(env.get("BIOPIPE_VERBOSE")),
        "smtp_host": env.get("BIOPIPE_SMTP_HOST", "localhost"),
        "smtp_port": env.get("BIOPIPE_SMTP_PORT", 25),
        "mail_from": env.get("BIOPIPE_MAIL_FROM"),
    }

    home = home_option or env.get("BIOPIPE_HOME")
    if home:
        data["home"] = Path(home)
    if env.get("BIOPIPE_TMPDIR"):
        data["tmpdir"] = Path(env["BIOPIPE_TMPDIR"])
    if env.get("BIOPIPE_CORES_MAX"):
        data["cores_max"] = env["BIOPIPE_CORES_MAX"]

    return Settings.model_validate(data)


def load_rc(command: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Return default options for ``command`` from $BIOPIPE_HOME/rc.json.

    The rc file maps command names to option mappings::

        {"write_fasta": {"force": true}, "usearch_global": {"cpus": 4}}
    """
    settings = settings or get_settings()
    path = settings.rc_path
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise OptionError(f"Malformed rc file {path}: {e}") from e

    defaults = data.get(command, {}) if isinstance(data, dict) else {}
    if not isinstance(defaults, dict):
        raise OptionError(f"rc entry for {command} must be an object: {path}")
    return defaults


__all__ = ["Settings", "get_settings", "load_rc"]
