"""Config file discovery.

Looks for ``garden.yaml`` (or ``garden.yml`` / ``garden.json``) in the
search path, in priority order::

    .  ./garden  ./etc/garden  ~/.config/garden  ~/etc/garden  /etc/garden

Supports the GARDEN_CONFIG env var and the --config CLI flag as overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAMES = ("garden.yaml", "garden.yml", "garden.json")
CONFIG_ENV_VAR = "GARDEN_CONFIG"


def search_path(cwd: Path | None = None, home: Path | None = None) -> list[Path]:
    """Directories searched for a config file, highest priority first."""
    current = (cwd or Path.cwd()).resolve()
    home_dir = home or Path.home()
    return [
        current,
        current / "garden",
        current / "etc" / "garden",
        home_dir / ".config" / "garden",
        home_dir / "etc" / "garden",
        Path("/etc/garden"),
    ]


def find_config(cwd: Path | None = None, home: Path | None = None) -> Path | None:
    """Locate the config file.

    Returns the path to the config file, or None if not found.
    Checks GARDEN_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path).expanduser()
        if p.is_file():
            return p
        return None

    for directory in search_path(cwd, home):
        for filename in CONFIG_FILENAMES:
            candidate = directory / filename
            if candidate.is_file():
                return candidate
    return None
