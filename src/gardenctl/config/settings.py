"""Unified settings — CLI flags and env vars in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click (only flags actually given)
  2. Env vars     — ``GARDEN_*`` prefix (``GARDEN_CONFIG_DIR``, ``GARDEN_ROOT``, ...)
  3. Code defaults

The workspace model itself (trees, groups, variables) lives in
``garden.yaml`` and is loaded by :mod:`gardenctl.config.loader`; these
settings only describe how this invocation runs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings

from gardenctl.config.discovery import find_config


def _given(value: Any) -> bool:
    """A CLI value counts as given unless it is an unset default."""
    return value is not None and value is not False and value != {}


class GardenSettings(BaseSettings):
    """Settings for one gardenctl invocation.

    Stored on the :class:`~gardenctl.commands._context.AppContext` at the
    CLI root level and frozen after construction.

    Attributes:
        config_path: The discovered or explicit config file, or None.
        config_dir: Seeds ``GARDEN_CONFIG_DIR``; defaults to the config
            file's directory when unset.
        root: Overrides ``garden.root`` from the config file.
        cwd: Directory the ``.`` query selector is resolved against.
        defines: ``-D name=value`` overrides, innermost in every scope.
        shell: Interpreter used for ``$ command`` expressions.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "GARDEN_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None
    config_dir: Path | None = None
    root: str | None = None
    cwd: Path = Field(default_factory=Path.cwd)
    defines: dict[str, str] = Field(default_factory=dict)
    shell: str = "sh"

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    keep_going: bool = False
    strict: bool = False

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | Path | None = None,
        cwd: Path | None = None,
        **cli_flags: Any,
    ) -> GardenSettings:
        """Construct settings from a CLI invocation.

        Uses *config_path* when given, otherwise discovers ``garden.yaml``
        from *cwd* (default: the process CWD).
        """
        path: Path | None
        if config_path:
            path = Path(config_path).expanduser()
        else:
            path = find_config(cwd)

        overrides = {key: value for key, value in cli_flags.items() if _given(value)}
        if cwd is not None:
            overrides["cwd"] = cwd
        return cls(config_path=path, **overrides)
