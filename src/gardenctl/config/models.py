"""Pydantic models for the ``garden.yaml`` document.

Sparse contract: every section is optional and defaults are baked here.
These models validate the merged document; :mod:`gardenctl.config.loader`
turns them into the immutable :class:`~gardenctl.domain.model.Configuration`.

Keys the engine does not use (``remotes``, ``gitconfig``, ``links``, ...)
are accepted and ignored so existing garden files load unchanged.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from gardenctl.domain.model import DEFAULT_ROOT, DEFAULT_SHELL


def _to_str(value: Any) -> Any:
    """YAML scalars (ints, bools, floats) become their string form."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _to_str_list(value: Any) -> Any:
    """Accept a single scalar where a list of strings is expected."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [_to_str(v) for v in value]
    return [_to_str(value)]


Scalar = Annotated[str, BeforeValidator(_to_str)]
StrList = Annotated[list[str], BeforeValidator(_to_str_list)]


class GardenSection(BaseModel):
    """[garden] section — process-wide defaults."""

    model_config = {"frozen": True, "extra": "ignore"}

    root: Scalar = DEFAULT_ROOT
    shell: Scalar = DEFAULT_SHELL
    includes: StrList = Field(default_factory=list)


class TreeConfig(BaseModel):
    """One entry under ``trees``."""

    model_config = {"frozen": True, "extra": "ignore"}

    path: Scalar | None = None
    url: Scalar | None = None
    description: Scalar = ""
    shell: Scalar | None = None
    templates: StrList = Field(default_factory=list)
    variables: dict[str, Scalar] = Field(default_factory=dict)
    environment: dict[str, StrList] = Field(default_factory=dict)
    commands: dict[str, StrList] = Field(default_factory=dict)


class GardenConfig(BaseModel):
    """One entry under ``gardens``."""

    model_config = {"frozen": True, "extra": "ignore"}

    description: Scalar = ""
    trees: StrList = Field(default_factory=list)
    groups: StrList = Field(default_factory=list)
    variables: dict[str, Scalar] = Field(default_factory=dict)
    environment: dict[str, StrList] = Field(default_factory=dict)
    commands: dict[str, StrList] = Field(default_factory=dict)


class ConfigDocument(BaseModel):
    """Root document composing all sections."""

    model_config = {"frozen": True, "extra": "ignore"}

    garden: GardenSection = Field(default_factory=GardenSection)
    variables: dict[str, Scalar] = Field(default_factory=dict)
    environment: dict[str, StrList] = Field(default_factory=dict)
    commands: dict[str, StrList] = Field(default_factory=dict)
    trees: dict[str, TreeConfig] = Field(default_factory=dict)
    groups: dict[str, StrList] = Field(default_factory=dict)
    gardens: dict[str, GardenConfig] = Field(default_factory=dict)
