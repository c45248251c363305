"""Load, layer, and validate garden configuration documents.

A document may list other documents under ``garden.includes``. Includes
are read first, in order, and the including document is merged on top, so
the file named on the command line always has the last word. Mappings
merge recursively; scalars and lists from later layers replace earlier ones.
Key order is first-seen order, which keeps tree declaration order stable
across layers.

Trees may pull shared definitions from ``templates``; a template may
``extend`` other templates. Template data sits underneath the tree's own.
"""

from __future__ import annotations

import logging
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from gardenctl.config.models import ConfigDocument, GardenConfig, TreeConfig
from gardenctl.domain.errors import ConfigError
from gardenctl.domain.model import (
    Configuration,
    EnvironmentEntry,
    Garden,
    Group,
    Tree,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Raw documents
# ---------------------------------------------------------------------------


def read_document(path: Path) -> dict[str, Any]:
    """Parse one YAML (or JSON) file into plain dicts and lists."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read {path}: {exc}"
        raise ConfigError(msg, path=str(path)) from exc
    try:
        data = YAML(typ="safe").load(raw)
    except YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise ConfigError(msg, path=str(path)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"{path}: top level must be a mapping"
        raise ConfigError(msg, path=str(path))
    return data


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge *override* onto *base* without mutating either.

    Examples:
        >>> deep_merge({"a": {"x": 1}, "b": 1}, {"a": {"y": 2}, "c": 3})
        {'a': {'x': 1, 'y': 2}, 'b': 1, 'c': 3}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_layers(path: Path, *, _visited: set[Path] | None = None) -> dict[str, Any]:
    """Read *path* and its ``garden.includes`` into one merged raw document."""
    visited = _visited if _visited is not None else set()
    resolved = path.resolve()
    if resolved in visited:
        logger.debug("Skipping already included %s", resolved)
        return {}
    visited.add(resolved)

    document = read_document(path)
    garden = document.get("garden") or {}
    includes = garden.get("includes") if isinstance(garden, dict) else None
    if isinstance(includes, str):
        includes = [includes]

    merged: dict[str, Any] = {}
    for include in includes or []:
        include_path = Path(str(include)).expanduser()
        if not include_path.is_absolute():
            include_path = path.parent / include_path
        if not include_path.is_file():
            logger.warning("Included config not found: %s", include_path)
            continue
        merged = deep_merge(merged, load_layers(include_path, _visited=visited))

    return deep_merge(merged, document)


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


def _normalize_entries(entries: Any, section: str) -> dict[str, dict[str, Any]]:
    """``name: null`` becomes ``{}``; ``name: <url>`` is shorthand for ``{url: ...}``."""
    if entries is None:
        return {}
    if not isinstance(entries, dict):
        msg = f"'{section}' must be a mapping"
        raise ConfigError(msg, section=section)
    normalized: dict[str, dict[str, Any]] = {}
    for name, body in entries.items():
        if body is None:
            body = {}
        elif isinstance(body, str):
            body = {"url": body}
        elif not isinstance(body, dict):
            msg = f"{section}.{name} must be a mapping"
            raise ConfigError(msg, section=section, name=str(name))
        normalized[str(name)] = body
    return normalized


def _template_data(
    name: str,
    templates: dict[str, dict[str, Any]],
    stack: list[str],
) -> dict[str, Any]:
    if name not in templates:
        msg = f"unknown template: {name}"
        raise ConfigError(msg, template=name)
    if name in stack:
        cycle = [*stack[stack.index(name) :], name]
        msg = f"circular template extension: {' -> '.join(cycle)}"
        raise ConfigError(msg, cycle=cycle)

    body = dict(templates[name])
    extends = body.pop("extend", None) or []
    if isinstance(extends, str):
        extends = [extends]

    stack.append(name)
    merged: dict[str, Any] = {}
    for parent in extends:
        merged = deep_merge(merged, _template_data(str(parent), templates, stack))
    stack.pop()
    return deep_merge(merged, body)


def apply_templates(document: dict[str, Any]) -> dict[str, Any]:
    """Return *document* with each tree's templates merged underneath it."""
    templates = _normalize_entries(document.get("templates"), "templates")
    trees = _normalize_entries(document.get("trees"), "trees")

    expanded: dict[str, dict[str, Any]] = {}
    for name, body in trees.items():
        names = body.get("templates") or []
        if isinstance(names, str):
            names = [names]
        base: dict[str, Any] = {}
        for template in names:
            base = deep_merge(base, _template_data(str(template), templates, []))
        expanded[name] = deep_merge(base, body)

    result = {k: v for k, v in document.items() if k != "templates"}
    result["trees"] = expanded
    return result


# ---------------------------------------------------------------------------
# Model construction
# ---------------------------------------------------------------------------


def _environment(section: dict[str, list[str]]) -> tuple[EnvironmentEntry, ...]:
    return tuple(EnvironmentEntry.parse(key, values) for key, values in section.items())


def _commands(section: dict[str, list[str]]) -> dict[str, tuple[str, ...]]:
    return {name: tuple(entries) for name, entries in section.items()}


def _tree(name: str, cfg: TreeConfig) -> Tree:
    return Tree(
        name=name,
        path=cfg.path if cfg.path else name,
        url=cfg.url,
        description=cfg.description,
        variables=dict(cfg.variables),
        environment=_environment(cfg.environment),
        commands=_commands(cfg.commands),
        shell=cfg.shell,
        templates=tuple(cfg.templates),
    )


def _garden(name: str, cfg: GardenConfig) -> Garden:
    return Garden(
        name=name,
        trees=tuple(cfg.trees),
        groups=tuple(cfg.groups),
        description=cfg.description,
        variables=dict(cfg.variables),
        environment=_environment(cfg.environment),
        commands=_commands(cfg.commands),
    )


def _warn_unknown_members(config: Configuration) -> None:
    for group in config.groups.values():
        for member in group.members:
            if member in config.trees or member in config.groups:
                continue
            if any(fnmatchcase(tree, member) for tree in config.trees):
                continue
            logger.warning("Group %s references unknown member: %s", group.name, member)


def build_configuration(
    document: ConfigDocument,
    *,
    config_dir: Path,
    path: Path | None = None,
) -> Configuration:
    """Turn a validated document into the immutable Configuration."""
    config = Configuration(
        config_dir=config_dir,
        path=path,
        root=document.garden.root,
        shell=document.garden.shell,
        trees={name: _tree(name, cfg) for name, cfg in document.trees.items()},
        groups={name: Group(name, tuple(members)) for name, members in document.groups.items()},
        gardens={name: _garden(name, cfg) for name, cfg in document.gardens.items()},
        variables=dict(document.variables),
        environment=_environment(document.environment),
        commands=_commands(document.commands),
    )
    _warn_unknown_members(config)
    return config


def parse_document(data: dict[str, Any]) -> ConfigDocument:
    """Apply templates and validate a raw merged document."""
    try:
        return ConfigDocument.model_validate(apply_templates(data))
    except ValidationError as exc:
        msg = f"Invalid configuration: {exc}"
        raise ConfigError(msg) from exc


def load_configuration(
    path: Path | None,
    *,
    config_dir: Path | None = None,
) -> Configuration:
    """Load the layered configuration rooted at *path*.

    Returns an empty Configuration when *path* is None. *config_dir*
    defaults to the config file's directory (or CWD without a file).
    """
    if config_dir is None:
        config_dir = path.parent.resolve() if path is not None else Path.cwd()

    if path is None:
        return Configuration(config_dir=config_dir)

    data = load_layers(path)
    document = parse_document(data)
    logger.debug(
        "Loaded %s: %d trees, %d groups, %d gardens",
        path,
        len(document.trees),
        len(document.groups),
        len(document.gardens),
    )
    return build_configuration(document, config_dir=config_dir, path=path)
