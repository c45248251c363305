"""Configuration model — trees, groups, gardens, and the merged Configuration.

All models are frozen. Mappings preserve declaration order, which is the
order every selection is reported in. Raw values are unevaluated
expressions; evaluation lives in :mod:`gardenctl.infrastructure.evaluation`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import TypeAlias

from gardenctl.domain.errors import ConfigError, UnknownTree
from gardenctl.domain.types import MergeMode, TargetKind

DEFAULT_SHELL = "sh"
DEFAULT_ROOT = "${GARDEN_CONFIG_DIR}"

Commands: TypeAlias = dict[str, tuple[str, ...]]


@dataclass(frozen=True)
class EnvironmentEntry:
    """One ``environment`` key: a variable name, its values, and a merge mode.

    The key suffix selects the mode, following the original garden syntax::

        PATH: ${TREE_PATH}/bin     # prepend (default)
        PATH+: ${TREE_PATH}/bin    # append
        EDITOR=: vim               # set
    """

    name: str
    values: tuple[str, ...]
    mode: MergeMode = MergeMode.PREPEND

    @classmethod
    def parse(cls, key: str, value: str | list[str] | None) -> EnvironmentEntry:
        if value is None:
            values: tuple[str, ...] = ()
        elif isinstance(value, str):
            values = (value,)
        else:
            values = tuple(str(v) for v in value)

        if key.endswith("="):
            return cls(name=key[:-1], values=values, mode=MergeMode.SET)
        if key.endswith("+"):
            return cls(name=key[:-1], values=values, mode=MergeMode.APPEND)
        return cls(name=key, values=values, mode=MergeMode.PREPEND)


@dataclass(frozen=True)
class Tree:
    """A named working directory with its own variables, environment, and commands."""

    name: str
    path: str
    url: str | None = None
    description: str = ""
    variables: dict[str, str] = field(default_factory=dict)
    environment: tuple[EnvironmentEntry, ...] = ()
    commands: Commands = field(default_factory=dict)
    shell: str | None = None
    templates: tuple[str, ...] = ()


@dataclass(frozen=True)
class Group:
    """A named, ordered set of tree names, group names, or tree glob patterns."""

    name: str
    members: tuple[str, ...] = ()


@dataclass(frozen=True)
class Garden:
    """A named aggregate of trees and groups that contributes a scope layer."""

    name: str
    trees: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()
    description: str = ""
    variables: dict[str, str] = field(default_factory=dict)
    environment: tuple[EnvironmentEntry, ...] = ()
    commands: Commands = field(default_factory=dict)


@dataclass(frozen=True)
class TreeContext:
    """A selected tree plus the garden it was selected through, if any."""

    tree: str
    garden: str | None = None

    @property
    def label(self) -> str:
        """Scope identity used in error messages and cache keys."""
        if self.garden is None:
            return f"tree:{self.tree}"
        return f"garden:{self.garden}/tree:{self.tree}"


@dataclass(frozen=True)
class Configuration:
    """The merged, immutable workspace model for one run."""

    config_dir: Path
    path: Path | None = None
    root: str = DEFAULT_ROOT
    shell: str = DEFAULT_SHELL
    trees: dict[str, Tree] = field(default_factory=dict)
    groups: dict[str, Group] = field(default_factory=dict)
    gardens: dict[str, Garden] = field(default_factory=dict)
    variables: dict[str, str] = field(default_factory=dict)
    environment: tuple[EnvironmentEntry, ...] = ()
    commands: Commands = field(default_factory=dict)

    def __post_init__(self) -> None:
        seen: dict[str, str] = {name: "tree" for name in self.trees}
        for kind, names in (("group", self.groups), ("garden", self.gardens)):
            for name in names:
                if name in seen:
                    msg = f"'{name}' is declared as both a {seen[name]} and a {kind}"
                    raise ConfigError(msg, name=name, kinds=[seen[name], kind])
                seen[name] = kind

    @cached_property
    def tree_order(self) -> dict[str, int]:
        """Declaration index of every tree."""
        return {name: idx for idx, name in enumerate(self.trees)}

    def kind_of(self, name: str) -> TargetKind | None:
        if name in self.trees:
            return TargetKind.TREE
        if name in self.groups:
            return TargetKind.GROUP
        if name in self.gardens:
            return TargetKind.GARDEN
        return None

    def get_tree(self, name: str) -> Tree:
        try:
            return self.trees[name]
        except KeyError:
            raise UnknownTree(name) from None

    def get_garden(self, name: str) -> Garden:
        try:
            return self.gardens[name]
        except KeyError:
            raise UnknownTree(name, kind="garden") from None

    def sort_trees(self, names: list[str]) -> list[str]:
        """Return *names* in declaration order."""
        order = self.tree_order
        return sorted(names, key=order.__getitem__)
