"""Workspace — the composition root injected into every service.

The Workspace owns the loaded :class:`Configuration`, the shell runner, the
ambient environment, and the single :class:`Evaluator` whose caches define
"one run". It builds scope chains for tree contexts::

    environment (ambient) > global > GARDEN_* built-ins
        > garden:<name> > tree:<name> > TREE_* built-ins > -D overrides

Each chain is a read-only composed view; nothing is shared mutably between
trees except the Evaluator's per-scope caches.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from gardenctl.config.loader import load_configuration
from gardenctl.domain.errors import EvaluationError
from gardenctl.domain.model import Configuration, EnvironmentEntry, TreeContext
from gardenctl.domain.scope import Scope, ScopeLayer
from gardenctl.infrastructure.evaluation import Evaluator
from gardenctl.infrastructure.shell import ShellRunner, SubprocessRunner

if TYPE_CHECKING:
    from gardenctl.config.settings import GardenSettings

logger = logging.getLogger(__name__)

GLOBAL_SCOPE = "global"

# Relative path values are anchored to another variable.
PATH_ANCHORS = {
    "TREE_PATH": "GARDEN_ROOT",
    "GARDEN_ROOT": "GARDEN_CONFIG_DIR",
}


class Workspace:
    """Loaded configuration plus everything needed to evaluate it."""

    def __init__(
        self,
        settings: GardenSettings,
        *,
        config: Configuration | None = None,
        runner: ShellRunner | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.settings = settings
        self.config = (
            config
            if config is not None
            else load_configuration(settings.config_path, config_dir=settings.config_dir)
        )
        self.runner: ShellRunner = runner if runner is not None else SubprocessRunner()
        self.environ: dict[str, str] = dict(os.environ if environ is None else environ)
        self.evaluator = Evaluator(self.runner, shell=settings.shell, path_anchors=PATH_ANCHORS)

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    @property
    def root_expression(self) -> str:
        return self.settings.root or self.config.root

    def _outer_layers(self) -> list[ScopeLayer]:
        config_dir = self.settings.config_dir or self.config.config_dir
        return [
            ScopeLayer("environment", self.environ, ambient=True),
            ScopeLayer(GLOBAL_SCOPE, self.config.variables),
            ScopeLayer(
                "garden-builtins",
                {
                    "GARDEN_CONFIG_DIR": str(config_dir),
                    "GARDEN_ROOT": self.root_expression,
                },
            ),
        ]

    def _overrides(self) -> ScopeLayer:
        return ScopeLayer("overrides", self.settings.defines)

    def global_scope(self) -> Scope:
        """Scope with no tree or garden: globals, built-ins, and overrides."""
        return Scope(GLOBAL_SCOPE, [*self._outer_layers(), self._overrides()])

    def scope_for(self, context: TreeContext) -> Scope:
        """Full scope chain for a tree, optionally seen through a garden."""
        tree = self.config.get_tree(context.tree)
        layers = self._outer_layers()
        if context.garden is not None:
            garden = self.config.get_garden(context.garden)
            layers.append(ScopeLayer(f"garden:{garden.name}", garden.variables))
        layers.append(ScopeLayer(f"tree:{tree.name}", tree.variables))
        layers.append(
            ScopeLayer(
                "tree-builtins",
                {"TREE_NAME": tree.name, "TREE_PATH": tree.path},
            )
        )
        layers.append(self._overrides())
        return Scope(context.label, layers)

    # ------------------------------------------------------------------
    # Per-tree resolution
    # ------------------------------------------------------------------

    def root_path(self) -> Path:
        return Path(self.evaluator.resolve("GARDEN_ROOT", self.global_scope()))

    def tree_path(self, context: TreeContext) -> Path:
        return Path(self.evaluator.resolve("TREE_PATH", self.scope_for(context)))

    def environment_entries(self, context: TreeContext) -> list[EnvironmentEntry]:
        """Environment entries from global, garden, then tree — outermost first."""
        entries = list(self.config.environment)
        if context.garden is not None:
            entries.extend(self.config.get_garden(context.garden).environment)
        entries.extend(self.config.get_tree(context.tree).environment)
        return entries

    def environment_for(self, context: TreeContext) -> dict[str, str]:
        """The full process environment a tree's commands run with."""
        return self.evaluator.environment(
            self.environment_entries(context),
            self.scope_for(context),
            base=self.environ,
        )

    def command_for(self, context: TreeContext, name: str) -> tuple[str, ...] | None:
        """Innermost definition of command *name*: tree, then garden, then global."""
        tree = self.config.get_tree(context.tree)
        if name in tree.commands:
            return tree.commands[name]
        if context.garden is not None:
            garden = self.config.get_garden(context.garden)
            if name in garden.commands:
                return garden.commands[name]
        return self.config.commands.get(name)

    def shell_for(self, context: TreeContext) -> str:
        return self.config.get_tree(context.tree).shell or self.config.shell

    def current_trees(self, cwd: Path | None = None) -> list[str]:
        """The tree whose path contains *cwd*, as a zero- or one-item list.

        Nested trees shadow their parents: the deepest match wins.
        Trees whose path cannot be evaluated are skipped.
        """
        here = (cwd or self.settings.cwd).resolve()
        best: tuple[int, str] | None = None
        for name in self.config.trees:
            try:
                path = self.tree_path(TreeContext(name)).resolve()
            except EvaluationError as exc:
                logger.debug("Skipping %s for '.': %s", name, exc)
                continue
            if here == path or path in here.parents:
                depth = len(path.parts)
                if best is None or depth > best[0]:
                    best = (depth, name)
        return [best[1]] if best else []
