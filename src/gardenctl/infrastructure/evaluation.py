"""Evaluator — lazy, memoised variable resolution with cycle detection.

One Evaluator lives for one run. Values are cached per
``(scope label, variable name)``; a ``$ command`` expression therefore runs
at most once per scope. Resolution keeps an explicit stack of
``(name, scope)`` nodes so that re-entering a node in progress is reported
as a :class:`CircularVariableReference` with the whole cycle, before any
partial value is cached.

Evaluation inside one scope is strictly sequential. The Evaluator holds no
locks and must not be shared across threads.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from gardenctl.domain.errors import (
    CircularVariableReference,
    CommandExpressionFailed,
    UndefinedVariable,
)
from gardenctl.domain.expressions import Expression, substitute
from gardenctl.domain.model import EnvironmentEntry
from gardenctl.domain.scope import Scope
from gardenctl.domain.types import ExpressionKind, MergeMode
from gardenctl.infrastructure.shell import ShellRunner

logger = logging.getLogger(__name__)


class Evaluator:
    """Evaluates expressions against scopes.

    Args:
        runner: Executes ``$ command`` expressions.
        shell: Interpreter for ``$ command`` expressions.
        path_anchors: Variables whose values are filesystem paths, mapped
            to the variable a relative value is anchored to (for example
            ``TREE_PATH`` → ``GARDEN_ROOT``).
    """

    def __init__(
        self,
        runner: ShellRunner,
        *,
        shell: str = "sh",
        path_anchors: Mapping[str, str] | None = None,
    ) -> None:
        self._runner = runner
        self._shell = shell
        self._anchors = dict(path_anchors or {})
        self._cache: dict[str, dict[str, str]] = {}
        self._stack: list[tuple[str, str]] = []
        self._in_progress: set[tuple[str, str]] = set()

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def evaluate(self, raw: str, scope: Scope, *, strict: bool = True) -> str:
        """Evaluate one raw expression in *scope*.

        Literals come back unchanged; ``${name}`` references are resolved;
        ``$ text`` is interpolated and then executed. With ``strict=False``
        unknown references are left in place for a shell to expand.
        """
        expr = Expression(raw)
        kind = expr.kind
        if kind is ExpressionKind.LITERAL:
            return raw
        text = self.interpolate(expr.body, scope, strict=strict)
        if kind is ExpressionKind.COMMAND:
            return self._run(text)
        return text

    def interpolate(self, text: str, scope: Scope, *, strict: bool = True) -> str:
        """Replace ``${name}`` references in *text*."""

        def replace(name: str) -> str | None:
            if name not in scope:
                if strict:
                    raise UndefinedVariable(name, scope=scope.label)
                return None
            return self.resolve(name, scope)

        return substitute(text, replace)

    def _run(self, command: str) -> str:
        logger.debug("Evaluating command expression: %s", command)
        result = self._runner.capture(command, shell=self._shell)
        if not result.ok:
            raise CommandExpressionFailed(command, exit_code=result.exit_code, stderr=result.stderr)
        return result.stdout.rstrip("\r\n")

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def resolve(self, name: str, scope: Scope) -> str:
        """Resolve variable *name* in *scope*, evaluating it on first use."""
        cache = self._cache.setdefault(scope.label, {})
        if name in cache:
            return cache[name]

        found = scope.lookup(name)
        if found is None:
            raise UndefinedVariable(name, scope=scope.label)
        layer, raw = found

        node = (name, scope.label)
        if node in self._in_progress:
            names = [n for n, label in self._stack if label == scope.label]
            cycle = [*names[names.index(name) :], name]
            raise CircularVariableReference(cycle, scope=scope.label)

        self._in_progress.add(node)
        self._stack.append(node)
        try:
            value = raw if layer.ambient else self.evaluate(raw, scope)
            if name in self._anchors:
                value = self._anchor(value, self._anchors[name], scope)
        finally:
            self._stack.pop()
            self._in_progress.discard(node)

        cache[name] = value
        return value

    def _anchor(self, value: str, anchor: str, scope: Scope) -> str:
        path = Path(value).expanduser()
        if path.is_absolute() or anchor not in scope:
            return str(path)
        return str(Path(self.resolve(anchor, scope)) / path)

    def resolve_all(self, scope: Scope) -> dict[str, str]:
        """Resolve every non-ambient variable visible in *scope*."""
        return {name: self.resolve(name, scope) for name in scope.names()}

    def is_cached(self, name: str, scope: Scope) -> bool:
        return name in self._cache.get(scope.label, {})

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    def environment(
        self,
        entries: Iterable[EnvironmentEntry],
        scope: Scope,
        *,
        base: Mapping[str, str],
    ) -> dict[str, str]:
        """Apply *entries* (outermost first) on top of *base*.

        ``prepend`` and ``append`` join with :data:`os.pathsep` onto the
        inherited value; an empty inherited value is not joined.
        """
        env = dict(base)
        for entry in entries:
            for raw in entry.values:
                value = self.evaluate(raw, scope)
                env[entry.name] = merge_value(env.get(entry.name, ""), value, entry.mode)
        return env


def merge_value(current: str, value: str, mode: MergeMode) -> str:
    """Combine an inherited value with a new one.

    Examples:
        >>> merge_value("/usr/bin", "/opt/tool/bin", MergeMode.PREPEND)
        '/opt/tool/bin:/usr/bin'
        >>> merge_value("", "x", MergeMode.APPEND)
        'x'
    """
    if mode is MergeMode.SET or not current:
        return value
    if mode is MergeMode.PREPEND:
        return f"{value}{os.pathsep}{current}"
    return f"{current}{os.pathsep}{value}"
