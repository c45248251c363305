"""Expression syntax — classification and ``${name}`` substitution.

Pure functions, no evaluation. A raw configuration string is one of:

- a literal (no references),
- an interpolation (contains ``${name}`` references),
- an external command (starts with ``"$ "``; the remainder is interpolated
  and then run, its stdout becomes the value).

``$${`` is an escape for a literal ``${``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from gardenctl.domain.types import ExpressionKind

COMMAND_PREFIX = "$ "

# ``$${`` escape, or ``${name}`` where name is a variable-ish identifier.
# Anything else (``${VAR:-default}``, ``$VAR``) is left for the shell.
_REFERENCE_PATTERN = re.compile(r"\$\$\{|\$\{([A-Za-z_][A-Za-z0-9_.\-]*)\}")


@dataclass(frozen=True)
class Expression:
    """A raw configuration string with its classification."""

    raw: str

    @property
    def kind(self) -> ExpressionKind:
        return classify(self.raw)

    @property
    def body(self) -> str:
        """The text to interpolate: the command text for command expressions."""
        if self.kind is ExpressionKind.COMMAND:
            return self.raw[len(COMMAND_PREFIX) :]
        return self.raw

    @property
    def references(self) -> list[str]:
        return find_references(self.body)


def classify(raw: str) -> ExpressionKind:
    """Classify *raw* as a literal, interpolation, or command expression.

    Examples:
        >>> classify("plain")
        <ExpressionKind.LITERAL: 'literal'>
        >>> classify("${TREE_PATH}/bin")
        <ExpressionKind.INTERPOLATION: 'interpolation'>
        >>> classify("$ git rev-parse HEAD")
        <ExpressionKind.COMMAND: 'command'>
    """
    if raw.startswith(COMMAND_PREFIX):
        return ExpressionKind.COMMAND
    if find_references(raw) or "$${" in raw:
        return ExpressionKind.INTERPOLATION
    return ExpressionKind.LITERAL


def find_references(text: str) -> list[str]:
    """Return referenced names in order of first appearance."""
    names: list[str] = []
    for match in _REFERENCE_PATTERN.finditer(text):
        name = match.group(1)
        if name and name not in names:
            names.append(name)
    return names


def substitute(text: str, replace: Callable[[str], str | None]) -> str:
    """Replace every ``${name}`` in *text* with ``replace(name)``.

    When *replace* returns None the reference is kept verbatim so a shell
    can expand it later. ``$${`` always collapses to ``${``.
    """

    def _sub(match: re.Match[str]) -> str:
        name = match.group(1)
        if name is None:
            return "${"
        value = replace(name)
        if value is None:
            return match.group(0)
        return value

    return _REFERENCE_PATTERN.sub(_sub, text)
