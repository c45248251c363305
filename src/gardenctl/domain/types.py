"""Classification enums shared across the domain layer."""

from __future__ import annotations

from enum import StrEnum


class ExpressionKind(StrEnum):
    """How a raw configuration string is evaluated."""

    LITERAL = "literal"
    INTERPOLATION = "interpolation"
    COMMAND = "command"


class MergeMode(StrEnum):
    """How an environment entry combines with the inherited value."""

    SET = "set"
    PREPEND = "prepend"
    APPEND = "append"


class TargetKind(StrEnum):
    """Namespaces a query term can match against."""

    TREE = "tree"
    GROUP = "group"
    GARDEN = "garden"


class TreeStatus(StrEnum):
    """Outcome of dispatching a command in one tree."""

    OK = "ok"
    FAILED = "failed"
    ERROR = "error"
    SKIPPED = "skipped"
    INTERRUPTED = "interrupted"
