"""Error taxonomy for configuration resolution, selection, and dispatch.

Every error carries a stable ``code`` plus a ``detail`` dict with enough
context (variable, group, scope, tree) to reproduce the failure. Services
translate these into :class:`~gardenctl.services.result.ServiceError`.
"""

from __future__ import annotations

from typing import Any

# sysexits(3) codes used for process exit status.
EX_OK = 0
EX_USAGE = 64
EX_DATAERR = 65
EX_SOFTWARE = 70
EX_CONFIG = 78
EX_INTERRUPTED = 130


class GardenError(Exception):
    """Base class for all gardenctl errors."""

    code = "GARDEN_ERROR"
    exit_code = EX_SOFTWARE

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


class ConfigError(GardenError):
    """The configuration document is malformed or inconsistent."""

    code = "CONFIG_ERROR"
    exit_code = EX_CONFIG


class UnknownTree(GardenError):
    """A tree or garden name given on the command line does not exist."""

    code = "UNKNOWN_TREE"
    exit_code = EX_USAGE

    def __init__(self, name: str, *, kind: str = "tree") -> None:
        super().__init__(f"unknown {kind}: {name}", name=name, kind=kind)
        self.name = name


# --- Evaluation ---


class EvaluationError(GardenError):
    """An expression could not be resolved to a string."""

    code = "EVALUATION_ERROR"
    exit_code = EX_CONFIG


class UndefinedVariable(EvaluationError):
    """An interpolation referenced a name that no scope layer defines."""

    code = "UNDEFINED_VARIABLE"

    def __init__(self, name: str, *, scope: str) -> None:
        super().__init__(f"undefined variable '{name}' in scope {scope}", name=name, scope=scope)
        self.name = name
        self.scope = scope


class CircularVariableReference(EvaluationError):
    """Resolving a variable re-entered its own resolution."""

    code = "CIRCULAR_VARIABLE"

    def __init__(self, cycle: list[str], *, scope: str) -> None:
        chain = " -> ".join(cycle)
        super().__init__(
            f"circular variable reference in scope {scope}: {chain}",
            cycle=cycle,
            scope=scope,
        )
        self.cycle = cycle
        self.scope = scope


class CommandExpressionFailed(EvaluationError):
    """A ``$ command`` expression exited non-zero."""

    code = "COMMAND_EXPRESSION_FAILED"

    def __init__(self, command: str, *, exit_code: int, stderr: str = "") -> None:
        message = f"command expression exited {exit_code}: {command}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message, command=command, status=exit_code, stderr=stderr)
        self.command = command
        self.status = exit_code
        self.stderr = stderr


# --- Selection ---


class SelectionError(GardenError):
    """A tree query could not be resolved."""

    code = "SELECTION_ERROR"
    exit_code = EX_USAGE


class CircularGroupReference(SelectionError):
    """A group transitively contains itself."""

    code = "CIRCULAR_GROUP"
    exit_code = EX_CONFIG

    def __init__(self, cycle: list[str]) -> None:
        chain = " -> ".join(cycle)
        super().__init__(f"circular group reference: {chain}", cycle=cycle)
        self.cycle = cycle


class UnknownSelector(SelectionError):
    """Strict mode: an inclusion term matched no tree, group, or garden."""

    code = "UNKNOWN_SELECTOR"

    def __init__(self, term: str, *, query: str) -> None:
        super().__init__(f"query term matched nothing: {term}", term=term, query=query)
        self.term = term


# --- Dispatch ---


class TreeCommandFailed(GardenError):
    """A dispatched command exited non-zero inside a tree."""

    code = "TREE_COMMAND_FAILED"

    def __init__(self, tree: str, command: str, *, exit_code: int) -> None:
        super().__init__(
            f"{command} failed in {tree} with exit status {exit_code}",
            tree=tree,
            command=command,
            status=exit_code,
        )
        self.tree = tree
        self.command = command
        self.exit_code = exit_code
