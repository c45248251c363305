"""CommandService — run named commands (or raw argv) across selected trees.

Three surfaces, mirroring the original ``garden`` tool:
- run_commands: ``cmd <query> <command>... -- <args>``
- run_custom:   ``<command> [query...] -- <args>`` (default query ``.``)
- exec_in_trees: ``exec <query> -- <argv...>``

Trees run strictly in selection order, one invocation finishing before the
next starts. Dispatch stops at the first failing tree unless ``keep_going``
is set. The overall exit status is the last non-zero tree status.
An interrupt kills the running subprocess, stops dispatch, and keeps every
result recorded so far.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeAlias

from gardenctl.domain.errors import EX_INTERRUPTED, EX_OK, GardenError, TreeCommandFailed
from gardenctl.domain.model import TreeContext
from gardenctl.domain.types import TreeStatus
from gardenctl.infrastructure.shell import build_argv
from gardenctl.services.base import BaseService
from gardenctl.services.query import QueryService
from gardenctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from gardenctl.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)

# Called once per tree and command, before anything runs in it.
TreeCallback: TypeAlias = Callable[[TreeContext, Path, bool], None]

_FAILED = frozenset({TreeStatus.FAILED, TreeStatus.ERROR})

# Reasons a tree is skipped rather than failed.
MISSING_TREE = "MISSING_TREE"
UNDEFINED_COMMAND = "UNDEFINED_COMMAND"


@dataclass(frozen=True)
class TreeRun:
    """Outcome of one command in one tree."""

    tree: str
    command: str
    status: TreeStatus
    garden: str | None = None
    path: str | None = None
    exit_code: int = EX_OK
    code: str | None = None
    message: str = ""

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "tree": self.tree,
            "command": self.command,
            "status": str(self.status),
            "exit_code": self.exit_code,
        }
        if self.garden is not None:
            data["garden"] = self.garden
        if self.path is not None:
            data["path"] = self.path
        if self.code is not None:
            data["code"] = self.code
        if self.message:
            data["message"] = self.message
        return data


# (context, command label, scripts-or-argv builder)
_Step: TypeAlias = tuple[TreeContext, str, Callable[[TreeContext], list[list[str]] | None]]


class CommandService(BaseService):
    """Executes commands in each selected tree."""

    def __init__(self, workspace: Workspace, *, on_tree: TreeCallback | None = None) -> None:
        super().__init__(workspace)
        self._on_tree = on_tree

    # ------------------------------------------------------------------
    # Public surfaces
    # ------------------------------------------------------------------

    def run_commands(
        self,
        query: str,
        commands: Sequence[str],
        arguments: Sequence[str] = (),
        *,
        keep_going: bool = False,
        breadth_first: bool = False,
    ) -> ServiceResult:
        """Run each named command in each tree selected by *query*.

        Depth-first (default) runs every command in a tree before moving to
        the next tree; breadth-first runs one command across all trees first.
        """
        op = "cmd"
        try:
            contexts = QueryService(self._workspace).resolve(query)
        except GardenError as exc:
            return ServiceResult.failure(op, exc, data={"query": query})

        if breadth_first:
            plan = [(ctx, name) for name in commands for ctx in contexts]
        else:
            plan = [(ctx, name) for ctx in contexts for name in commands]

        steps: list[_Step] = [
            (ctx, name, self._script_builder(name, arguments)) for ctx, name in plan
        ]
        return self._dispatch(op, query, list(commands), steps, keep_going=keep_going)

    def run_custom(
        self,
        command: str,
        queries: Sequence[str] = (),
        arguments: Sequence[str] = (),
        *,
        keep_going: bool = False,
    ) -> ServiceResult:
        """Run one named command over the union of *queries* (default ``.``)."""
        query = " ".join(queries) if queries else "."
        return self.run_commands(query, [command], arguments, keep_going=keep_going)

    def exec_in_trees(
        self,
        query: str,
        argv: Sequence[str],
        *,
        keep_going: bool = False,
    ) -> ServiceResult:
        """Run *argv* verbatim inside each selected tree."""
        op = "exec"
        try:
            contexts = QueryService(self._workspace).resolve(query)
        except GardenError as exc:
            return ServiceResult.failure(op, exc, data={"query": query})

        label = " ".join(argv)
        steps: list[_Step] = [(ctx, label, lambda _ctx: [list(argv)]) for ctx in contexts]
        return self._dispatch(op, query, [label], steps, keep_going=keep_going)

    # ------------------------------------------------------------------
    # Dispatch loop
    # ------------------------------------------------------------------

    def _script_builder(
        self, name: str, arguments: Sequence[str]
    ) -> Callable[[TreeContext], list[list[str]] | None]:
        """Return a function producing the argv list for command *name* in a tree."""
        workspace = self._workspace

        def build(ctx: TreeContext) -> list[list[str]] | None:
            entries = workspace.command_for(ctx, name)
            if entries is None:
                return None
            scope = workspace.scope_for(ctx)
            shell = workspace.shell_for(ctx)
            evaluator = workspace.evaluator
            scripts = [evaluator.interpolate(entry, scope, strict=False) for entry in entries]
            return [build_argv(shell, script, arguments) for script in scripts]

        return build

    def _dispatch(
        self,
        op: str,
        query: str,
        commands: list[str],
        steps: list[_Step],
        *,
        keep_going: bool,
    ) -> ServiceResult:
        runs: list[TreeRun] = []
        exit_status = EX_OK
        interrupted = False

        for ctx, label, builder in steps:
            try:
                run = self._run_step(ctx, label, builder)
            except KeyboardInterrupt:
                logger.warning("Interrupted while running %s in %s", label, ctx.tree)
                runs.append(
                    TreeRun(
                        tree=ctx.tree,
                        garden=ctx.garden,
                        command=label,
                        status=TreeStatus.INTERRUPTED,
                        exit_code=EX_INTERRUPTED,
                    )
                )
                exit_status = EX_INTERRUPTED
                interrupted = True
                break

            runs.append(run)
            if run.status in _FAILED:
                exit_status = run.exit_code
                if not keep_going:
                    break

        return self._summarize(op, query, commands, runs, exit_status, interrupted=interrupted)

    def _run_step(
        self,
        ctx: TreeContext,
        label: str,
        builder: Callable[[TreeContext], list[list[str]] | None],
    ) -> TreeRun:
        workspace = self._workspace
        base = {"tree": ctx.tree, "garden": ctx.garden, "command": label}

        try:
            path = workspace.tree_path(ctx)
        except GardenError as exc:
            return TreeRun(
                **base,
                status=TreeStatus.ERROR,
                exit_code=exc.exit_code,
                code=exc.code,
                message=exc.message,
            )

        exists = path.is_dir()
        if self._on_tree is not None:
            self._on_tree(ctx, path, exists)
        if not exists:
            return TreeRun(
                **base,
                path=str(path),
                status=TreeStatus.SKIPPED,
                code=MISSING_TREE,
                message=f"missing path {path}",
            )

        try:
            argvs = builder(ctx)
            if argvs is None:
                return TreeRun(
                    **base,
                    path=str(path),
                    status=TreeStatus.SKIPPED,
                    code=UNDEFINED_COMMAND,
                    message=f"command not defined: {label}",
                )
            env = workspace.environment_for(ctx)
        except GardenError as exc:
            logger.debug("Resolution failed in %s", ctx.label, exc_info=True)
            return TreeRun(
                **base,
                path=str(path),
                status=TreeStatus.ERROR,
                exit_code=exc.exit_code,
                code=exc.code,
                message=exc.message,
            )

        for argv in argvs:
            status = workspace.runner.run(argv, cwd=path, env=env)
            if status != EX_OK:
                failure = TreeCommandFailed(ctx.tree, label, exit_code=status)
                return TreeRun(
                    **base,
                    path=str(path),
                    status=TreeStatus.FAILED,
                    exit_code=status,
                    code=failure.code,
                    message=failure.message,
                )
        return TreeRun(**base, path=str(path), status=TreeStatus.OK)

    @staticmethod
    def _summarize(
        op: str,
        query: str,
        commands: list[str],
        runs: list[TreeRun],
        exit_status: int,
        *,
        interrupted: bool,
    ) -> ServiceResult:
        counts = {str(status): 0 for status in TreeStatus}
        for run in runs:
            counts[str(run.status)] += 1

        warnings: list[str] = []
        undefined = [r for r in runs if r.code == UNDEFINED_COMMAND]
        if runs and len(undefined) == len(runs):
            warnings.append(f"No selected tree defines: {', '.join(commands)}")
        warnings.extend(f"{r.tree}: {r.message}" for r in runs if r.code == MISSING_TREE)

        data = {
            "query": query,
            "commands": commands,
            "trees": [run.as_dict() for run in runs],
            "counts": counts,
            "exit_code": exit_status,
        }

        if interrupted:
            error = ServiceError(
                code="INTERRUPTED",
                message="interrupted; remaining trees were not run",
                detail={"exit_code": EX_INTERRUPTED},
            )
            return ServiceResult(ok=False, op=op, data=data, warnings=warnings, error=error)

        failed = [run for run in runs if run.status in _FAILED]
        if failed:
            last = failed[-1]
            error = ServiceError(
                code=last.code or TreeCommandFailed.code,
                message=f"{len(failed)} tree(s) failed; last: {last.message}",
                detail={"exit_code": exit_status, "trees": [r.tree for r in failed]},
            )
            return ServiceResult(ok=False, op=op, data=data, warnings=warnings, error=error)

        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
