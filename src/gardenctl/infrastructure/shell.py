"""Subprocess execution behind a narrow interface.

Everything that spawns a process goes through a :class:`ShellRunner`:
``capture`` for ``$ command`` expressions (text in, structured result out)
and ``run`` for dispatched tree commands (inherits stdio, returns the exit
status). Tests substitute a fake runner and never spawn processes.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

# Shells that treat the first argument after ``-c <script>`` as ``$0``.
POSIX_SHELLS = frozenset({"sh", "bash", "dash", "zsh", "ksh", "mksh", "ash", "busybox"})
ARG0 = "gardenctl"

EXIT_NOT_FOUND = 127


@dataclass(frozen=True)
class CompletedCommand:
    """Result of a captured command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ShellRunner(Protocol):
    """The only seam through which gardenctl starts processes."""

    def capture(
        self,
        command: str,
        *,
        shell: str,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CompletedCommand: ...

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
    ) -> int: ...


def build_argv(shell: str, script: str, arguments: Sequence[str] = ()) -> list[str]:
    """Build ``<shell> -c <script> [arg0] <arguments...>``.

    POSIX shells get an explicit ``$0`` so extra arguments land in ``$1...``;
    other interpreters (``python3 -c``) receive them directly in ``argv[1:]``.

    Examples:
        >>> build_argv("sh", "echo $1", ["x"])
        ['sh', '-c', 'echo $1', 'gardenctl', 'x']
        >>> build_argv("python3", "print(1)")
        ['python3', '-c', 'print(1)']
    """
    interpreter = shlex.split(shell) or ["sh"]
    argv = [*interpreter, "-c", script]
    if os.path.basename(interpreter[0]) in POSIX_SHELLS:
        argv.append(ARG0)
    argv.extend(arguments)
    return argv


class SubprocessRunner:
    """ShellRunner backed by :func:`subprocess.run`."""

    def capture(
        self,
        command: str,
        *,
        shell: str,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CompletedCommand:
        argv = [*shlex.split(shell), "-c", command]
        logger.debug("capture: %s", argv)
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                cwd=cwd,
                env=dict(env) if env is not None else None,
                check=False,
            )
        except FileNotFoundError as exc:
            return CompletedCommand(exit_code=EXIT_NOT_FOUND, stderr=str(exc))
        return CompletedCommand(exit_code=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
    ) -> int:
        # subprocess.run kills the child before re-raising KeyboardInterrupt.
        logger.debug("run: %s (cwd=%s)", list(argv), cwd)
        try:
            proc = subprocess.run(list(argv), cwd=cwd, env=dict(env), check=False)
        except FileNotFoundError as exc:
            logger.warning("Command not found: %s", exc)
            return EXIT_NOT_FOUND
        return proc.returncode
