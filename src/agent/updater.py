"""Self-update: fetch the coordinator's program, install it, hand over to it.

A running interpreter cannot swap its own code, so an update writes the
new program to the entry-point slot and launches it as a child process
carrying the recursion guard. The child is the next generation; the
current one stops polling once the update action returns.

Slots on disk::

    <state_dir>/startup.py          installed entry point
    <state_dir>/startup-backup.py   exactly one previous version
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Callable, Mapping, NoReturn, Sequence

import structlog

from src.common.constants import UPDATE_GUARD_ARG, UPDATE_GUARD_ENV
from src.common.http import CoordinatorUnreachable

log = structlog.get_logger("updater")

Launcher = Callable[[Path, list[str], dict[str, str]], object]
Restarter = Callable[[Path, list[str], dict[str, str]], NoReturn]


def is_guarded(argv: Sequence[str], env: Mapping[str, str] | None = None) -> bool:
    """True when this process was itself started by a self-update."""
    env = os.environ if env is None else env
    return (bool(argv) and argv[0] == UPDATE_GUARD_ARG) or env.get(UPDATE_GUARD_ENV) == "1"


def strip_guard(argv: Sequence[str], env: Mapping[str, str]) -> tuple[list[str], dict[str, str]]:
    args = [a for a in argv if a != UPDATE_GUARD_ARG]
    clean = {k: v for k, v in env.items() if k != UPDATE_GUARD_ENV}
    return args, clean


def with_guard(argv: Sequence[str], env: Mapping[str, str]) -> tuple[list[str], dict[str, str]]:
    args, clean = strip_guard(argv, env)
    return [UPDATE_GUARD_ARG, *args], {**clean, UPDATE_GUARD_ENV: "1"}


def run_program(entry_point: Path, argv: list[str], env: dict[str, str]) -> int:
    """Run the installed program in the foreground and wait for it."""
    return subprocess.run([sys.executable, str(entry_point), *argv], env=env, check=False).returncode


def exec_program(entry_point: Path, argv: list[str], env: dict[str, str]) -> NoReturn:
    """Replace the current process with *entry_point* (hard restart)."""
    sys.stdout.flush()
    sys.stderr.flush()
    os.execve(sys.executable, [sys.executable, str(entry_point), *argv], env)


class SelfUpdater:
    def __init__(
        self,
        client,
        entry_point: Path,
        backup: Path,
        *,
        launch: Launcher = run_program,
        restart: Restarter = exec_program,
        fallback_entry: Path | None = None,
    ) -> None:
        self._client = client
        self.entry_point = entry_point
        self.backup = backup
        self._launch = launch
        self._restart = restart
        self._fallback_entry = fallback_entry or Path(sys.argv[0]).resolve()

    def update(self, argv: Sequence[str], env: Mapping[str, str] | None = None) -> bool:
        """Install and launch the coordinator's current program.

        Returns ``False`` without touching the network when the guard is
        set. An unreachable coordinator restarts the process instead of
        returning.
        """
        env = dict(os.environ if env is None else env)
        if is_guarded(argv, env):
            log.info("update_refused_nested")
            return False

        try:
            program = self._client.fetch_program()
        except CoordinatorUnreachable as exc:
            log.error("update_fetch_failed", error=str(exc))
            self.restart(argv, env)
            return False

        self.install(program)

        child_argv, child_env = with_guard(argv, env)
        log.info("update_installed", entry_point=str(self.entry_point), size=len(program))
        try:
            self._launch(self.entry_point, child_argv, child_env)
        except OSError as exc:
            log.error("update_launch_failed", error=str(exc))
            self.rollback()
            self.restart(argv, env)
            return False
        return True

    def install(self, program: str) -> None:
        """Stage *program*, rotate the current entry point into the backup slot, then swap in.

        The live entry point is only touched once the staged copy is fully
        written.
        """
        self.entry_point.parent.mkdir(parents=True, exist_ok=True)
        staging = self.entry_point.with_name(self.entry_point.name + ".part")
        try:
            staging.write_bytes(program.encode("utf-8"))
        except OSError:
            staging.unlink(missing_ok=True)
            raise
        self.backup.unlink(missing_ok=True)
        if self.entry_point.exists():
            self.entry_point.replace(self.backup)
        staging.replace(self.entry_point)

    def rollback(self) -> bool:
        """Put the backup back in the entry-point slot, if there is one."""
        if not self.backup.exists():
            return False
        self.backup.replace(self.entry_point)
        log.warning("update_rolled_back", entry_point=str(self.entry_point))
        return True

    def restart(self, argv: Sequence[str], env: Mapping[str, str]) -> None:
        target = self.entry_point if self.entry_point.exists() else self._fallback_entry
        args, clean = strip_guard(argv, env)
        log.warning("hard_restart", target=str(target))
        self._restart(target, args, clean)
