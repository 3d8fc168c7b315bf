"""Boot-time configuration: flags, environment, boot media, interactive prompts."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from src.agent.drivers import Driver
from src.agent.identity import BootstrapInfo
from src.common.console import ask, fail, info
from src.common.constants import (
    BACKUP_FILE,
    DEFAULT_DISK_DIR,
    DEFAULT_PORT,
    DEFAULT_STATE_DIR,
    DIRECTIONS,
    DISK_IP_FILE,
    DISK_POS_FILE,
    ENTRY_POINT_FILE,
    JOURNAL_FILE,
    PROJECT_ROOT,
)


@dataclass
class AgentConfig:
    coordinator: str
    port: int = DEFAULT_PORT
    state_dir: Path = DEFAULT_STATE_DIR
    disk_dir: Path = DEFAULT_DISK_DIR
    identity_backend: str = "file"
    max_backoff: float | None = None
    simulate: bool = False
    verbose: bool = False

    @property
    def entry_point(self) -> Path:
        return self.state_dir / ENTRY_POINT_FILE

    @property
    def backup(self) -> Path:
        return self.state_dir / BACKUP_FILE

    @property
    def journal(self) -> Path:
        return self.state_dir / JOURNAL_FILE


def load_dotenv(env_path: Path | None = None) -> None:
    """Load variables from .env file into os.environ (no overwrite)."""
    env_path = env_path or PROJECT_ROOT / ".env"
    if not env_path.is_file():
        return
    info(f"Loading environment from {env_path}")
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("\"'")
            os.environ.setdefault(key, value)


def resolve_coordinator(
    flag: str | None,
    disk_dir: Path,
    prompt: Callable[[str], str] = ask,
) -> str:
    """Flag, then ``AGENT_COORDINATOR``, then ``<disk>/ip``, then ask the operator."""
    host = (flag or os.environ.get("AGENT_COORDINATOR", "")).strip()
    if host:
        return host
    ip_file = disk_dir / DISK_IP_FILE
    if ip_file.is_file():
        host = ip_file.read_text().strip()
        if host:
            return host
    host = prompt("enter server ip:").strip()
    if not host:
        fail("Coordinator address cannot be empty.")
    return host


def _position_reader(disk_dir: Path, prompt: Callable[[str], str]) -> Callable[[str], str]:
    pos_file = disk_dir / DISK_POS_FILE
    if not pos_file.is_file():
        return prompt
    lines = iter(pos_file.read_text().splitlines())
    return lambda _question: next(lines, "").strip()


def read_bootstrap(
    driver: Driver,
    disk_dir: Path,
    prompt: Callable[[str], str] = ask,
) -> BootstrapInfo:
    """Read the start pose from ``<disk>/pos`` (Direction, X, Y, Z) or interactively."""
    read = _position_reader(disk_dir, prompt)

    facing = read("Direction (North, South, East, West):").capitalize()
    if facing not in DIRECTIONS:
        fail(f"Unknown direction {facing!r}; expected one of {', '.join(DIRECTIONS)}.")
    try:
        x = int(read("X:"))
        y = int(read("Y:"))
        z = int(read("Z:"))
    except ValueError as exc:
        fail(f"Start position must be three integers: {exc}")

    return BootstrapInfo(
        fuel=driver.fuel_level(),
        fuel_limit=driver.fuel_limit(),
        position=(x, y, z),
        facing=facing,
    )


def resolve_config(args, prompt: Callable[[str], str] = ask) -> AgentConfig:
    """Build the :class:`AgentConfig` from parsed CLI *args* and the environment."""
    state_dir = Path(args.state_dir or os.environ.get("AGENT_STATE_DIR") or DEFAULT_STATE_DIR)
    disk_dir = Path(os.environ.get("AGENT_DISK_DIR") or DEFAULT_DISK_DIR)
    port = args.port or int(os.environ.get("AGENT_PORT", DEFAULT_PORT))
    return AgentConfig(
        coordinator=resolve_coordinator(args.coordinator, disk_dir, prompt),
        port=port,
        state_dir=state_dir.expanduser(),
        disk_dir=disk_dir,
        identity_backend=args.identity_backend,
        max_backoff=args.max_backoff,
        simulate=args.simulate,
        verbose=args.verbose,
    )
