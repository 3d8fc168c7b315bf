"""Agent identity: load it from local storage, or register once and persist it."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Protocol

import structlog

from src.agent.drivers import Driver
from src.common.constants import ID_FILE, LABEL_FILE, REGISTER_RETRY_DELAY
from src.common.http import CoordinatorUnreachable
from src.common.redis import load_agent_field, store_agent_field

log = structlog.get_logger("identity")


@dataclass(frozen=True)
class AgentIdentity:
    id: str
    label: str


@dataclass(frozen=True)
class BootstrapInfo:
    fuel: int
    fuel_limit: int
    position: tuple[int, int, int]
    facing: str

    def to_wire(self) -> dict:
        return {
            "fuel": self.fuel,
            "fuellimit": self.fuel_limit,
            "position": list(self.position),
            "facing": self.facing,
        }


@dataclass(frozen=True)
class Registration:
    identity: AgentIdentity
    command: Any = None  # first raw command, only on a fresh registration
    fresh: bool = False


# ── Stores ───────────────────────────────────────────────────────────────────


class IdentityStore(Protocol):
    def load(self) -> AgentIdentity | None: ...
    def save(self, identity: AgentIdentity) -> None: ...


class FileIdentityStore:
    """Identifier and label as two small files in the state directory."""

    def __init__(self, state_dir: Path) -> None:
        self.id_path = state_dir / ID_FILE
        self.label_path = state_dir / LABEL_FILE

    def load(self) -> AgentIdentity | None:
        if not self.id_path.is_file():
            return None
        agent_id = self.id_path.read_text().strip()
        if not agent_id:
            log.warning("identity_blank", path=str(self.id_path))
            return None
        label = self.label_path.read_text() if self.label_path.is_file() else ""
        return AgentIdentity(agent_id, label)

    def save(self, identity: AgentIdentity) -> None:
        self.id_path.parent.mkdir(parents=True, exist_ok=True)
        self.label_path.write_text(identity.label)
        # id last: its presence marks the record complete
        staging = self.id_path.with_name(self.id_path.name + ".part")
        staging.write_text(identity.id)
        staging.replace(self.id_path)


class RedisIdentityStore:
    """The same record kept in Redis under ``agent:<name>:{id,label}``."""

    def __init__(self, agent_name: str, client=None) -> None:
        self.agent_name = agent_name
        self._client = client

    def load(self) -> AgentIdentity | None:
        agent_id = load_agent_field(self.agent_name, "id", self._client)
        if not agent_id:
            return None
        label = load_agent_field(self.agent_name, "label", self._client) or ""
        return AgentIdentity(agent_id, label)

    def save(self, identity: AgentIdentity) -> None:
        store_agent_field(self.agent_name, "label", identity.label, self._client)
        store_agent_field(self.agent_name, "id", identity.id, self._client)


# ── Bootstrap ────────────────────────────────────────────────────────────────


def load_or_register(
    store: IdentityStore,
    client,
    bootstrap: BootstrapInfo | Callable[[], BootstrapInfo],
    *,
    driver: Driver,
    retry_delay: float = REGISTER_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> Registration:
    """Return the persisted identity, or register with the coordinator until it answers.

    *bootstrap* may be a callable so position prompts only happen when a
    registration is actually needed.
    """
    existing = store.load()
    if existing is not None:
        log.info("identity_loaded", agent_id=existing.id, label=existing.label)
        return Registration(existing)

    info = bootstrap() if callable(bootstrap) else bootstrap
    attempts = 0
    while True:
        attempts += 1
        try:
            response = client.register(info.to_wire())
            break
        except CoordinatorUnreachable as exc:
            log.warning("register_failed", attempt=attempts, retry_in=retry_delay, error=str(exc))
            sleep(retry_delay)

    label = response.get("label") or response.get("name") or ""
    identity = AgentIdentity(str(response["id"]), str(label))
    store.save(identity)
    if identity.label:
        driver.set_label(identity.label)
    log.info("identity_registered", agent_id=identity.id, label=identity.label, attempts=attempts)
    return Registration(identity, response.get("command"), fresh=True)
