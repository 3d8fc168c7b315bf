"""Shared fakes: an in-process coordinator, a dict-backed redis, a list journal."""

from __future__ import annotations

import pytest

from src.agent.drivers import SimulatedDriver
from src.common.http import CoordinatorUnreachable


def offline(url: str = "http://coordinator/turtle") -> CoordinatorUnreachable:
    return CoordinatorUnreachable(url, "connection refused")


class FakeCoordinator:
    """Scripted coordinator.

    ``replies`` are returned to successive reports; an exception instance in
    the list is raised instead. Once the script runs out it answers Poweroff.
    """

    def __init__(
        self,
        *,
        registration: dict | None = None,
        replies: list | None = None,
        program: str = "print('generation 2')\n",
        register_failures: int = 0,
        fetch_fails: bool = False,
    ) -> None:
        self.registration = registration or {"id": "a1", "name": "Agent-1", "command": "Wait"}
        self.replies = list(replies or [])
        self.program = program
        self.register_failures = register_failures
        self.fetch_fails = fetch_fails
        self.calls: list[tuple] = []

    def register(self, info: dict) -> dict:
        self.calls.append(("register", info))
        if self.register_failures:
            self.register_failures -= 1
            raise offline()
        return self.registration

    def report(self, agent_id: str, report) -> object:
        self.calls.append(("report", agent_id, report.to_wire()))
        reply = self.replies.pop(0) if self.replies else "Poweroff"
        if isinstance(reply, Exception):
            raise reply
        return reply

    def fetch_program(self) -> str:
        self.calls.append(("fetch",))
        if self.fetch_fails:
            raise offline()
        return self.program

    def named(self, kind: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == kind]


class FakeRedis:
    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class ListJournal:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def info(self, event: str, **kw) -> None:
        self.events.append((event, kw))


class Sleeps(list):
    """Callable stand-in for time.sleep that records each delay."""

    def __call__(self, seconds: float) -> None:
        self.append(seconds)


@pytest.fixture
def sleeps() -> Sleeps:
    return Sleeps()


@pytest.fixture
def driver() -> SimulatedDriver:
    return SimulatedDriver()


@pytest.fixture
def journal() -> ListJournal:
    return ListJournal()
