"""The agent's control loop.

One generation of the agent runs this state machine::

    REGISTERING -> READY -> EXECUTING -> REPORTING -> READY -> ... -> TERMINATED

READY with nothing queued goes straight to REPORTING with no result.
REPORTING retries the same report under the backoff policy until the
coordinator answers; the action is never re-run. TERMINATED is reached on
the shutdown command or when an update ends the generation.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Callable

import structlog

from src.agent.actions import ActionRegistry, ActionResult
from src.agent.backoff import Backoff
from src.agent.commands import Command, InvalidCommand, interpret
from src.agent.drivers import Driver
from src.agent.identity import AgentIdentity, BootstrapInfo, IdentityStore, load_or_register
from src.agent.report import Report, sense
from src.common.constants import REGISTER_RETRY_DELAY, SHUTDOWN_COMMAND
from src.common.http import CoordinatorUnreachable
from src.common.logging import bind_agent


class State(Enum):
    REGISTERING = "registering"
    READY = "ready"
    EXECUTING = "executing"
    REPORTING = "reporting"
    TERMINATED = "terminated"


class AgentLoop:
    def __init__(
        self,
        client,
        registry: ActionRegistry,
        driver: Driver,
        store: IdentityStore,
        bootstrap: BootstrapInfo | Callable[[], BootstrapInfo],
        *,
        backoff: Backoff | None = None,
        journal=None,
        register_retry_delay: float = REGISTER_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._registry = registry
        self._driver = driver
        self._store = store
        self._bootstrap = bootstrap
        self._backoff = backoff or Backoff(sleep=sleep)
        self._journal = journal
        self._register_retry_delay = register_retry_delay
        self._sleep = sleep
        self._log = structlog.get_logger("loop")

        self.identity: AgentIdentity | None = None
        self.transitions: list[State] = []
        self._queued: Any = None
        self._command: Command | None = None
        self._result: ActionResult = None
        self._report: Report | None = None

    @property
    def backoff(self) -> Backoff:
        return self._backoff

    def run(self) -> State:
        """Drive the state machine until the generation ends."""
        state = State.REGISTERING
        handlers = {
            State.REGISTERING: self._register,
            State.READY: self._ready,
            State.EXECUTING: self._execute,
            State.REPORTING: self._submit,
        }
        while state is not State.TERMINATED:
            self.transitions.append(state)
            state = handlers[state]()
        self.transitions.append(state)
        self._log.info("generation_ended")
        return state

    # ── states ───────────────────────────────────────────────────────────

    def _register(self) -> State:
        registration = load_or_register(
            self._store,
            self._client,
            self._bootstrap,
            driver=self._driver,
            retry_delay=self._register_retry_delay,
            sleep=self._sleep,
        )
        self.identity = registration.identity
        bind_agent(self.identity.id)
        self._queued = registration.command
        return State.READY

    def _ready(self) -> State:
        payload, self._queued = self._queued, None
        try:
            command = interpret(payload)
        except InvalidCommand as exc:
            self._log.warning("invalid_command", payload=payload, error=str(exc))
            self._result = False
            return State.REPORTING

        if command is None:
            self._result = None
            return State.REPORTING
        if command.name == SHUTDOWN_COMMAND:
            self._log.info("shutdown_received")
            return State.TERMINATED

        self._command = command
        return State.EXECUTING

    def _execute(self) -> State:
        command = self._command
        self._command = None
        self._log.info("executing", command=command.name, argument=command.argument)

        outcome = self._registry.dispatch(command)
        if self._journal is not None:
            self._journal.info(
                "command_executed",
                command=command.name,
                argument=command.argument,
                result=outcome.result,
                end_generation=outcome.end_generation,
            )
        if outcome.end_generation:
            return State.TERMINATED

        self._result = outcome.result
        return State.REPORTING

    def _submit(self) -> State:
        if self._report is None:
            self._report = sense(self._driver, self._result)
            self._result = None

        try:
            payload = self._client.report(self.identity.id, self._report)
        except CoordinatorUnreachable as exc:
            self._backoff.failed(exc)
            return State.REPORTING

        self._backoff.succeeded()
        if self._journal is not None:
            self._journal.info("report_submitted", **self._report.to_wire(), next_command=payload)
        self._log.debug("reported", result=self._report.result, next_command=payload)
        self._report = None
        self._queued = payload
        return State.READY
