"""Action registry and the built-in command set.

Every command name maps to an object with ``execute(argument)``. Results
are booleans, small structured payloads, or ``None``; the loop only ever
sends their normalized form (see :func:`normalize_result`).
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Union

import structlog

from src.agent.commands import Command
from src.agent.drivers import Driver
from src.common.constants import FUEL_SLOT, INVENTORY_SLOTS, UPDATE_COMMAND

log = structlog.get_logger("actions")

ActionResult = Union[bool, dict, list, None]


class UnknownCommand(KeyError):
    """No action is registered under the requested name."""


class Action(Protocol):
    def execute(self, argument: Any) -> ActionResult: ...


@dataclass(frozen=True)
class Outcome:
    """What the loop needs to know after one dispatch."""

    result: ActionResult
    end_generation: bool = False


def normalize_result(result: ActionResult) -> Any:
    """Map an action result onto its wire form."""
    if result is True:
        return "Success"
    if result is False:
        return "Failure"
    if result is None:
        return "None"
    return result


# ═══════════════════════════════════════════════════════════════════════════════
#  Primitive and composite actions
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class Step:
    """One driver primitive, argument ignored."""

    func: Callable[[], bool]

    def execute(self, argument: Any) -> ActionResult:
        return bool(self.func())


@dataclass
class Repeat:
    """Run a single-step primitive up to N times, stopping at the first failure."""

    func: Callable[[], bool]

    def execute(self, argument: Any) -> ActionResult:
        times = 1 if argument is None else int(argument)
        for _ in range(times):
            if not self.func():
                return False
        return True


@dataclass
class Counted:
    """Driver primitive taking an optional item count (drop/suck family)."""

    func: Callable[[int | None], bool]

    def execute(self, argument: Any) -> ActionResult:
        return bool(self.func(None if argument is None else int(argument)))


@dataclass
class Wait:
    sleep: Callable[[float], None] = time.sleep

    def execute(self, argument: Any) -> ActionResult:
        self.sleep(float(argument or 0))
        return None


@dataclass
class Select:
    driver: Driver

    def execute(self, argument: Any) -> ActionResult:
        return bool(self.driver.select(int(argument)))


@dataclass
class ItemInfo:
    """Describe one inventory slot; an empty slot reports no result."""

    driver: Driver

    def execute(self, argument: Any) -> ActionResult:
        detail = self.driver.item_detail(None if argument is None else int(argument))
        if detail is None:
            return None
        return {"Item": {"name": detail["name"], "count": detail["count"]}}


@dataclass
class Refuel:
    """Empty the fuel slot upward, then pull and burn fuel until the tank is full.

    Fails if the depot runs dry before the tank is full.
    """

    driver: Driver

    def execute(self, argument: Any) -> ActionResult:
        self.driver.select(FUEL_SLOT)
        self.driver.drop_up()
        while self.driver.fuel_level() != self.driver.fuel_limit():
            if not self.driver.suck():
                return False
            self.driver.refuel()
        return None


@dataclass
class Dump:
    """Drop every inventory slot forward."""

    driver: Driver

    def execute(self, argument: Any) -> ActionResult:
        for slot in range(1, INVENTORY_SLOTS + 1):
            self.driver.select(slot)
            self.driver.drop()
        return None


@dataclass
class UpdateAction:
    """Install the coordinator's current program and hand over to it.

    The current generation ends whatever the updater answers: on success
    the new generation reports instead, and a refused nested update must
    not keep this generation polling.
    """

    updater: Any
    argv: list[str]
    env: dict[str, str] | None = None

    def execute(self, argument: Any) -> ActionResult:
        return bool(self.updater.update(self.argv, self.env))


# ═══════════════════════════════════════════════════════════════════════════════
#  Registry
# ═══════════════════════════════════════════════════════════════════════════════


class ActionRegistry:
    """Command name -> action lookup with an explicit unknown branch."""

    def __init__(self) -> None:
        self._actions: dict[str, Action] = {}

    def register(self, name: str, action: Action) -> None:
        self._actions[name] = action

    def get(self, name: str) -> Action:
        try:
            return self._actions[name]
        except KeyError:
            raise UnknownCommand(name) from None

    def names(self) -> list[str]:
        return sorted(self._actions)

    def dispatch(self, command: Command) -> Outcome:
        """Execute *command*; unknown names and raising actions become failures."""
        try:
            action = self.get(command.name)
        except UnknownCommand:
            log.warning("unknown_command", command=command.name)
            return Outcome(False)

        try:
            result = action.execute(command.argument)
        except Exception as exc:
            log.error(
                "action_failed",
                command=command.name,
                argument=command.argument,
                error=repr(exc),
            )
            return Outcome(False)

        return Outcome(result, end_generation=isinstance(action, UpdateAction))


def build_registry(
    driver: Driver,
    updater: Any,
    *,
    argv: list[str],
    env: dict[str, str] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ActionRegistry:
    """Register the full command set against *driver*."""
    registry = ActionRegistry()
    registry.register("Wait", Wait(sleep))

    registry.register("Forward", Repeat(driver.forward))
    registry.register("Backward", Repeat(driver.back))
    registry.register("Up", Repeat(driver.up))
    registry.register("Down", Repeat(driver.down))
    registry.register("Left", Step(driver.turn_left))
    registry.register("Right", Step(driver.turn_right))

    registry.register("Dig", Step(driver.dig))
    registry.register("DigUp", Step(driver.dig_up))
    registry.register("DigDown", Step(driver.dig_down))
    registry.register("Place", Step(driver.place))
    registry.register("PlaceUp", Step(driver.place_up))
    registry.register("PlaceDown", Step(driver.place_down))

    registry.register("DropFront", Counted(driver.drop))
    registry.register("DropUp", Counted(driver.drop_up))
    registry.register("DropDown", Counted(driver.drop_down))
    registry.register("SuckFront", Counted(driver.suck))
    registry.register("SuckUp", Counted(driver.suck_up))
    registry.register("SuckDown", Counted(driver.suck_down))
    registry.register("Select", Select(driver))
    registry.register("ItemInfo", ItemInfo(driver))
    registry.register("Refuel", Refuel(driver))
    registry.register("Dump", Dump(driver))

    registry.register(UPDATE_COMMAND, UpdateAction(updater, argv, env))
    return registry
