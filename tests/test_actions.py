import pytest

from src.agent.actions import (
    ActionRegistry,
    Outcome,
    Repeat,
    UnknownCommand,
    build_registry,
    normalize_result,
)
from src.agent.commands import Simple, WithArgs
from src.agent.drivers import SimulatedDriver, Slot


class StubUpdater:
    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.calls: list = []

    def update(self, argv, env=None) -> bool:
        self.calls.append(list(argv))
        return self.answer


def _registry(driver: SimulatedDriver, sleeps=None, updater=None) -> ActionRegistry:
    return build_registry(
        driver,
        updater or StubUpdater(True),
        argv=["--simulate"],
        sleep=sleeps if sleeps is not None else (lambda s: None),
    )


def test_normalize_result() -> None:
    assert normalize_result(True) == "Success"
    assert normalize_result(False) == "Failure"
    assert normalize_result(None) == "None"
    assert normalize_result({"Item": {"name": "x", "count": 1}}) == {"Item": {"name": "x", "count": 1}}


def test_repeat_stops_at_first_failure() -> None:
    attempts = []

    def step() -> bool:
        attempts.append(1)
        return len(attempts) < 2

    assert Repeat(step).execute(3) is False
    assert len(attempts) == 2


def test_repeat_all_succeed() -> None:
    attempts = []
    assert Repeat(lambda: attempts.append(1) or True).execute(4) is True
    assert len(attempts) == 4


def test_repeat_zero_times_succeeds_without_steps() -> None:
    assert Repeat(lambda: pytest.fail("must not run")).execute(0) is True


def test_unknown_command_lookup_raises() -> None:
    with pytest.raises(UnknownCommand):
        ActionRegistry().get("Teleport")


def test_unknown_command_dispatch_is_failure(driver) -> None:
    assert _registry(driver).dispatch(Simple("Teleport")) == Outcome(False)


def test_raising_action_is_failure(driver) -> None:
    # Select with a non-numeric argument raises inside the action
    assert _registry(driver).dispatch(WithArgs("Select", "first")) == Outcome(False)


def test_forward_moves_and_burns_fuel(driver) -> None:
    outcome = _registry(driver).dispatch(WithArgs("Forward", 3))
    assert outcome == Outcome(True)
    assert driver.position == (0, 0, -3)
    assert driver.fuel == 17


def test_forward_blocked_reports_failure() -> None:
    driver = SimulatedDriver(blocks={(0, 0, -2): "minecraft:stone"})
    assert _registry(driver).dispatch(WithArgs("Forward", 3)).result is False
    assert driver.position == (0, 0, -1)


def test_turns_and_dig(driver) -> None:
    driver.blocks[(1, 0, 0)] = "minecraft:dirt"
    registry = _registry(driver)
    assert registry.dispatch(Simple("Right")).result is True
    assert driver.facing == "East"
    assert registry.dispatch(Simple("Dig")).result is True
    assert driver.inventory[1] == Slot("minecraft:dirt", 1)
    assert registry.dispatch(Simple("Dig")).result is False


def test_wait_sleeps_for_argument(driver, sleeps) -> None:
    registry = _registry(driver, sleeps)
    assert registry.dispatch(WithArgs("Wait", 5)).result is None
    assert registry.dispatch(Simple("Wait")).result is None
    assert sleeps == [5.0, 0.0]


def test_item_info(driver) -> None:
    driver.inventory[3] = Slot("minecraft:coal", 12)
    registry = _registry(driver)
    assert registry.dispatch(WithArgs("ItemInfo", 3)).result == {
        "Item": {"name": "minecraft:coal", "count": 12}
    }
    assert registry.dispatch(WithArgs("ItemInfo", 4)).result is None


def test_refuel_fills_tank_from_depot() -> None:
    driver = SimulatedDriver(
        fuel=5,
        limit=20,
        inventory={16: Slot("minecraft:cobblestone", 4)},
        depot=[Slot("minecraft:coal", 10), Slot("minecraft:coal", 10)],
    )
    assert _registry(driver).dispatch(Simple("Refuel")).result is None
    assert driver.fuel == 20
    assert driver.dropped == [Slot("minecraft:cobblestone", 4)]


def test_refuel_fails_when_depot_runs_dry() -> None:
    driver = SimulatedDriver(fuel=5, limit=20, depot=[Slot("minecraft:coal", 3)])
    assert _registry(driver).dispatch(Simple("Refuel")).result is False
    assert driver.fuel == 8


def test_dump_empties_every_slot() -> None:
    driver = SimulatedDriver(inventory={1: Slot("a", 1), 7: Slot("b", 2), 16: Slot("c", 3)})
    assert _registry(driver).dispatch(Simple("Dump")).result is None
    assert driver.inventory == {}
    assert [s.name for s in driver.dropped] == ["a", "b", "c"]


def test_counted_drop(driver) -> None:
    driver.inventory[1] = Slot("minecraft:sand", 10)
    assert _registry(driver).dispatch(WithArgs("DropFront", 4)).result is True
    assert driver.inventory[1].count == 6


def test_place_uses_selected_slot(driver) -> None:
    driver.inventory[2] = Slot("minecraft:torch", 1)
    registry = _registry(driver)
    assert registry.dispatch(WithArgs("Select", 2)).result is True
    assert registry.dispatch(Simple("PlaceUp")).result is True
    assert driver.blocks[(0, 1, 0)] == "minecraft:torch"
    assert registry.dispatch(Simple("PlaceUp")).result is False


def test_update_always_ends_generation(driver) -> None:
    ok_updater = StubUpdater(True)
    assert _registry(driver, updater=ok_updater).dispatch(Simple("Update")) == Outcome(True, True)
    assert ok_updater.calls == [["--simulate"]]

    refused = StubUpdater(False)
    assert _registry(driver, updater=refused).dispatch(Simple("Update")) == Outcome(False, True)


def test_registry_lists_full_command_set(driver) -> None:
    names = _registry(driver).names()
    for name in ("Wait", "Forward", "Backward", "Up", "Down", "Left", "Right", "Dig",
                 "DigUp", "DigDown", "ItemInfo", "Refuel", "Dump", "Update"):
        assert name in names
