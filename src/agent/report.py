"""Per-cycle status report."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.agent.actions import ActionResult, normalize_result
from src.agent.drivers import Driver
from src.common.constants import EMPTY_BLOCK


@dataclass(frozen=True)
class Surroundings:
    ahead: str = EMPTY_BLOCK
    above: str = EMPTY_BLOCK
    below: str = EMPTY_BLOCK


@dataclass(frozen=True)
class Report:
    fuel: int
    surroundings: Surroundings
    result: Any  # already normalized

    def to_wire(self) -> dict:
        return {
            "fuel": self.fuel,
            "ahead": self.surroundings.ahead,
            "above": self.surroundings.above,
            "below": self.surroundings.below,
            "ret": self.result,
        }


def sense(driver: Driver, result: ActionResult) -> Report:
    """Sample the sensors now and wrap *result* in its wire form."""
    surroundings = Surroundings(
        ahead=driver.inspect() or EMPTY_BLOCK,
        above=driver.inspect_up() or EMPTY_BLOCK,
        below=driver.inspect_down() or EMPTY_BLOCK,
    )
    return Report(driver.fuel_level(), surroundings, normalize_result(result))
