"""Sensor/actuator drivers.

The control loop never talks to hardware directly; it goes through a
:class:`Driver`. Real robots ship their own implementation. The
:class:`SimulatedDriver` here is an in-memory robot for dry runs and tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from src.common.constants import INVENTORY_SLOTS


class Driver(Protocol):
    # movement
    def forward(self) -> bool: ...
    def back(self) -> bool: ...
    def up(self) -> bool: ...
    def down(self) -> bool: ...
    def turn_left(self) -> bool: ...
    def turn_right(self) -> bool: ...

    # world interaction
    def dig(self) -> bool: ...
    def dig_up(self) -> bool: ...
    def dig_down(self) -> bool: ...
    def place(self) -> bool: ...
    def place_up(self) -> bool: ...
    def place_down(self) -> bool: ...

    # inventory
    def select(self, slot: int) -> bool: ...
    def drop(self, count: int | None = None) -> bool: ...
    def drop_up(self, count: int | None = None) -> bool: ...
    def drop_down(self, count: int | None = None) -> bool: ...
    def suck(self, count: int | None = None) -> bool: ...
    def suck_up(self, count: int | None = None) -> bool: ...
    def suck_down(self, count: int | None = None) -> bool: ...
    def item_detail(self, slot: int | None = None) -> dict | None: ...
    def refuel(self) -> bool: ...

    # fuel
    def fuel_level(self) -> int: ...
    def fuel_limit(self) -> int: ...

    # sensing: block name, or None for empty space
    def inspect(self) -> str | None: ...
    def inspect_up(self) -> str | None: ...
    def inspect_down(self) -> str | None: ...

    def set_label(self, label: str) -> None: ...


_HEADINGS = ("North", "East", "South", "West")
_UNIT = {"North": (0, 0, -1), "East": (1, 0, 0), "South": (0, 0, 1), "West": (-1, 0, 0)}


@dataclass
class Slot:
    name: str
    count: int


@dataclass
class SimulatedDriver:
    """In-memory robot with a sparse block world.

    ``blocks`` maps absolute ``(x, y, z)`` to a block name. Movement into an
    occupied cell fails, as does any move without fuel. ``fail_after`` lets
    tests make the N-th movement (1-based, counted across all moves) fail.
    ``depot`` is the stack of items a ``suck`` pulls from.
    """

    position: tuple[int, int, int] = (0, 0, 0)
    facing: str = "North"
    fuel: int = 20
    limit: int = 20
    blocks: dict[tuple[int, int, int], str] = field(default_factory=dict)
    inventory: dict[int, Slot] = field(default_factory=dict)
    depot: list[Slot] = field(default_factory=list)
    fail_after: int | None = None
    selected: int = 1
    label: str | None = None
    moves: int = 0
    dropped: list[Slot] = field(default_factory=list)

    # ── geometry ─────────────────────────────────────────────────────────

    def _ahead(self, sign: int = 1) -> tuple[int, int, int]:
        dx, dy, dz = _UNIT[self.facing]
        x, y, z = self.position
        return x + sign * dx, y + sign * dy, z + sign * dz

    def _above(self) -> tuple[int, int, int]:
        x, y, z = self.position
        return x, y + 1, z

    def _below(self) -> tuple[int, int, int]:
        x, y, z = self.position
        return x, y - 1, z

    def _move_to(self, target: tuple[int, int, int]) -> bool:
        self.moves += 1
        if self.fail_after is not None and self.moves >= self.fail_after:
            return False
        if self.fuel <= 0 or target in self.blocks:
            return False
        self.position = target
        self.fuel -= 1
        return True

    # ── movement ─────────────────────────────────────────────────────────

    def forward(self) -> bool:
        return self._move_to(self._ahead())

    def back(self) -> bool:
        return self._move_to(self._ahead(-1))

    def up(self) -> bool:
        return self._move_to(self._above())

    def down(self) -> bool:
        return self._move_to(self._below())

    def turn_left(self) -> bool:
        self.facing = _HEADINGS[(_HEADINGS.index(self.facing) - 1) % 4]
        return True

    def turn_right(self) -> bool:
        self.facing = _HEADINGS[(_HEADINGS.index(self.facing) + 1) % 4]
        return True

    # ── world interaction ────────────────────────────────────────────────

    def _dig_at(self, cell: tuple[int, int, int]) -> bool:
        name = self.blocks.pop(cell, None)
        if name is None:
            return False
        self._store(Slot(name, 1))
        return True

    def dig(self) -> bool:
        return self._dig_at(self._ahead())

    def dig_up(self) -> bool:
        return self._dig_at(self._above())

    def dig_down(self) -> bool:
        return self._dig_at(self._below())

    def _place_at(self, cell: tuple[int, int, int]) -> bool:
        slot = self.inventory.get(self.selected)
        if slot is None or cell in self.blocks:
            return False
        self.blocks[cell] = slot.name
        self._take(self.selected, 1)
        return True

    def place(self) -> bool:
        return self._place_at(self._ahead())

    def place_up(self) -> bool:
        return self._place_at(self._above())

    def place_down(self) -> bool:
        return self._place_at(self._below())

    # ── inventory ────────────────────────────────────────────────────────

    def _store(self, item: Slot) -> bool:
        """Stack into the selected slot if possible, else the first fitting slot."""
        current = self.inventory.get(self.selected)
        if current is None:
            self.inventory[self.selected] = Slot(item.name, item.count)
            return True
        if current.name == item.name:
            current.count += item.count
            return True
        for i in range(1, INVENTORY_SLOTS + 1):
            slot = self.inventory.get(i)
            if slot is not None and slot.name == item.name:
                slot.count += item.count
                return True
        for i in range(1, INVENTORY_SLOTS + 1):
            if i not in self.inventory:
                self.inventory[i] = Slot(item.name, item.count)
                return True
        return False

    def _take(self, index: int, count: int | None) -> Slot | None:
        slot = self.inventory.get(index)
        if slot is None:
            return None
        n = slot.count if count is None else min(count, slot.count)
        slot.count -= n
        if slot.count == 0:
            del self.inventory[index]
        return Slot(slot.name, n)

    def select(self, slot: int) -> bool:
        if not 1 <= slot <= INVENTORY_SLOTS:
            return False
        self.selected = slot
        return True

    def drop(self, count: int | None = None) -> bool:
        taken = self._take(self.selected, count)
        if taken is None:
            return False
        self.dropped.append(taken)
        return True

    drop_up = drop
    drop_down = drop

    def suck(self, count: int | None = None) -> bool:
        if not self.depot:
            return False
        item = self.depot.pop(0)
        if count is not None and count < item.count:
            self.depot.insert(0, Slot(item.name, item.count - count))
            item = Slot(item.name, count)
        return self._store(item)

    suck_up = suck
    suck_down = suck

    def item_detail(self, slot: int | None = None) -> dict | None:
        found = self.inventory.get(self.selected if slot is None else slot)
        if found is None:
            return None
        return {"name": found.name, "count": found.count}

    def refuel(self) -> bool:
        """Burn every item in the selected slot; each item is worth 1 fuel."""
        taken = self._take(self.selected, None)
        if taken is None:
            return False
        self.fuel = min(self.limit, self.fuel + taken.count)
        return True

    # ── fuel / sensing ───────────────────────────────────────────────────

    def fuel_level(self) -> int:
        return self.fuel

    def fuel_limit(self) -> int:
        return self.limit

    def inspect(self) -> str | None:
        return self.blocks.get(self._ahead())

    def inspect_up(self) -> str | None:
        return self.blocks.get(self._above())

    def inspect_down(self) -> str | None:
        return self.blocks.get(self._below())

    def set_label(self, label: str) -> None:
        self.label = label
