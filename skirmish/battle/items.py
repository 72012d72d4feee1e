"""In-battle item capability.

The engine never knows item semantics itself: it asks an ItemHandler whether
an item can be used on a combatant and applies the ItemEffect it returns.
BagItemHandler is the stock handler backed by a simple inventory.
"""
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Protocol

from skirmish.core.types import StatusCondition
from .models import CombatantState


@dataclass(frozen=True)
class ItemEffect:
    hp_restored: int = 0
    cure_status: bool = False
    stat_changes: Mapping[str, int] = field(default_factory=dict)


class ItemHandler(Protocol):
    def available(self, user: CombatantState) -> Iterable[str]: ...
    def can_use(self, item_id: str, user: CombatantState) -> bool: ...
    def use(self, item_id: str, user: CombatantState) -> ItemEffect: ...


@dataclass(frozen=True)
class ItemDef:
    heal: int = 0
    cures: FrozenSet[StatusCondition] = frozenset()
    boost: Optional[str] = None


_ALL_MAJOR = frozenset({
    StatusCondition.BURN, StatusCondition.FREEZE, StatusCondition.PARALYSIS,
    StatusCondition.POISON, StatusCondition.SLEEP,
})

ITEMS: Dict[str, ItemDef] = {
    "potion": ItemDef(heal=20),
    "super-potion": ItemDef(heal=50),
    "hyper-potion": ItemDef(heal=200),
    "max-potion": ItemDef(heal=9999),
    "burn-heal": ItemDef(cures=frozenset({StatusCondition.BURN})),
    "ice-heal": ItemDef(cures=frozenset({StatusCondition.FREEZE})),
    "paralyze-heal": ItemDef(cures=frozenset({StatusCondition.PARALYSIS})),
    "antidote": ItemDef(cures=frozenset({StatusCondition.POISON})),
    "awakening": ItemDef(cures=frozenset({StatusCondition.SLEEP})),
    "full-heal": ItemDef(cures=_ALL_MAJOR | {StatusCondition.CONFUSION}),
    "x-attack": ItemDef(boost="attack"),
    "x-defense": ItemDef(boost="defense"),
    "x-speed": ItemDef(boost="speed"),
}


class BagItemHandler:
    def __init__(self, inventory: Optional[Mapping[str, int]] = None):
        self.inventory: Counter = Counter({k: v for k, v in (inventory or {}).items() if k in ITEMS and v > 0})

    def available(self, user: CombatantState) -> Iterable[str]:
        return [item for item in sorted(self.inventory) if self.can_use(item, user)]

    def can_use(self, item_id: str, user: CombatantState) -> bool:
        d = ITEMS.get(item_id)
        if d is None or self.inventory[item_id] <= 0 or user.fainted:
            return False
        if d.heal:
            return user.current_hp < user.max_hp
        if d.cures:
            return user.status in d.cures
        if d.boost:
            return user.stages.get(d.boost) < 6
        return False

    def use(self, item_id: str, user: CombatantState) -> ItemEffect:
        d = ITEMS[item_id]
        self.inventory[item_id] -= 1
        if self.inventory[item_id] <= 0:
            del self.inventory[item_id]
        return ItemEffect(
            hp_restored=d.heal,
            cure_status=bool(d.cures),
            stat_changes={d.boost: 1} if d.boost else {},
        )

__all__ = ["ItemEffect","ItemHandler","BagItemHandler","ITEMS"]
