"""Major status conditions: application, pre-action checks, end-of-turn ticks.

A combatant holds at most one status at a time (confusion included).
Bad poison is poison with a rising counter: n/16 max HP on the n-th tick.
Sleep and confusion start counting down on the turn after they land.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional
import random

from skirmish.core.types import ElementType, StatusCondition
from skirmish.system.settings import SettingsData
from .models import CombatantState

SLEEP_TURNS = (1, 3)
CONFUSION_TURNS = (2, 5)
POISON_DIVISOR = 8
BURN_DIVISOR = 16
BAD_POISON_DIVISOR = 16

_TYPE_IMMUNITY: Dict[StatusCondition, FrozenSet[ElementType]] = {
    StatusCondition.BURN: frozenset({ElementType.FIRE}),
    StatusCondition.FREEZE: frozenset({ElementType.ICE}),
    StatusCondition.PARALYSIS: frozenset({ElementType.ELECTRIC}),
    StatusCondition.POISON: frozenset({ElementType.POISON, ElementType.STEEL}),
}

_DEFAULTS = SettingsData()


def is_immune(types: Iterable[ElementType], status: StatusCondition) -> bool:
    immune = _TYPE_IMMUNITY.get(status, frozenset())
    return any(t in immune for t in types)


def can_inflict(target: CombatantState, status: StatusCondition) -> bool:
    if status is StatusCondition.NONE or target.fainted:
        return False
    if target.status is not StatusCondition.NONE:
        return False
    return not is_immune(target.types, status)


def inflict(target: CombatantState, status: StatusCondition, rng: random.Random, *, escalating: bool = False) -> bool:
    """Set status if allowed. Sleep and confusion roll their duration now."""
    if not can_inflict(target, status):
        return False
    target.status = status
    target.status_fresh = status in (StatusCondition.SLEEP, StatusCondition.CONFUSION)
    target.toxic_counter = 1 if escalating and status is StatusCondition.POISON else 0
    if status is StatusCondition.SLEEP:
        target.status_turns = rng.randint(*SLEEP_TURNS)
    elif status is StatusCondition.CONFUSION:
        target.status_turns = rng.randint(*CONFUSION_TURNS)
    else:
        target.status_turns = 0
    return True


@dataclass(frozen=True)
class PreActionResult:
    can_act: bool
    reason: Optional[StatusCondition] = None
    confusion_hit: bool = False


def check_before_action(actor: CombatantState, rng: random.Random, settings: SettingsData = _DEFAULTS) -> PreActionResult:
    """Decide whether the actor's status stops it this action.

    Sleep and freeze always block; they only end during the end-of-turn tick.
    Paralysis blocks with the configured chance. Confusion makes the actor hit
    itself with the configured chance (the caller applies the damage).
    """
    st = actor.status
    if st in (StatusCondition.SLEEP, StatusCondition.FREEZE):
        return PreActionResult(False, st)
    if st is StatusCondition.PARALYSIS and rng.random() < settings.paralysis_skip_chance:
        return PreActionResult(False, st)
    if st is StatusCondition.CONFUSION and rng.random() < settings.confusion_self_hit_chance:
        return PreActionResult(False, st, confusion_hit=True)
    return PreActionResult(True)


@dataclass(frozen=True)
class TickResult:
    status: StatusCondition
    damage: int = 0
    cured: bool = False
    badly: bool = False


def end_of_turn(combatant: CombatantState, rng: random.Random, settings: SettingsData = _DEFAULTS) -> Optional[TickResult]:
    """Apply one end-of-turn status tick. Returns None when the status has no tick."""
    if combatant.fainted:
        return None
    st = combatant.status
    if st is StatusCondition.POISON and combatant.toxic_counter > 0:
        amount = max(1, combatant.max_hp * combatant.toxic_counter // BAD_POISON_DIVISOR)
        combatant.toxic_counter += 1
        return TickResult(st, damage=combatant.take_damage(amount), badly=True)
    if st is StatusCondition.POISON:
        return TickResult(st, damage=combatant.take_damage(max(1, combatant.max_hp // POISON_DIVISOR)))
    if st is StatusCondition.BURN:
        return TickResult(st, damage=combatant.take_damage(max(1, combatant.max_hp // BURN_DIVISOR)))
    if st in (StatusCondition.SLEEP, StatusCondition.CONFUSION):
        if combatant.status_fresh:
            combatant.status_fresh = False
            return TickResult(st)
        combatant.status_turns -= 1
        if combatant.status_turns <= 0:
            combatant.clear_status()
            return TickResult(st, cured=True)
        return TickResult(st)
    if st is StatusCondition.FREEZE:
        if rng.random() < settings.freeze_thaw_chance:
            combatant.clear_status()
            return TickResult(st, cured=True)
        return TickResult(st)
    return None

__all__ = [
    "is_immune","can_inflict","inflict","check_before_action","end_of_turn",
    "PreActionResult","TickResult","SLEEP_TURNS","CONFUSION_TURNS",
]
