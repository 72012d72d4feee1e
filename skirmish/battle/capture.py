"""Capture mechanics (Gen IV style catch value).

A thrower with a large species-caught tally can land a critical capture: a
single check at p ** 0.25 replaces the normal roll.
"""
from __future__ import annotations
from dataclasses import dataclass
import random
from typing import Callable, Dict

from skirmish.core.errors import InvalidActionError, InvalidTargetError
from skirmish.core.types import ElementType, StatusCondition
from .models import CaptureAttempt, CombatantState

MAX_CAPTURE_VALUE = 255
GUARANTEED = float('inf')

def _flat(mod: float) -> Callable[[CombatantState, int], float]:
    return lambda target, turn: mod

def _net(target: CombatantState, turn: int) -> float:
    return 3.5 if any(t in (ElementType.WATER, ElementType.BUG) for t in target.types) else 1.0

def _quick(target: CombatantState, turn: int) -> float:
    return 5.0 if turn <= 1 else 1.0

def _timer(target: CombatantState, turn: int) -> float:
    return min(4.0, 1.0 + turn * 0.3)

# Device id -> modifier(target, turn)
DEVICE_MODIFIERS: Dict[str, Callable[[CombatantState, int], float]] = {
    'standard-ball': _flat(1.0),
    'great-ball': _flat(1.5),
    'ultra-ball': _flat(2.0),
    'master-ball': _flat(GUARANTEED),
    'net-ball': _net,
    'quick-ball': _quick,
    'timer-ball': _timer,
}

STATUS_BONUS = {
    StatusCondition.SLEEP: 2.5,
    StatusCondition.FREEZE: 2.5,
    StatusCondition.PARALYSIS: 1.5,
    StatusCondition.BURN: 1.5,
    StatusCondition.POISON: 1.5,
    StatusCondition.CONFUSION: 1.5,
}

# Failed throws shake by probability band: (min probability, shakes)
SHAKE_BANDS = ((0.60, 2), (0.30, 1))

# Critical capture multiplier by species caught: (more than, multiplier)
CRITICAL_BANDS = ((600, 2.5), (450, 2.0), (300, 1.5), (150, 1.0), (30, 0.5))


@dataclass(frozen=True)
class CaptureResult:
    success: bool
    shake_count: int
    probability: float
    critical: bool = False


def known_devices():
    return tuple(DEVICE_MODIFIERS)


def device_modifier(device: str, target: CombatantState, turn: int) -> float:
    fn = DEVICE_MODIFIERS.get(device)
    if fn is None:
        raise InvalidActionError(f"Unknown capture device '{device}'", action=device)
    return fn(target, turn)


def build_attempt(device: str, target: CombatantState, turn: int, caught_species: int = 0) -> CaptureAttempt:
    return CaptureAttempt(
        device=device,
        modifier=device_modifier(device, target, turn),
        hp_ratio=target.current_hp / target.max_hp,
        status=target.status,
        caught_species=caught_species,
    )


def capture_value(catch_rate: int, max_hp: int, current_hp: int, modifier: float, status: StatusCondition) -> float:
    # a = ((3*maxHP - 2*HP) * rate * device * status) / (3*maxHP), clamped to [0, 255]
    status_mod = STATUS_BONUS.get(status, 1.0)
    a = ((3*max_hp - 2*current_hp) * catch_rate * modifier * status_mod) / (3*max_hp)
    return max(0.0, min(float(MAX_CAPTURE_VALUE), a))


def capture_chance(target: CombatantState, attempt: CaptureAttempt) -> float:
    if attempt.modifier == GUARANTEED:
        return 1.0
    current_hp = round(attempt.hp_ratio * target.max_hp)
    return capture_value(target.species.catch_rate, target.max_hp, current_hp, attempt.modifier, attempt.status) / MAX_CAPTURE_VALUE


def shakes_for_failure(probability: float) -> int:
    for threshold, shakes in SHAKE_BANDS:
        if probability >= threshold:
            return shakes
    return 0


def critical_multiplier(caught_species: int) -> float:
    for more_than, mult in CRITICAL_BANDS:
        if caught_species > more_than:
            return mult
    return 0.0


def critical_capture_chance(probability: float, caught_species: int) -> float:
    mult = critical_multiplier(caught_species)
    if mult <= 0:
        return 0.0
    return min(1.0, probability * MAX_CAPTURE_VALUE * mult / 2048)


def attempt_capture(target: CombatantState, attempt: CaptureAttempt, rng: random.Random) -> CaptureResult:
    if target.fainted:
        raise InvalidTargetError(f"Cannot capture fainted {target.name}")
    if attempt.modifier == GUARANTEED:
        return CaptureResult(True, 3, 1.0)
    p = capture_chance(target, attempt)
    crit = critical_capture_chance(p, attempt.caught_species)
    if crit > 0 and rng.random() < crit:
        if rng.random() < p ** 0.25:
            return CaptureResult(True, 3, p, critical=True)
        return CaptureResult(False, shakes_for_failure(p), p, critical=True)
    if rng.random() < p:
        return CaptureResult(True, 3, p)
    return CaptureResult(False, shakes_for_failure(p), p)

__all__ = [
    "attempt_capture","capture_chance","capture_value","build_attempt","device_modifier",
    "known_devices","shakes_for_failure","critical_multiplier","critical_capture_chance",
    "CaptureResult","DEVICE_MODIFIERS","STATUS_BONUS","CRITICAL_BANDS",
]
