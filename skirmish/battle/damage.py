"""Damage calculation.

compute_damage is pure: it consumes RNG draws and reports what happened, the
session applies HP loss, PP use, stat stages and status afterwards.

Draw order for a damaging move: accuracy, critical hit, random roll, then the
secondary effect chance. A miss or a zero-effectiveness hit stops early and
consumes no further draws. Multi-hit moves roll their strike count once the
first strike lands; later strikes skip the accuracy draw.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
import random

from skirmish.core.errors import InvalidMoveError, InvalidTargetError
from skirmish.core.types import ElementType, MoveCategory, StatusCondition
from .models import CombatantState, Move, MoveEffect, stage_multiplier_acc_eva
from .status import can_inflict
from .typechart import effectiveness as type_effectiveness

STAB_MULTIPLIER = 1.5
CRIT_MULTIPLIER = 2.0
RANDOM_ROLL = (85, 100)
DEFAULT_CRIT_CHANCE = 1/16
HIGH_CRIT_CHANCE = 1/8

# Used when every known move is out of PP.
STRUGGLE = Move(
    id=0, name="Struggle", type=ElementType.NORMAL, category=MoveCategory.PHYSICAL,
    power=50, accuracy=None, max_pp=0,
    effect=MoveEffect(kind="recoil", target="self", ratio=25),
    typeless=True,
)

# Confused self-hit.
CONFUSION_HIT = Move(
    id=-1, name="Confusion", type=ElementType.NORMAL, category=MoveCategory.PHYSICAL,
    power=40, accuracy=None, typeless=True,
)


@dataclass(frozen=True)
class DamageResult:
    amount: int = 0
    effectiveness: float = 1.0
    critical: bool = False
    missed: bool = False
    stab: bool = False
    status_inflicted: Optional[StatusCondition] = None
    status_blocked: Optional[StatusCondition] = None
    stat_changes: Dict[str, int] = field(default_factory=dict)       # on the defender
    self_stat_changes: Dict[str, int] = field(default_factory=dict)  # on the attacker


def accuracy_check(attacker: CombatantState, defender: CombatantState, move: Move, rng: random.Random) -> bool:
    if move.accuracy is None:
        return True
    acc = move.accuracy * stage_multiplier_acc_eva(attacker.stages.accuracy) / stage_multiplier_acc_eva(defender.stages.evasion)
    return rng.random() * 100 < min(100.0, acc)


def attack_defense(attacker: CombatantState, defender: CombatantState, move: Move) -> Tuple[int, int]:
    if move.category is MoveCategory.SPECIAL:
        a = int(attacker.effective_stat("sp_atk"))
        d = int(defender.effective_stat("sp_def"))
    else:
        a = int(attacker.effective_stat("attack"))
        if attacker.status is StatusCondition.BURN:
            a = a // 2
        d = int(defender.effective_stat("defense"))
    return max(1, a), max(1, d)


def roll_hit_count(move: Move, rng: random.Random) -> int:
    lo, hi = move.hits
    if lo >= hi:
        return lo
    if hi - lo == 1:
        return lo if rng.random() < 0.5 else hi
    # 35% min, 35% min+1, 15% max-1, 15% max
    roll = rng.random() * 100
    if roll < 35:
        return lo
    if roll < 70:
        return lo + 1
    if roll < 85:
        return hi - 1
    return hi


def base_damage(level: int, power: int, attack: int, defense: int) -> float:
    return int((2 * level / 5 + 2) * power * attack / defense) / 50 + 2


def is_stab(attacker: CombatantState, move: Move) -> bool:
    return not move.typeless and move.type in attacker.types


def _roll_chance(effect: MoveEffect, rng: random.Random) -> bool:
    if effect.chance >= 100:
        return True
    return rng.random() * 100 < effect.chance


def _roll_effect(effect: Optional[MoveEffect], defender: CombatantState, move: Move, rng: random.Random) -> Dict:
    """Resolve status / stat effects into DamageResult fields. Other kinds are applied by the session."""
    out: Dict = {}
    if effect is None or effect.kind not in ("status", "stat"):
        return out
    if not _roll_chance(effect, rng):
        return out
    if effect.kind == "stat":
        key = "self_stat_changes" if effect.target == "self" else "stat_changes"
        out[key] = effect.stage_changes
        return out
    if effect.status is None or effect.target == "self":
        return out
    if type_effectiveness(move.type, defender.types) == 0 or not can_inflict(defender, effect.status):
        out["status_blocked"] = effect.status
    else:
        out["status_inflicted"] = effect.status
    return out


def compute_damage(
    attacker: CombatantState,
    defender: CombatantState,
    move: Move,
    rng: random.Random,
    *,
    remaining_pp: Optional[int] = None,
    crit_chance: Optional[float] = None,
    check_accuracy: bool = True,
) -> DamageResult:
    if remaining_pp is not None and remaining_pp <= 0:
        raise InvalidMoveError(f"{move.name} has no PP left", move_id=move.id)
    if defender.fainted:
        raise InvalidTargetError(f"{defender.name} has already fainted")

    eff = 1.0 if move.typeless else type_effectiveness(move.type, defender.types)
    stab = is_stab(attacker, move)
    if check_accuracy and not accuracy_check(attacker, defender, move, rng):
        return DamageResult(missed=True, effectiveness=eff, stab=stab)

    if not move.deals_damage:
        return DamageResult(effectiveness=eff, stab=stab, **_roll_effect(move.effect, defender, move, rng))

    if eff == 0:
        return DamageResult(amount=0, effectiveness=0.0, stab=stab)

    a, d = attack_defense(attacker, defender, move)
    dmg = base_damage(attacker.level, move.power, a, d)
    if stab:
        dmg *= STAB_MULTIPLIER
    dmg *= eff
    if crit_chance is None:
        crit_chance = HIGH_CRIT_CHANCE if move.high_crit else DEFAULT_CRIT_CHANCE
    critical = rng.random() < crit_chance
    if critical:
        dmg *= CRIT_MULTIPLIER
    dmg *= rng.randint(*RANDOM_ROLL) / 100
    amount = max(1, int(dmg))
    return DamageResult(
        amount=amount, effectiveness=eff, critical=critical, stab=stab,
        **_roll_effect(move.effect, defender, move, rng),
    )


def self_hit_damage(combatant: CombatantState) -> int:
    """Damage a confused combatant deals to itself (typeless, no crit or random roll)."""
    a, d = attack_defense(combatant, combatant, CONFUSION_HIT)
    return max(1, int(base_damage(combatant.level, CONFUSION_HIT.power, a, d)))

__all__ = [
    "compute_damage","DamageResult","accuracy_check","attack_defense","base_damage","is_stab",
    "self_hit_damage","STRUGGLE","CONFUSION_HIT","STAB_MULTIPLIER","CRIT_MULTIPLIER",
    "DEFAULT_CRIT_CHANCE","HIGH_CRIT_CHANCE","roll_hit_count",
]
