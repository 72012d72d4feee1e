"""Experience calculation, level-up handling & move learning.

- Yield depends only on the defeated side: floor(base_exp * level * mult / 7),
  mult 1.5 for trainer-owned creatures, minimum 1.
- Growth curves live in growth.py; level 1 always needs 0 EXP; cap at level 100.
- A single award can cross several levels. Every level crossed recomputes
  stats, restores the max-HP gain and offers that level's learnset moves.
- Evolution is only reported, never applied.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple

from skirmish.core.logging import logger
from skirmish.data.loader import GameData
from .factory import derive_stats
from .growth import GROWTH_RATES, clamp_level, growth_rate, level_for_exp, required_exp_for_level
from .models import MAX_MOVES, CombatantState, MoveSlot, Species

TRAINER_MULTIPLIER = 1.5
EXP_DIVISOR = 7


def exp_gain(species: Species, level: int, *, is_trainer: bool = False) -> int:
    mult = TRAINER_MULTIPLIER if is_trainer else 1.0
    return max(1, int(species.base_exp * level * mult / EXP_DIVISOR))


def evolution_target(species: Species, level: int, *, item: str | None = None) -> Optional[int]:
    """Target species id when the evolution rule is met, else None."""
    rule = species.evolution
    if rule is None:
        return None
    if rule.level is not None and level >= rule.level:
        return rule.species_id
    if rule.item is not None and item == rule.item:
        return rule.species_id
    return None


@dataclass(frozen=True)
class ExperienceResult:
    exp_gained: int
    previous_level: int
    new_level: int
    leveled_up: bool
    evolution_ready: bool = False
    evolution_target: Optional[int] = None
    learned_moves: Tuple[int, ...] = ()
    pending_moves: Tuple[int, ...] = ()
    hp_gained: int = 0


def _learn_moves_at(winner: CombatantState, level: int, data: GameData, learned: List[int], pending: List[int]):
    known = {slot.move.id for slot in winner.moves}
    for mid in winner.species.moves_learned_at(level):
        if mid in known:
            continue
        mv = data.move(mid)
        if len(winner.moves) < MAX_MOVES:
            winner.moves.append(MoveSlot(mv, mv.max_pp, mv.max_pp))
            learned.append(mid)
        else:
            pending.append(mid)
        known.add(mid)


def award_experience(
    winner: CombatantState,
    fainted_species: Species,
    fainted_level: int,
    *,
    data: GameData,
    is_trainer: bool = False,
    item: str | None = None,
) -> ExperienceResult:
    """Grant EXP for one defeated opponent and resolve any level-ups in place."""
    gained = exp_gain(fainted_species, fainted_level, is_trainer=is_trainer)
    rate = winner.species.growth_rate
    prev_level = winner.level
    winner.exp += gained
    target_level = max(prev_level, clamp_level(level_for_exp(winner.exp, rate=rate)))
    learned: List[int] = []
    pending: List[int] = []
    hp_gained = 0
    for lvl in range(prev_level + 1, target_level + 1):
        old_max = winner.stats.hp
        winner.level = lvl
        winner.stats = derive_stats(winner.species.base_stats, lvl, winner.ivs)
        delta = winner.stats.hp - old_max
        hp_gained += winner.heal(delta) if delta > 0 else 0
        _learn_moves_at(winner, lvl, data, learned, pending)
        logger.debug("LevelUp", creature=winner.name, level=lvl)
    evo = evolution_target(winner.species, winner.level, item=item)
    return ExperienceResult(
        exp_gained=gained,
        previous_level=prev_level,
        new_level=winner.level,
        leveled_up=winner.level > prev_level,
        evolution_ready=evo is not None,
        evolution_target=evo,
        learned_moves=tuple(learned),
        pending_moves=tuple(pending),
        hp_gained=hp_gained,
    )

__all__ = [
    "award_experience","exp_gain","required_exp_for_level","level_for_exp","evolution_target",
    "growth_rate","ExperienceResult","GROWTH_RATES","TRAINER_MULTIPLIER",
]
