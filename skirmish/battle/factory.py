"""Factory helpers for building CombatantState from persistent instances or species data.

Shared across the battle session, the service and tests.
"""
from __future__ import annotations
from typing import Dict, List, Optional
import uuid

from skirmish.core.errors import ConfigurationError
from skirmish.core.types import StatusCondition
from skirmish.data.loader import GameData
from .growth import MAX_LEVEL, MIN_LEVEL, clamp_level, required_exp_for_level
from .models import (
    MAX_MOVES, STAT_KEYS, CombatantState, CreatureInstance, MoveSlot, Species, Stats,
)


def derive_stats(base: Stats, level: int, ivs: Optional[Dict[str, int]] = None) -> Stats:
    ivs = ivs or {}
    stats = {}
    for k in STAT_KEYS:
        v = getattr(base, k)
        iv = int(ivs.get(k, 0))
        if k == "hp":
            stats[k] = int(((2*v + iv)*level)/100 + level + 10)
        else:
            stats[k] = int(((2*v + iv)*level)/100 + 5)
    return Stats(**stats)


def default_move_ids(species: Species, level: int) -> List[int]:
    # Most recently learned moves win, like a wild creature's natural moveset
    return species.moves_up_to(level)[-MAX_MOVES:]


def combatant_from_instance(inst: CreatureInstance, data: GameData) -> CombatantState:
    species = data.species(inst.species_id)
    level = clamp_level(inst.level)
    stats = derive_stats(species.base_stats, level, inst.ivs)
    move_ids = list(inst.move_ids) or default_move_ids(species, level)
    if len(move_ids) > MAX_MOVES:
        raise ConfigurationError(f"{species.name} knows {len(move_ids)} moves (max {MAX_MOVES})")
    slots: List[MoveSlot] = []
    for mid in move_ids:
        mv = data.move(mid)
        pp = inst.pp.get(mid, mv.max_pp)
        slots.append(MoveSlot(mv, max(0, min(int(pp), mv.max_pp)), mv.max_pp))
    if not slots:
        raise ConfigurationError(f"{species.name} has no moves at level {level}")
    hp = stats.hp if inst.current_hp is None else inst.current_hp
    return CombatantState(
        instance_id=inst.instance_id,
        species=species,
        level=level,
        # An instance never holds less EXP than its level requires
        exp=max(int(inst.exp), required_exp_for_level(level, rate=species.growth_rate)),
        stats=stats,
        current_hp=hp,
        moves=slots,
        status=inst.status,
        ivs=dict(inst.ivs),
        nickname=inst.nickname,
    )


def wild_instance(species_id: int, level: int, data: GameData, *, instance_id: Optional[str] = None) -> CreatureInstance:
    species = data.species(species_id)
    level = clamp_level(level)
    return CreatureInstance(
        instance_id=instance_id or f"wild-{uuid.uuid4().hex[:8]}",
        species_id=species_id,
        level=level,
        exp=required_exp_for_level(level, rate=species.growth_rate),
        move_ids=default_move_ids(species, level),
    )


def instance_from_combatant(state: CombatantState) -> CreatureInstance:
    """Write-back snapshot. Confusion is battle-only and is dropped here."""
    status = StatusCondition.NONE if state.status is StatusCondition.CONFUSION else state.status
    return CreatureInstance(
        instance_id=state.instance_id,
        species_id=state.species.id,
        level=state.level,
        exp=state.exp,
        current_hp=state.current_hp,
        status=status,
        move_ids=[slot.move.id for slot in state.moves],
        pp={slot.move.id: slot.pp for slot in state.moves},
        ivs=dict(state.ivs),
        nickname=state.nickname,
    )

__all__ = [
    "derive_stats","clamp_level","default_move_ids","combatant_from_instance",
    "wild_instance","instance_from_combatant","MIN_LEVEL","MAX_LEVEL",
]
