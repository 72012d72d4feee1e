"""Opponent action policies.

A policy is any callable (context, side, rng) -> action. The session calls it
when the opponent's action was not submitted for the turn.
"""
from __future__ import annotations
import random
from typing import Callable

from .damage import base_damage, is_stab
from .models import BattleContext, Side, UseMove
from .typechart import effectiveness

Policy = Callable[[BattleContext, Side, random.Random], UseMove]


def random_move_policy(context: BattleContext, side: Side, rng: random.Random) -> UseMove:
    """Pick uniformly among moves with PP left (index 0 when none, which resolves to Struggle)."""
    me = context.combatant(side)
    usable = [i for i, slot in enumerate(me.moves) if slot.usable]
    if not usable:
        return UseMove(0)
    return UseMove(rng.choice(usable))


def strongest_move_policy(context: BattleContext, side: Side, rng: random.Random) -> UseMove:
    """Pick the usable move with the best expected damage (no randomness)."""
    me = context.combatant(side)
    foe = context.combatant(side.other)
    best_idx, best_score = 0, -1.0
    for i, slot in enumerate(me.moves):
        if not slot.usable:
            continue
        mv = slot.move
        score = 0.0
        if mv.deals_damage:
            score = base_damage(me.level, mv.power, 1, 1) * effectiveness(mv.type, foe.types)
            if is_stab(me, mv):
                score *= 1.5
            score *= (mv.accuracy or 100) / 100
            if mv.multi_hit:
                score *= sum(mv.hits) / 2
        if score > best_score:
            best_idx, best_score = i, score
    return UseMove(best_idx)

__all__ = ["random_move_policy","strongest_move_policy","Policy"]
