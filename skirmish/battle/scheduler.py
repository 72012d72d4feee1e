"""Turn ordering. Pure and deterministic: no RNG is consulted."""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Union

from skirmish.core.types import StatusCondition
from .models import AttemptCapture, CombatantState, Flee, Side, UseItem, UseMove

Action = Union[UseMove, AttemptCapture, Flee, UseItem]

ESCAPE_PRIORITY = 100   # capture / flee preempt everything
ITEM_PRIORITY = 6


@dataclass(frozen=True)
class ScheduledAction:
    side: Side
    action: Action


def effective_speed(state: CombatantState) -> float:
    speed = state.effective_stat("speed")
    if state.status is StatusCondition.PARALYSIS:
        speed *= 0.5
    return speed


def action_priority(action: Action, state: CombatantState) -> int:
    if isinstance(action, (AttemptCapture, Flee)):
        return ESCAPE_PRIORITY
    if isinstance(action, UseItem):
        return ITEM_PRIORITY
    if isinstance(action, UseMove):
        if 0 <= action.move_index < len(state.moves):
            return state.moves[action.move_index].move.priority
        return 0
    raise TypeError(f"Unknown action type: {type(action).__name__}")


def order_actions(
    player_action: Optional[Action],
    opponent_action: Optional[Action],
    player_state: CombatantState,
    opponent_state: CombatantState,
) -> List[ScheduledAction]:
    """Return the two actions in resolution order.

    Higher priority first, then higher effective speed. Exact ties go to the
    player. A missing action is dropped from the result.
    """
    entries = []
    if player_action is not None:
        entries.append((Side.PLAYER, player_action, player_state))
    if opponent_action is not None:
        entries.append((Side.OPPONENT, opponent_action, opponent_state))
    # sorted() is stable and the player is listed first, so ties keep player-first
    ordered = sorted(entries, key=lambda e: (-action_priority(e[1], e[2]), -effective_speed(e[2])))
    return [ScheduledAction(side, action) for side, action, _ in ordered]

__all__ = ["order_actions","ScheduledAction","Action","effective_speed","action_priority","ITEM_PRIORITY"]
