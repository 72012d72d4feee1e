"""Battle events: the ordered, immutable record a turn produces."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple

from .models import Outcome, Side


class EventKind(str, Enum):
    BATTLE_STARTED = "battle_started"
    MOVE_USED = "move_used"
    MOVE_MISSED = "move_missed"
    NO_EFFECT = "no_effect"
    DAMAGE_DEALT = "damage_dealt"
    CRITICAL_HIT = "critical_hit"
    MULTI_HIT = "multi_hit"
    STATUS_INFLICTED = "status_inflicted"
    STATUS_BLOCKED = "status_blocked"
    ACTION_PREVENTED = "action_prevented"
    CONFUSION_HIT = "confusion_hit"
    STATUS_TICK = "status_tick"
    STATUS_CURED = "status_cured"
    STAT_CHANGED = "stat_changed"
    HP_RESTORED = "hp_restored"
    RECOIL = "recoil"
    FAINTED = "fainted"
    CAPTURE_SHAKE = "capture_shake"
    CAPTURE_SUCCEEDED = "capture_succeeded"
    CAPTURE_FAILED = "capture_failed"
    FLED = "fled"
    ITEM_USED = "item_used"
    EXPERIENCE_GAINED = "experience_gained"
    LEVEL_UP = "level_up"
    MOVE_LEARNED = "move_learned"
    MOVE_LEARNABLE = "move_learnable"
    EVOLUTION_READY = "evolution_ready"
    BATTLE_ENDED = "battle_ended"
    BATTLE_ERROR = "battle_error"


@dataclass(frozen=True)
class BattleEvent:
    kind: EventKind
    turn: int
    side: Optional[Side] = None
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # read-only view so a published event cannot be edited later
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def describe(self) -> str:
        extras = " ".join(f"{k}={v}" for k, v in self.data.items())
        who = self.side.value if self.side else "-"
        return f"[{self.turn}] {self.kind.value} {who} {extras}".rstrip()


@dataclass(frozen=True)
class TurnResult:
    turn: int
    events: Tuple[BattleEvent, ...]
    outcome: Outcome

    def __iter__(self) -> Iterator[BattleEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def of_kind(self, kind: EventKind) -> Tuple[BattleEvent, ...]:
        return tuple(e for e in self.events if e.kind is kind)

    @property
    def ended(self) -> bool:
        return self.outcome.terminal

__all__ = ["EventKind","BattleEvent","TurnResult"]
