"""Battle data model.

Static data (Species, Move) is frozen. CreatureInstance is the caller-owned
persistent snapshot; CombatantState is the mutable battle-scoped copy built
from it at battle start and converted back when the battle ends.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

from skirmish.core.types import ElementType, MoveCategory, StatusCondition

if TYPE_CHECKING:  # pragma: no cover
    from .events import BattleEvent

MAX_MOVES = 4
STAT_KEYS = ("hp", "attack", "defense", "sp_atk", "sp_def", "speed")

# ---------------------------------------------------------------------------
# Stage helpers
# ---------------------------------------------------------------------------

def clamp_stage(stage: int) -> int: return max(-6, min(6, int(stage)))

def stage_multiplier_stat(stage: int) -> float:
    s = clamp_stage(stage)
    return (2 + s)/2 if s >= 0 else 2/(2 - s)

def stage_multiplier_acc_eva(stage: int) -> float:
    s = clamp_stage(stage)
    return (3 + s)/3 if s >= 0 else 3/(3 - s)

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Side(str, Enum):
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> "Side":
        return Side.OPPONENT if self is Side.PLAYER else Side.PLAYER


class Outcome(str, Enum):
    UNDETERMINED = "undetermined"
    VICTORY = "victory"
    DEFEAT = "defeat"
    CAPTURED = "captured"
    FLED = "fled"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self is not Outcome.UNDETERMINED


class BattlePhase(str, Enum):
    INTRO = "intro"
    AWAITING_ACTIONS = "awaiting_actions"
    RESOLVING_TURN = "resolving_turn"
    CHECK_OUTCOME = "check_outcome"
    ENDED = "ended"

# ---------------------------------------------------------------------------
# Static data
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Stats:
    hp: int
    attack: int
    defense: int
    sp_atk: int
    sp_def: int
    speed: int

    @classmethod
    def from_dict(cls, raw: Dict[str, int]) -> "Stats":
        return cls(**{k: int(raw[k]) for k in STAT_KEYS})

    def as_dict(self) -> Dict[str, int]:
        return {k: getattr(self, k) for k in STAT_KEYS}


@dataclass(frozen=True)
class EvolutionRule:
    species_id: int
    level: Optional[int] = None
    item: Optional[str] = None


@dataclass(frozen=True)
class LearnsetEntry:
    level: int
    move_id: int


@dataclass(frozen=True)
class Species:
    id: int
    name: str
    types: Tuple[ElementType, ...]
    base_stats: Stats
    catch_rate: int
    base_exp: int
    growth_rate: str = "medium-fast"
    evolution: Optional[EvolutionRule] = None
    learnset: Tuple[LearnsetEntry, ...] = ()

    def moves_learned_at(self, level: int) -> List[int]:
        return [e.move_id for e in self.learnset if e.level == level]

    def moves_up_to(self, level: int) -> List[int]:
        """Learnset move ids available at or below level, in learn order, deduplicated."""
        seen: List[int] = []
        for e in sorted(self.learnset, key=lambda e: e.level):
            if e.level <= level and e.move_id not in seen:
                seen.append(e.move_id)
        return seen


@dataclass(frozen=True)
class MoveEffect:
    kind: str                      # status | stat | drain | recoil | heal
    target: str = "opponent"       # self | opponent
    chance: int = 100              # percent
    status: Optional[StatusCondition] = None
    stages: Tuple[Tuple[str, int], ...] = ()
    ratio: int = 0                 # percent for drain / recoil / heal
    escalating: bool = False       # poison that worsens every tick (Toxic)

    @property
    def stage_changes(self) -> Dict[str, int]:
        return dict(self.stages)


@dataclass(frozen=True)
class Move:
    id: int
    name: str
    type: ElementType
    category: MoveCategory
    power: int = 0
    accuracy: Optional[int] = 100  # None => never misses
    priority: int = 0
    max_pp: int = 0
    effect: Optional[MoveEffect] = None
    high_crit: bool = False
    typeless: bool = False         # no STAB, always neutral effectiveness
    hits: Tuple[int, int] = (1, 1) # min / max strikes per use

    @property
    def multi_hit(self) -> bool:
        return self.hits[1] > 1

    @property
    def deals_damage(self) -> bool:
        return self.category is not MoveCategory.STATUS and self.power > 0

# ---------------------------------------------------------------------------
# Persistent snapshot
# ---------------------------------------------------------------------------

@dataclass
class CreatureInstance:
    instance_id: str
    species_id: int
    level: int
    exp: int = 0
    current_hp: Optional[int] = None  # None => full HP
    status: StatusCondition = StatusCondition.NONE
    move_ids: List[int] = field(default_factory=list)
    pp: Dict[int, int] = field(default_factory=dict)  # remaining PP by move id; missing => full
    ivs: Dict[str, int] = field(default_factory=dict)
    nickname: Optional[str] = None

# ---------------------------------------------------------------------------
# Battle-scoped state
# ---------------------------------------------------------------------------

@dataclass
class Stages:
    attack: int = 0
    defense: int = 0
    sp_atk: int = 0
    sp_def: int = 0
    speed: int = 0
    accuracy: int = 0
    evasion: int = 0

    def get(self, stat: str) -> int:
        return getattr(self, stat)

    def apply(self, stat: str, delta: int) -> int:
        """Shift a stage, clamped to -6..+6. Returns the change actually applied."""
        before = getattr(self, stat)
        after = clamp_stage(before + delta)
        setattr(self, stat, after)
        return after - before


@dataclass
class MoveSlot:
    move: Move
    pp: int
    max_pp: int

    @property
    def usable(self) -> bool:
        return self.pp > 0


@dataclass
class CombatantState:
    instance_id: str
    species: Species
    level: int
    exp: int
    stats: Stats
    current_hp: int
    moves: List[MoveSlot] = field(default_factory=list)
    status: StatusCondition = StatusCondition.NONE
    status_turns: int = 0  # remaining sleep / confusion turns
    status_fresh: bool = False  # inflicted this turn; the first tick skips the countdown
    toxic_counter: int = 0  # >0 while badly poisoned, n/16 max HP per tick
    stages: Stages = field(default_factory=Stages)
    ivs: Dict[str, int] = field(default_factory=dict)
    nickname: Optional[str] = None

    def __post_init__(self):
        self.current_hp = max(0, min(int(self.current_hp), self.stats.hp))
        if len(self.moves) > MAX_MOVES:
            self.moves = self.moves[-MAX_MOVES:]

    @property
    def name(self) -> str:
        return self.nickname or self.species.name

    @property
    def types(self) -> Tuple[ElementType, ...]:
        return self.species.types

    @property
    def max_hp(self) -> int:
        return self.stats.hp

    @property
    def fainted(self) -> bool:
        return self.current_hp <= 0

    @property
    def has_usable_move(self) -> bool:
        return any(slot.usable for slot in self.moves)

    def effective_stat(self, stat: str) -> float:
        return getattr(self.stats, stat) * stage_multiplier_stat(self.stages.get(stat))

    def take_damage(self, amount: int) -> int:
        """Lose HP (clamped at 0). Returns HP actually lost."""
        lost = min(self.current_hp, max(0, int(amount)))
        self.current_hp -= lost
        return lost

    def heal(self, amount: int) -> int:
        """Restore HP (clamped at max). Returns HP actually restored."""
        if self.fainted:
            return 0
        gained = min(self.max_hp - self.current_hp, max(0, int(amount)))
        self.current_hp += gained
        return gained

    def clear_status(self):
        self.status = StatusCondition.NONE
        self.status_turns = 0
        self.status_fresh = False
        self.toxic_counter = 0

# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UseMove:
    move_index: int


@dataclass(frozen=True)
class AttemptCapture:
    device: str = "standard-ball"


@dataclass(frozen=True)
class Flee:
    pass


@dataclass(frozen=True)
class UseItem:
    item_id: str


@dataclass(frozen=True)
class CaptureAttempt:
    """Transient capture input, fixed at throw time."""
    device: str
    modifier: float
    hp_ratio: float
    status: StatusCondition
    caught_species: int = 0  # thrower's species-caught tally, drives critical captures

# ---------------------------------------------------------------------------
# Battle context
# ---------------------------------------------------------------------------

@dataclass
class BattleContext:
    player: CombatantState
    opponent: CombatantState
    turn: int = 1
    outcome: Outcome = Outcome.UNDETERMINED
    is_trainer: bool = False
    log: List["BattleEvent"] = field(default_factory=list)

    def combatant(self, side: Side) -> CombatantState:
        return self.player if side is Side.PLAYER else self.opponent

__all__ = [
    "MAX_MOVES","STAT_KEYS","clamp_stage","stage_multiplier_stat","stage_multiplier_acc_eva",
    "Side","Outcome","BattlePhase","Stats","EvolutionRule","LearnsetEntry","Species",
    "MoveEffect","Move","CreatureInstance","Stages","MoveSlot","CombatantState",
    "UseMove","AttemptCapture","Flee","UseItem","CaptureAttempt","BattleContext",
]
