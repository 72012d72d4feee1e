"""Battle session: the state machine that drives one 1v1 battle.

Phases: intro -> awaiting_actions -> resolving_turn -> check_outcome ->
(awaiting_actions | ended). Both sides submit an action (the opponent's can
come from a policy), advance_turn resolves them in scheduler order, runs the
end-of-turn status ticks (even on a turn that fled or captured) and checks
the outcome. Items are the player's; the opponent only attacks. Every effect
is recorded as a BattleEvent; the TurnResult of a turn is an immutable
snapshot of them.

The caller's CreatureInstance objects are never mutated: summary() returns
fresh write-back snapshots once the battle has ended.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union
import random

from skirmish.core.errors import ConfigurationError, InvalidActionError, InvalidMoveError, InvalidTargetError
from skirmish.core.logging import logger
from skirmish.core.types import StatusCondition, format_types
from skirmish.data.loader import GameData, default_data
from skirmish.system.settings import SettingsData
from .ai import Policy, random_move_policy
from .capture import attempt_capture, build_attempt, known_devices
from .damage import STRUGGLE, DamageResult, compute_damage, roll_hit_count, self_hit_damage
from .events import BattleEvent, EventKind, TurnResult
from .experience import ExperienceResult, award_experience
from .factory import combatant_from_instance, instance_from_combatant, wild_instance
from .items import ItemHandler
from .models import (
    AttemptCapture, BattleContext, BattlePhase, CombatantState, CreatureInstance, Flee, Move,
    Outcome, Side, UseItem, UseMove,
)
from .scheduler import Action, ScheduledAction, order_actions
from .status import end_of_turn, check_before_action, inflict

OpponentSpec = Union[CreatureInstance, Tuple[int, int]]
REST_SLEEP_TURNS = 2


@dataclass(frozen=True)
class BattleSummary:
    outcome: Outcome
    turns: int
    player: CreatureInstance
    opponent: CreatureInstance
    captured: Optional[CreatureInstance] = None
    experience: Optional[ExperienceResult] = None


class BattleSession:
    def __init__(
        self,
        context: BattleContext,
        *,
        data: GameData,
        rng: random.Random,
        settings: SettingsData,
        choose_action: Optional[Policy] = None,
        item_handler: Optional[ItemHandler] = None,
        caught_species: int = 0,
    ):
        self.context = context
        self.data = data
        self.rng = rng
        self.settings = settings
        self.choose_action: Policy = choose_action or random_move_policy
        self.item_handler = item_handler
        self.caught_species = caught_species
        self.phase = BattlePhase.INTRO
        self.experience: Optional[ExperienceResult] = None
        self.captured: Optional[CreatureInstance] = None
        self._actions: Dict[Side, Action] = {}
        self._turn_events: List[BattleEvent] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def start(
        cls,
        player: CreatureInstance,
        opponent: OpponentSpec,
        *,
        data: Optional[GameData] = None,
        rng: Optional[random.Random] = None,
        settings: Optional[SettingsData] = None,
        is_trainer: bool = False,
        choose_action: Optional[Policy] = None,
        item_handler: Optional[ItemHandler] = None,
        caught_species: int = 0,
    ) -> "BattleSession":
        """Build both combatants and enter awaiting_actions.

        opponent is either a CreatureInstance (trainer-owned or pre-rolled) or
        a (species_id, level) pair, which generates a wild instance. caught_species
        is the player's species-caught tally, used for critical captures.
        """
        data = data or default_data()
        settings = settings or SettingsData()
        rng = rng or random.Random(settings.seed)
        if isinstance(opponent, tuple):
            species_id, level = opponent
            opponent = wild_instance(species_id, level, data)
        p_state = combatant_from_instance(player, data)
        o_state = combatant_from_instance(opponent, data)
        if p_state.fainted or o_state.fainted:
            raise InvalidTargetError("Both combatants must be conscious to start a battle")
        ctx = BattleContext(player=p_state, opponent=o_state, is_trainer=is_trainer)
        session = cls(ctx, data=data, rng=rng, settings=settings,
                      choose_action=choose_action, item_handler=item_handler,
                      caught_species=caught_species)
        session._emit(EventKind.BATTLE_STARTED, None,
                      player=p_state.name, player_level=p_state.level,
                      opponent=o_state.name, opponent_level=o_state.level,
                      trainer=is_trainer)
        logger.info("BattleStart", player=p_state.name, player_types=format_types(p_state.types),
                    opponent=o_state.name, opponent_types=format_types(o_state.types), trainer=is_trainer)
        session.phase = BattlePhase.AWAITING_ACTIONS
        session._turn_events = []
        return session

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def ended(self) -> bool:
        return self.phase is BattlePhase.ENDED

    @property
    def outcome(self) -> Outcome:
        return self.context.outcome

    @property
    def log(self) -> Tuple[BattleEvent, ...]:
        return tuple(self.context.log)

    def legal_actions(self, side: Side) -> List[Action]:
        if self.ended:
            return []
        me = self.context.combatant(side)
        if me.fainted:
            return []
        actions: List[Action] = [UseMove(i) for i, slot in enumerate(me.moves) if slot.usable]
        if not actions:
            actions.append(UseMove(0))  # resolves to Struggle
        if side is Side.PLAYER and not self.context.is_trainer:
            actions.extend(AttemptCapture(d) for d in known_devices())
            actions.append(Flee())
        if side is Side.PLAYER and self.item_handler is not None:
            actions.extend(UseItem(item) for item in self.item_handler.available(me))
        return actions

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def submit_action(self, side: Side, action: Action):
        if self.ended:
            raise InvalidActionError("Battle has ended", side=side.value, action=action)
        if self.phase is not BattlePhase.AWAITING_ACTIONS:
            raise InvalidActionError(f"Cannot submit actions during {self.phase.value}", side=side.value, action=action)
        try:
            self._validate(side, action)
        except (InvalidActionError, InvalidTargetError) as e:
            logger.warn("ActionRejected", side=side.value, action=action, reason=str(e))
            raise
        self._actions[side] = action

    def _validate(self, side: Side, action: Action):
        me = self.context.combatant(side)
        foe = self.context.combatant(side.other)
        if isinstance(action, UseMove):
            if not isinstance(action.move_index, int) or not 0 <= action.move_index < len(me.moves):
                raise InvalidActionError(f"No move at index {action.move_index}", side=side.value, action=action)
            slot = me.moves[action.move_index]
            if not slot.usable and me.has_usable_move:
                raise InvalidMoveError(f"{slot.move.name} has no PP left", side=side.value, action=action, move_id=slot.move.id)
            return
        if isinstance(action, (AttemptCapture, Flee)):
            if side is not Side.PLAYER:
                raise InvalidActionError("Only the player can capture or flee", side=side.value, action=action)
            if self.context.is_trainer:
                raise InvalidActionError("Cannot capture or flee in a trainer battle", side=side.value, action=action)
            if isinstance(action, AttemptCapture):
                if action.device not in known_devices():
                    raise InvalidActionError(f"Unknown capture device '{action.device}'", side=side.value, action=action)
                if foe.fainted:
                    raise InvalidTargetError(f"Cannot capture fainted {foe.name}")
            return
        if isinstance(action, UseItem):
            if side is not Side.PLAYER:
                raise InvalidActionError("Only the player can use items", side=side.value, action=action)
            if self.item_handler is None:
                raise InvalidActionError("Items are not available in this battle", side=side.value, action=action)
            if not self.item_handler.can_use(action.item_id, me):
                raise InvalidActionError(f"Cannot use {action.item_id} now", side=side.value, action=action)
            return
        raise InvalidActionError(f"Unknown action {action!r}", side=side.value, action=action)

    # ------------------------------------------------------------------
    # Turn resolution
    # ------------------------------------------------------------------
    def advance_turn(self) -> TurnResult:
        if self.ended:
            raise InvalidActionError("Battle has ended")
        if self.phase is not BattlePhase.AWAITING_ACTIONS:
            raise InvalidActionError(f"Cannot advance during {self.phase.value}")
        if Side.PLAYER not in self._actions:
            raise InvalidActionError("Player action missing", side=Side.PLAYER.value)
        if Side.OPPONENT not in self._actions:
            chosen = self.choose_action(self.context, Side.OPPONENT, self.rng)
            self.submit_action(Side.OPPONENT, chosen)

        turn = self.context.turn
        self._turn_events = []
        self.phase = BattlePhase.RESOLVING_TURN
        ctx = self.context
        try:
            order = order_actions(self._actions.get(Side.PLAYER), self._actions.get(Side.OPPONENT), ctx.player, ctx.opponent)
            for sched in order:
                if ctx.outcome.terminal:
                    break
                if ctx.combatant(sched.side).fainted:
                    continue
                self._resolve(sched)
            self._run_ticks([s.side for s in order])
            self.phase = BattlePhase.CHECK_OUTCOME
            self._check_outcome()
        except ConfigurationError as e:
            ctx.outcome = Outcome.ERROR
            self._emit(EventKind.BATTLE_ERROR, None, error=str(e))
            self.phase = BattlePhase.ENDED
            logger.error("BattleConfigurationError", turn=turn, error=str(e))
            raise
        finally:
            self._actions.clear()

        if ctx.outcome.terminal:
            self._emit(EventKind.BATTLE_ENDED, None, outcome=ctx.outcome.value)
            self.phase = BattlePhase.ENDED
            logger.info("BattleEnd", outcome=ctx.outcome.value, turns=turn)
        else:
            ctx.turn += 1
            self.phase = BattlePhase.AWAITING_ACTIONS
        return TurnResult(turn=turn, events=tuple(self._turn_events), outcome=ctx.outcome)

    def _resolve(self, sched: ScheduledAction):
        action = sched.action
        logger.debug("ActionResolved", turn=self.context.turn, side=sched.side.value, action=action)
        if isinstance(action, AttemptCapture):
            self._resolve_capture(action)
        elif isinstance(action, Flee):
            self.context.outcome = Outcome.FLED
            self._emit(EventKind.FLED, Side.PLAYER)
        elif isinstance(action, UseItem):
            self._resolve_item(sched.side, action)
        else:
            self._resolve_move(sched.side, action)

    def _resolve_capture(self, action: AttemptCapture):
        target = self.context.opponent
        attempt = build_attempt(action.device, target, self.context.turn, self.caught_species)
        res = attempt_capture(target, attempt, self.rng)
        for i in range(res.shake_count):
            self._emit(EventKind.CAPTURE_SHAKE, Side.PLAYER, shake=i + 1)
        if res.success:
            self.context.outcome = Outcome.CAPTURED
            self.captured = instance_from_combatant(target)
            self._emit(EventKind.CAPTURE_SUCCEEDED, Side.PLAYER, device=action.device, target=target.name,
                       critical=res.critical)
        else:
            self._emit(EventKind.CAPTURE_FAILED, Side.PLAYER, device=action.device,
                       shakes=res.shake_count, probability=round(res.probability, 4), critical=res.critical)

    def _resolve_item(self, side: Side, action: UseItem):
        user = self.context.combatant(side)
        effect = self.item_handler.use(action.item_id, user)
        self._emit(EventKind.ITEM_USED, side, item=action.item_id)
        if effect.hp_restored:
            gained = user.heal(effect.hp_restored)
            self._emit(EventKind.HP_RESTORED, side, amount=gained, hp=user.current_hp)
        if effect.cure_status and user.status is not StatusCondition.NONE:
            cured = user.status
            user.clear_status()
            self._emit(EventKind.STATUS_CURED, side, status=cured.value)
        self._apply_stages(side, user, dict(effect.stat_changes))

    def _resolve_move(self, side: Side, action: UseMove):
        ctx = self.context
        actor = ctx.combatant(side)
        target = ctx.combatant(side.other)
        if target.fainted:
            return
        pre = check_before_action(actor, self.rng, self.settings)
        if not pre.can_act:
            if pre.confusion_hit:
                dmg = actor.take_damage(self_hit_damage(actor))
                self._emit(EventKind.CONFUSION_HIT, side, amount=dmg, hp=actor.current_hp)
                self._check_faint(side, actor)
            else:
                self._emit(EventKind.ACTION_PREVENTED, side, status=pre.reason.value if pre.reason else None)
            return

        slot = None
        move: Move = STRUGGLE
        if actor.has_usable_move:
            slot = actor.moves[action.move_index]
            move = slot.move
        crit = self.settings.high_crit_chance if move.high_crit else self.settings.critical_hit_chance
        result = compute_damage(actor, target, move, self.rng,
                                remaining_pp=slot.pp if slot else None, crit_chance=crit)
        if slot is not None:
            slot.pp -= 1
        self._emit(EventKind.MOVE_USED, side, move=move.name, move_id=move.id,
                   pp=slot.pp if slot else None)
        if result.missed:
            self._emit(EventKind.MOVE_MISSED, side, move=move.name)
            return
        if move.deals_damage and result.effectiveness == 0:
            self._emit(EventKind.NO_EFFECT, side, move=move.name)
            return

        effect = move.effect
        if result.amount:
            lost = self._strike(side, target, result)
            if move.multi_hit:
                hits = 1
                for _ in range(roll_hit_count(move, self.rng) - 1):
                    if target.fainted:
                        break
                    follow = compute_damage(actor, target, move, self.rng, crit_chance=crit, check_accuracy=False)
                    lost += self._strike(side, target, follow)
                    hits += 1
                self._emit(EventKind.MULTI_HIT, side, move=move.name, hits=hits)
            if effect is not None and effect.kind == "drain":
                gained = actor.heal(max(1, lost * effect.ratio // 100))
                self._emit(EventKind.HP_RESTORED, side, amount=gained, hp=actor.current_hp)
            self._check_faint(side.other, target)
            if effect is not None and effect.kind == "recoil":
                rec = actor.take_damage(max(1, lost * effect.ratio // 100))
                self._emit(EventKind.RECOIL, side, amount=rec, hp=actor.current_hp)
                self._check_faint(side, actor)

        if effect is not None and effect.kind == "heal":
            self._apply_heal_effect(side, actor, effect.ratio, effect.status)
        if result.status_inflicted and not target.fainted:
            escalating = effect is not None and effect.escalating
            if inflict(target, result.status_inflicted, self.rng, escalating=escalating):
                self._emit(EventKind.STATUS_INFLICTED, side.other, status=result.status_inflicted.value,
                           badly=target.toxic_counter > 0)
        elif result.status_blocked and not move.deals_damage:
            self._emit(EventKind.STATUS_BLOCKED, side.other, status=result.status_blocked.value)
        if result.stat_changes and not target.fainted:
            self._apply_stages(side.other, target, result.stat_changes)
        if result.self_stat_changes and not actor.fainted:
            self._apply_stages(side, actor, result.self_stat_changes)

    def _apply_heal_effect(self, side: Side, actor: CombatantState, ratio: int, status: Optional[StatusCondition]):
        gained = actor.heal(max(1, actor.max_hp * ratio // 100))
        self._emit(EventKind.HP_RESTORED, side, amount=gained, hp=actor.current_hp)
        if status is StatusCondition.SLEEP:
            # Rest: replaces any current status with a fixed sleep
            actor.clear_status()
            actor.status = StatusCondition.SLEEP
            actor.status_turns = REST_SLEEP_TURNS
            actor.status_fresh = True
            self._emit(EventKind.STATUS_INFLICTED, side, status=StatusCondition.SLEEP.value, badly=False)

    def _apply_stages(self, side: Side, who: CombatantState, changes: Dict[str, int]):
        for stat, delta in changes.items():
            applied = who.stages.apply(stat, delta)
            self._emit(EventKind.STAT_CHANGED, side, stat=stat, change=applied, requested=delta,
                       stage=who.stages.get(stat))

    def _check_faint(self, side: Side, who: CombatantState):
        if who.fainted and not any(e.kind is EventKind.FAINTED and e.side is side for e in self._turn_events):
            self._emit(EventKind.FAINTED, side, name=who.name)

    def _strike(self, side: Side, target: CombatantState, result: DamageResult) -> int:
        if result.critical:
            self._emit(EventKind.CRITICAL_HIT, side)
        lost = target.take_damage(result.amount)
        self._emit(EventKind.DAMAGE_DEALT, side.other, amount=lost, effectiveness=result.effectiveness,
                   hp=target.current_hp)
        return lost

    def _run_ticks(self, sides: List[Side]):
        for side in sides:
            if side is Side.OPPONENT and self.context.outcome is Outcome.CAPTURED:
                continue  # already in the device
            who = self.context.combatant(side)
            res = end_of_turn(who, self.rng, self.settings)
            if res is None:
                continue
            self._emit(EventKind.STATUS_TICK, side, status=res.status.value, damage=res.damage, hp=who.current_hp,
                       badly=res.badly)
            if res.cured:
                self._emit(EventKind.STATUS_CURED, side, status=res.status.value)
            self._check_faint(side, who)

    def _check_outcome(self):
        ctx = self.context
        if ctx.outcome.terminal:
            return
        if ctx.player.fainted:
            ctx.outcome = Outcome.DEFEAT
        elif ctx.opponent.fainted:
            self._grant_experience()
            ctx.outcome = Outcome.VICTORY

    def _grant_experience(self):
        if self.experience is not None:
            return
        winner = self.context.player
        foe = self.context.opponent
        res = award_experience(winner, foe.species, foe.level, data=self.data, is_trainer=self.context.is_trainer)
        self.experience = res
        self._emit(EventKind.EXPERIENCE_GAINED, Side.PLAYER, amount=res.exp_gained, total=winner.exp)
        for lvl in range(res.previous_level + 1, res.new_level + 1):
            self._emit(EventKind.LEVEL_UP, Side.PLAYER, level=lvl)
        for mid in res.learned_moves:
            self._emit(EventKind.MOVE_LEARNED, Side.PLAYER, move_id=mid, move=self.data.move(mid).name)
        for mid in res.pending_moves:
            self._emit(EventKind.MOVE_LEARNABLE, Side.PLAYER, move_id=mid, move=self.data.move(mid).name)
        if res.evolution_ready:
            self._emit(EventKind.EVOLUTION_READY, Side.PLAYER, species_id=res.evolution_target)

    def _emit(self, kind: EventKind, side: Optional[Side], **data):
        evt = BattleEvent(kind=kind, turn=self.context.turn, side=side, data=data)
        self.context.log.append(evt)
        self._turn_events.append(evt)

    # ------------------------------------------------------------------
    # Results / helpers
    # ------------------------------------------------------------------
    def summary(self) -> BattleSummary:
        if not self.ended:
            raise InvalidActionError("Battle is still in progress")
        return BattleSummary(
            outcome=self.context.outcome,
            turns=self.context.turn,
            player=instance_from_combatant(self.context.player),
            opponent=instance_from_combatant(self.context.opponent),
            captured=self.captured,
            experience=self.experience,
        )

    def run_auto(self, player_policy: Optional[Policy] = None, max_turns: Optional[int] = None) -> List[TurnResult]:
        """Play turns with policies on both sides until the battle ends or max_turns is hit."""
        policy = player_policy or random_move_policy
        limit = max_turns or self.settings.max_turns
        results: List[TurnResult] = []
        while not self.ended and len(results) < limit:
            self.submit_action(Side.PLAYER, policy(self.context, Side.PLAYER, self.rng))
            results.append(self.advance_turn())
        return results

__all__ = ["BattleSession","BattleSummary"]
