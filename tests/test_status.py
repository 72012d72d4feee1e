from support import DummyRng
from skirmish.battle.status import can_inflict, check_before_action, end_of_turn, inflict, is_immune
from skirmish.core.types import ElementType, StatusCondition
from skirmish.system.settings import SettingsData


def test_type_immunities():
    assert is_immune([ElementType.FIRE], StatusCondition.BURN)
    assert is_immune([ElementType.ICE], StatusCondition.FREEZE)
    assert is_immune([ElementType.ELECTRIC], StatusCondition.PARALYSIS)
    assert is_immune([ElementType.GRASS, ElementType.POISON], StatusCondition.POISON)
    assert is_immune([ElementType.STEEL], StatusCondition.POISON)
    assert not is_immune([ElementType.WATER], StatusCondition.BURN)


def test_statuses_are_exclusive(make_state):
    target = make_state(4, 10, status=StatusCondition.POISON)
    assert not can_inflict(target, StatusCondition.BURN)
    assert not inflict(target, StatusCondition.BURN, DummyRng())
    assert target.status is StatusCondition.POISON


def test_sleep_duration_rolled_on_inflict(make_state):
    target = make_state(4, 10)
    assert inflict(target, StatusCondition.SLEEP, DummyRng(randint_value=2))
    assert target.status is StatusCondition.SLEEP and target.status_turns == 2


def test_sleep_and_freeze_block(make_state):
    asleep = make_state(4, 10, status=StatusCondition.SLEEP)
    frozen = make_state(4, 10, status=StatusCondition.FREEZE)
    assert not check_before_action(asleep, DummyRng(0.99)).can_act
    assert not check_before_action(frozen, DummyRng(0.99)).can_act


def test_paralysis_skip_chance(make_state):
    para = make_state(4, 10, status=StatusCondition.PARALYSIS)
    assert not check_before_action(para, DummyRng(0.1)).can_act
    assert check_before_action(para, DummyRng(0.5)).can_act
    always = SettingsData(paralysis_skip_chance=1.0)
    assert not check_before_action(para, DummyRng(0.99), always).can_act


def test_confusion_self_hit(make_state):
    confused = make_state(4, 10, status=StatusCondition.CONFUSION)
    hit = check_before_action(confused, DummyRng(0.2))
    assert not hit.can_act and hit.confusion_hit
    assert check_before_action(confused, DummyRng(0.5)).can_act


def test_poison_and_burn_ticks(make_state):
    poisoned = make_state(1, 10, status=StatusCondition.POISON)   # 29 max HP
    res = end_of_turn(poisoned, DummyRng())
    assert res.damage == 3 and poisoned.current_hp == 26
    burned = make_state(4, 10, status=StatusCondition.BURN)
    res = end_of_turn(burned, DummyRng())
    assert res.damage == max(1, burned.max_hp // 16)


def test_tick_damage_has_floor_of_one(make_state):
    tiny = make_state(10, 2, status=StatusCondition.BURN)
    assert end_of_turn(tiny, DummyRng()).damage == 1


def test_sleep_counts_down_and_wakes(make_state):
    sleeper = make_state(4, 10)
    inflict(sleeper, StatusCondition.SLEEP, DummyRng(randint_value=2))
    landed = end_of_turn(sleeper, DummyRng())
    assert not landed.cured and sleeper.status_turns == 2
    first = end_of_turn(sleeper, DummyRng())
    assert not first.cured and sleeper.status is StatusCondition.SLEEP
    second = end_of_turn(sleeper, DummyRng())
    assert second.cured and sleeper.status is StatusCondition.NONE


def test_one_turn_sleep_still_costs_a_turn(make_state):
    sleeper = make_state(4, 10)
    inflict(sleeper, StatusCondition.SLEEP, DummyRng(randint_value=1))
    assert not end_of_turn(sleeper, DummyRng()).cured
    assert not check_before_action(sleeper, DummyRng(0.99)).can_act
    assert end_of_turn(sleeper, DummyRng()).cured
    assert check_before_action(sleeper, DummyRng(0.99)).can_act


def test_confusion_countdown_starts_next_turn(make_state):
    confused = make_state(4, 10)
    inflict(confused, StatusCondition.CONFUSION, DummyRng(randint_value=2))
    assert confused.status_fresh
    end_of_turn(confused, DummyRng())
    assert confused.status_turns == 2 and not confused.status_fresh
    end_of_turn(confused, DummyRng())
    assert confused.status_turns == 1


def test_bad_poison_worsens_each_tick(make_state):
    target = make_state(1, 10)   # 29 max HP
    assert inflict(target, StatusCondition.POISON, DummyRng(), escalating=True)
    assert target.status is StatusCondition.POISON and target.toxic_counter == 1
    damages = [end_of_turn(target, DummyRng()).damage for _ in range(3)]
    assert damages == [1, 3, 5]
    assert target.current_hp == 20 and target.toxic_counter == 4


def test_plain_poison_does_not_escalate(make_state):
    target = make_state(1, 10)
    inflict(target, StatusCondition.POISON, DummyRng())
    assert target.toxic_counter == 0
    res = [end_of_turn(target, DummyRng()) for _ in range(2)]
    assert [r.damage for r in res] == [3, 3] and not any(r.badly for r in res)


def test_cure_resets_bad_poison(make_state):
    target = make_state(1, 10)
    inflict(target, StatusCondition.POISON, DummyRng(), escalating=True)
    end_of_turn(target, DummyRng())
    target.clear_status()
    assert target.toxic_counter == 0 and target.status is StatusCondition.NONE


def test_freeze_thaw_chance(make_state):
    frozen = make_state(4, 10, status=StatusCondition.FREEZE)
    assert not end_of_turn(frozen, DummyRng(0.5)).cured
    assert end_of_turn(frozen, DummyRng(0.1)).cured
    assert frozen.status is StatusCondition.NONE


def test_no_tick_for_fainted_or_paralysis(make_state):
    gone = make_state(1, 10, status=StatusCondition.POISON, current_hp=0)
    assert end_of_turn(gone, DummyRng()) is None
    para = make_state(1, 10, status=StatusCondition.PARALYSIS)
    assert end_of_turn(para, DummyRng()) is None
