import random

import pytest

from support import DummyRng
from skirmish.battle.damage import STRUGGLE, compute_damage, is_stab, roll_hit_count
from skirmish.battle.models import CombatantState, Move, Species, Stats
from skirmish.core.errors import InvalidMoveError, InvalidTargetError
from skirmish.core.types import ElementType, MoveCategory, StatusCondition


def _custom(types, stats=None, level=10):
    stats = stats or Stats(30, 20, 20, 20, 20, 20)
    sp = Species(id=900, name="Dummy", types=tuple(types), base_stats=stats, catch_rate=45, base_exp=50)
    return CombatantState(instance_id="dummy", species=sp, level=level, exp=0, stats=stats, current_hp=stats.hp)


def test_ember_exact_amount(data, make_state):
    attacker = make_state(1, 10)   # Flamling
    defender = make_state(7, 10)   # Leafling
    res = compute_damage(attacker, defender, data.move(5), DummyRng(0.99))
    # base 6.8 * STAB 1.5 * 2.0 effectiveness * roll 1.00
    assert res.amount == 20
    assert res.effectiveness == 2.0
    assert res.stab and not res.critical and not res.missed
    assert res.status_inflicted is None


def test_fire_vs_grass_beats_fire_vs_water(data, make_state):
    attacker = make_state(1, 10)
    ember = data.move(5)
    vs_grass = compute_damage(attacker, make_state(7, 10), ember, DummyRng(0.99))
    vs_water = compute_damage(attacker, make_state(4, 10), ember, DummyRng(0.99))
    assert vs_grass.amount > vs_water.amount
    assert vs_water.amount == 5


def test_critical_doubles_and_secondary_effect_rolls(data, make_state):
    attacker = make_state(1, 10)
    defender = make_state(7, 10)
    res = compute_damage(attacker, defender, data.move(5), DummyRng(0.01))
    assert res.critical
    assert res.amount == 40
    assert res.status_inflicted is StatusCondition.BURN


def test_miss_consumes_no_further_rolls(data, make_state):
    attacker = make_state(1, 13)
    defender = make_state(7, 10)
    rng = DummyRng(0.9)
    res = compute_damage(attacker, defender, data.move(6), rng)  # Fire Spin, 85 accuracy
    assert res.missed and res.amount == 0
    assert rng.randint_calls == []


def test_zero_effectiveness_short_circuits(data):
    attacker = _custom([ElementType.NORMAL])
    ghost = _custom([ElementType.GHOST])
    rng = DummyRng(0.0)
    res = compute_damage(attacker, ghost, data.move(1), rng)
    assert res.amount == 0
    assert res.effectiveness == 0.0
    assert not res.critical
    assert rng.randint_calls == []


def test_burn_halves_physical_attack(data, make_state):
    tackle = data.move(1)
    healthy = make_state(1, 10)
    burned = make_state(1, 10, status=StatusCondition.BURN)
    defender = make_state(7, 10)
    assert compute_damage(healthy, defender, tackle, DummyRng(0.99)).amount == 6
    assert compute_damage(burned, defender, tackle, DummyRng(0.99)).amount == 4


def test_random_roll_range(data, make_state):
    rng = DummyRng(0.99)
    compute_damage(make_state(1, 10), make_state(7, 10), data.move(1), rng)
    assert rng.randint_calls == [(85, 100)]


def test_damage_at_least_one_when_it_lands(data, make_state):
    attacker = make_state(10, 2)     # Sparkit
    defender = make_state(6, 60)     # Aquaster
    tackle = data.move(1)
    for seed in range(200):
        res = compute_damage(attacker, defender, tackle, random.Random(seed))
        assert res.amount >= 1


def test_compute_damage_is_pure(data, make_state):
    attacker = make_state(1, 10)
    defender = make_state(7, 10)
    compute_damage(attacker, defender, data.move(5), DummyRng(0.01))
    assert defender.current_hp == defender.max_hp
    assert defender.status is StatusCondition.NONE
    assert attacker.moves[0].pp == attacker.moves[0].max_pp


def test_no_pp_raises(data, make_state):
    with pytest.raises(InvalidMoveError):
        compute_damage(make_state(1, 10), make_state(7, 10), data.move(5), DummyRng(), remaining_pp=0)


def test_fainted_defender_raises(data, make_state):
    defender = make_state(7, 10, current_hp=0)
    with pytest.raises(InvalidTargetError):
        compute_damage(make_state(1, 10), defender, data.move(5), DummyRng())


def test_status_move_respects_type_immunity(data, make_state):
    thunder_wave = data.move(24)
    blocked = compute_damage(make_state(1, 10), make_state(10, 10), thunder_wave, DummyRng(0.5))
    assert blocked.amount == 0
    assert blocked.status_blocked is StatusCondition.PARALYSIS
    landed = compute_damage(make_state(1, 10), make_state(7, 10), thunder_wave, DummyRng(0.5))
    assert landed.status_inflicted is StatusCondition.PARALYSIS


def test_stat_moves_report_stage_changes(data, make_state):
    growl = compute_damage(make_state(1, 10), make_state(7, 10), data.move(2), DummyRng(0.5))
    assert growl.stat_changes == {"attack": -1}
    swords = compute_damage(make_state(1, 10), make_state(7, 10), data.move(41), DummyRng(0.999))
    assert swords.self_stat_changes == {"attack": 2}
    assert not swords.missed


def test_struggle_is_typeless():
    normal_user = _custom([ElementType.NORMAL])
    assert not is_stab(normal_user, STRUGGLE)
    assert STRUGGLE.power == 50
    assert STRUGGLE.effect.kind == "recoil" and STRUGGLE.effect.ratio == 25
    assert STRUGGLE.category is MoveCategory.PHYSICAL


def test_struggle_hits_ghosts_for_neutral_damage():
    attacker = _custom([ElementType.NORMAL])
    ghost = _custom([ElementType.GHOST])
    plain = _custom([ElementType.WATER])
    vs_ghost = compute_damage(attacker, ghost, STRUGGLE, DummyRng(0.99))
    vs_plain = compute_damage(attacker, plain, STRUGGLE, DummyRng(0.99))
    assert vs_ghost.effectiveness == 1.0 and not vs_ghost.stab
    assert vs_ghost.amount > 0 and vs_ghost.amount == vs_plain.amount


def test_hit_count_rolls(data):
    fury = data.move(28)
    assert fury.multi_hit and fury.hits == (2, 5)
    assert roll_hit_count(fury, DummyRng(0.0)) == 2
    assert roll_hit_count(fury, DummyRng(0.5)) == 3
    assert roll_hit_count(fury, DummyRng(0.8)) == 4
    assert roll_hit_count(fury, DummyRng(0.9)) == 5
    assert roll_hit_count(data.move(30), DummyRng(0.99)) == 2
    assert roll_hit_count(data.move(1), DummyRng(0.99)) == 1
    pair = Move(id=901, name="Pair", type=ElementType.NORMAL, category=MoveCategory.PHYSICAL,
                power=20, max_pp=10, hits=(2, 3))
    assert roll_hit_count(pair, DummyRng(0.2)) == 2
    assert roll_hit_count(pair, DummyRng(0.7)) == 3


def test_follow_up_strikes_skip_accuracy(data, make_state):
    attacker = make_state(1, 10)
    defender = make_state(4, 10)
    fury = data.move(28)   # 80 accuracy
    assert compute_damage(attacker, defender, fury, DummyRng(0.99)).missed
    follow = compute_damage(attacker, defender, fury, DummyRng(0.99), check_accuracy=False)
    assert not follow.missed and follow.amount > 0
