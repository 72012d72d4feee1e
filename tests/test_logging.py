import io
import random

from skirmish.battle.models import CreatureInstance
from skirmish.battle.session import BattleSession
from skirmish.core.logging import Logger, logger
from skirmish.core.types import format_types, strip_ansi, type_abbreviation


def test_threshold_filters_lower_levels():
    buf = io.StringIO()
    log = Logger("WARN", stream=buf)
    log.info("Hidden")
    log.warn("Shown", turn=3)
    out = strip_ansi(buf.getvalue())
    assert "Hidden" not in out
    assert "[WARN] Shown turn=3" in out


def test_set_level_accepts_lowercase():
    buf = io.StringIO()
    log = Logger("ERROR", stream=buf)
    log.set_level("debug")
    assert log.is_enabled("DEBUG")
    log.debug("Tick", side="player")
    assert "side=player" in buf.getvalue()


def test_type_abbreviations_primary():
    assert type_abbreviation('fire') == 'FIR'
    assert type_abbreviation('ground') == 'GRN'


def test_format_types_dual():
    assert strip_ansi(format_types(('fire', 'flying'))) == 'FIR/FLY'


def test_battle_start_line_carries_both_type_tags(data, capsys, monkeypatch):
    monkeypatch.setattr(logger, "stream", None)
    monkeypatch.setattr(logger, "threshold", Logger._order["INFO"])
    BattleSession.start(CreatureInstance("p", 3, 36), (8, 20), data=data, rng=random.Random(0))
    out = strip_ansi(capsys.readouterr().out)
    assert "BattleStart" in out
    assert "player_types=FIR/FLY" in out and "opponent_types=GRS/PSN" in out
