"""
Battle engine package.
- models.py (species, moves, combatants, actions)
- typechart.py / damage.py / status.py (mechanics)
- scheduler.py (turn order)
- capture.py / growth.py / experience.py (capture & progression)
- session.py (state machine), service.py (entry point)

Only the data-independent modules are re-exported here; import
session / service / factory / experience from their modules.
"""
from .models import (
    AttemptCapture, BattlePhase, CreatureInstance, Flee, Outcome, Side, UseItem, UseMove,
)
from .typechart import effectiveness
from .scheduler import order_actions
from .capture import attempt_capture
from .damage import compute_damage
__all__ = [
    "AttemptCapture","BattlePhase","CreatureInstance","Flee","Outcome","Side","UseItem","UseMove",
    "effectiveness","order_actions","attempt_capture","compute_damage",
]
