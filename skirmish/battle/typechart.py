"""Type effectiveness table (modern 18-type chart).

Only non-neutral pairs are stored; anything missing is 1.0.
"""
from __future__ import annotations
from typing import Dict, Sequence

from skirmish.core.types import ElementType

_TYPE_CHART: Dict[str, Dict[str, float]] = {
    "normal":  {"rock": 0.5, "ghost": 0.0, "steel": 0.5},
    "fire":    {"fire": 0.5, "water": 0.5, "grass": 2.0, "ice": 2.0, "bug": 2.0, "rock": 0.5, "dragon": 0.5, "steel": 2.0},
    "water":   {"fire": 2.0, "water": 0.5, "grass": 0.5, "ground": 2.0, "rock": 2.0, "dragon": 0.5},
    "electric":{"water": 2.0,"electric": 0.5,"grass": 0.5,"ground": 0.0,"flying": 2.0,"dragon": 0.5},
    "grass":   {"fire": 0.5, "water": 2.0, "grass": 0.5, "poison": 0.5, "ground": 2.0, "flying": 0.5, "bug": 0.5, "rock": 2.0, "dragon": 0.5, "steel": 0.5},
    "ice":     {"fire": 0.5,"water": 0.5,"grass": 2.0,"ice": 0.5,"ground": 2.0,"flying": 2.0,"dragon": 2.0,"steel": 0.5},
    "fighting":{"normal": 2.0,"ice": 2.0,"rock": 2.0,"dark": 2.0,"steel": 2.0,"poison": 0.5,"flying": 0.5,"psychic": 0.5,"bug": 0.5,"fairy": 0.5,"ghost": 0.0},
    "poison":  {"grass": 2.0,"fairy": 2.0,"poison": 0.5,"ground": 0.5,"rock": 0.5,"ghost": 0.5,"steel": 0.0},
    "ground":  {"fire": 2.0,"electric": 2.0,"poison": 2.0,"rock": 2.0,"steel": 2.0,"grass": 0.5,"bug": 0.5,"flying": 0.0},
    "flying":  {"grass": 2.0,"fighting": 2.0,"bug": 2.0,"electric": 0.5,"rock": 0.5,"steel": 0.5},
    "psychic": {"fighting": 2.0,"poison": 2.0,"psychic": 0.5,"steel": 0.5,"dark": 0.0},
    "bug":     {"grass": 2.0,"psychic": 2.0,"dark": 2.0,"fire": 0.5,"fighting": 0.5,"poison": 0.5,"flying": 0.5,"ghost": 0.5,"steel": 0.5,"fairy": 0.5},
    "rock":    {"fire": 2.0,"ice": 2.0,"flying": 2.0,"bug": 2.0,"fighting": 0.5,"ground": 0.5,"steel": 0.5},
    "ghost":   {"ghost": 2.0,"psychic": 2.0,"dark": 0.5,"normal": 0.0},
    "dragon":  {"dragon": 2.0,"steel": 0.5,"fairy": 0.0},
    "dark":    {"ghost": 2.0,"psychic": 2.0,"fighting": 0.5,"dark": 0.5,"fairy": 0.5},
    "steel":   {"ice": 2.0,"rock": 2.0,"fairy": 2.0,"fire": 0.5,"water": 0.5,"electric": 0.5,"steel": 0.5},
    "fairy":   {"fighting": 2.0,"dragon": 2.0,"dark": 2.0,"fire": 0.5,"poison": 0.5,"steel": 0.5},
}


def single_effectiveness(attack_type: "str | ElementType", defender_type: "str | ElementType") -> float:
    atk = ElementType.parse(attack_type).value
    dfn = ElementType.parse(defender_type).value
    return _TYPE_CHART.get(atk, {}).get(dfn, 1.0)


def effectiveness(attack_type: "str | ElementType", defender_types: "Sequence[str | ElementType] | str | ElementType") -> float:
    """Multiplier of attack_type against one or two defender types.

    Dual types multiply their single lookups, so the result is one of
    0, 0.25, 0.5, 1, 2 or 4. Unknown type names raise ValueError.
    """
    if isinstance(defender_types, (str, ElementType)):
        defender_types = (defender_types,)
    types = list(defender_types)
    if not 1 <= len(types) <= 2:
        raise ValueError(f"Defender must have one or two types, got {len(types)}")
    mult = 1.0
    for t in types:
        mult *= single_effectiveness(attack_type, t)
    return mult


__all__ = ["effectiveness","single_effectiveness"]
