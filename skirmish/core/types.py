"""Closed vocabularies shared by the engine plus type display metadata.

Provides:
  ElementType / MoveCategory / StatusCondition enums
  TYPE_COLORS_HEX: mapping type -> hex color string (#RRGGBB)
  TYPE_ABBREVIATIONS: mapping type -> 3-letter abbreviation (upper)
  helpers for colorized terminal output (colorama) and rich styles.
"""
from __future__ import annotations
from enum import Enum
from typing import Dict, Iterable
import re

from colorama import Fore, Style


class ElementType(str, Enum):
    NORMAL = "normal"
    FIRE = "fire"
    WATER = "water"
    ELECTRIC = "electric"
    GRASS = "grass"
    ICE = "ice"
    FIGHTING = "fighting"
    POISON = "poison"
    GROUND = "ground"
    FLYING = "flying"
    PSYCHIC = "psychic"
    BUG = "bug"
    ROCK = "rock"
    GHOST = "ghost"
    DRAGON = "dragon"
    DARK = "dark"
    STEEL = "steel"
    FAIRY = "fairy"

    @classmethod
    def parse(cls, value: "str | ElementType") -> "ElementType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown element type: {value!r}") from None


class MoveCategory(str, Enum):
    PHYSICAL = "physical"
    SPECIAL = "special"
    STATUS = "status"


class StatusCondition(str, Enum):
    NONE = "none"
    POISON = "poison"
    PARALYSIS = "paralysis"
    SLEEP = "sleep"
    BURN = "burn"
    FREEZE = "freeze"
    CONFUSION = "confusion"


TYPE_COLORS_HEX: Dict[str, str] = {
    "normal": "#A8A77A",
    "fire": "#EE8130",
    "water": "#6390F0",
    "electric": "#F7D02C",
    "grass": "#7AC74C",
    "ice": "#96D9D6",
    "fighting": "#C22E28",
    "poison": "#A33EA1",
    "ground": "#E2BF65",
    "flying": "#A98FF3",
    "psychic": "#F95587",
    "bug": "#A6B91A",
    "rock": "#B6A136",
    "ghost": "#735797",
    "dragon": "#6F35FC",
    "dark": "#705746",
    "steel": "#B7B7CE",
    "fairy": "#D685AD",
}

TYPE_ABBREVIATIONS: Dict[str, str] = {
    "normal": "NRM",
    "fire": "FIR",
    "water": "WTR",
    "grass": "GRS",
    "electric": "ELE",
    "ice": "ICE",
    "fighting": "FGT",
    "poison": "PSN",
    "ground": "GRN",
    "flying": "FLY",
    "psychic": "PSY",
    "bug": "BUG",
    "rock": "RCK",
    "ghost": "GHO",
    "dragon": "DRA",
    "dark": "DRK",
    "steel": "STL",
    "fairy": "FAI",
}

_FORE: Dict[str, str] = {
    "normal": Fore.WHITE,
    "fire": Fore.RED,
    "water": Fore.CYAN,
    "electric": Fore.YELLOW,
    "grass": Fore.GREEN,
    "ice": Fore.CYAN,
    "fighting": Fore.MAGENTA,
    "poison": Fore.MAGENTA,
    "ground": Fore.YELLOW,
    "flying": Fore.WHITE,
    "psychic": Fore.MAGENTA,
    "bug": Fore.GREEN,
    "rock": Fore.YELLOW,
    "ghost": Fore.MAGENTA,
    "dragon": Fore.CYAN,
    "dark": Fore.WHITE,
    "steel": Fore.WHITE,
    "fairy": Fore.MAGENTA,
}

def _key(type_name: "str | ElementType") -> str:
    return type_name.value if isinstance(type_name, ElementType) else str(type_name).lower()

def colorize_type_text(type_name: "str | ElementType", text: str) -> str:
    code = _FORE.get(_key(type_name), "")
    if not code:
        return text
    return f"{code}{text}{Style.RESET_ALL}"

def type_abbreviation(type_name: "str | ElementType") -> str:
    t = _key(type_name)
    return TYPE_ABBREVIATIONS.get(t, t[:3].upper())

def format_types(types: Iterable["str | ElementType"]) -> str:
    return '/'.join(colorize_type_text(t, type_abbreviation(t)) for t in types)

def rich_type_markup(types: Iterable["str | ElementType"]) -> str:
    """Rich console markup variant of format_types (used by the CLI tables)."""
    parts = []
    for t in types:
        k = _key(t)
        parts.append(f"[{TYPE_COLORS_HEX.get(k, '#FFFFFF')}]{type_abbreviation(k)}[/]")
    return '/'.join(parts)

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")

def strip_ansi(s: str) -> str:
    return ANSI_ESCAPE_RE.sub('', s)

__all__ = [
    'ElementType','MoveCategory','StatusCondition',
    'TYPE_COLORS_HEX','TYPE_ABBREVIATIONS',
    'colorize_type_text','type_abbreviation','format_types','rich_type_markup','strip_ansi'
]
