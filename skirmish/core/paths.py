"""
Centralized path helpers (works with the flat layout).
"""
from __future__ import annotations
from pathlib import Path

# This file lives at skirmish/core/paths.py
PACKAGE = Path(__file__).resolve().parents[1]   # the 'skirmish' package directory
ROOT = PACKAGE.parent
DATA = PACKAGE / "data"
SCHEMA = DATA / "schema"
SPECIES_FILE = DATA / "species.json"
MOVES_FILE = DATA / "moves.json"
