"""Runtime loader for static species / move data.

Reads the bundled JSON documents once (cached), validates every record
against the JSON schemas in data/schema and turns them into frozen models.
"""
from __future__ import annotations
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import jsonschema

from skirmish.core.errors import ConfigurationError, DataLoadError
from skirmish.core.logging import logger
from skirmish.core.paths import MOVES_FILE, SCHEMA, SPECIES_FILE
from skirmish.core.types import ElementType, MoveCategory, StatusCondition
from skirmish.battle.models import EvolutionRule, LearnsetEntry, Move, MoveEffect, Species, Stats


@lru_cache(maxsize=None)
def _schema(name: str) -> Dict[str, Any]:
    path = SCHEMA / name
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DataLoadError(str(path), str(e)) from e


def _read_records(path: Path, schema_name: str) -> List[Dict[str, Any]]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DataLoadError(str(path), str(e)) from e
    if not isinstance(raw, list):
        raise DataLoadError(str(path), "expected a list of records")
    schema = _schema(schema_name)
    for i, rec in enumerate(raw):
        try:
            jsonschema.validate(rec, schema)
        except jsonschema.ValidationError as e:
            raise DataLoadError(str(path), f"record {i}: schema: {e.message}") from e
    return raw


def _parse_types(values: Iterable[str], path: Path) -> tuple:
    try:
        return tuple(ElementType.parse(v) for v in values)
    except ValueError as e:
        raise DataLoadError(str(path), str(e)) from e


def parse_species(rec: Dict[str, Any], path: Path = SPECIES_FILE) -> Species:
    evo = rec.get("evolution")
    return Species(
        id=rec["id"],
        name=rec["name"],
        types=_parse_types(rec["types"], path),
        base_stats=Stats.from_dict(rec["base_stats"]),
        catch_rate=rec["catch_rate"],
        base_exp=rec["base_exp"],
        growth_rate=rec.get("growth_rate", "medium-fast"),
        evolution=EvolutionRule(evo["species_id"], evo.get("level"), evo.get("item")) if evo else None,
        learnset=tuple(LearnsetEntry(e["level"], e["move_id"]) for e in rec.get("learnset", [])),
    )


def parse_move(rec: Dict[str, Any], path: Path = MOVES_FILE) -> Move:
    eff = rec.get("effect")
    effect = None
    if eff:
        effect = MoveEffect(
            kind=eff["kind"],
            target=eff["target"],
            chance=eff.get("chance", 100),
            status=StatusCondition(eff["status"]) if eff.get("status") else None,
            stages=tuple(sorted(eff.get("stages", {}).items())),
            ratio=eff.get("ratio", 0),
            escalating=eff.get("escalating", False),
        )
    hits = tuple(rec.get("hits", (1, 1)))
    if hits[0] > hits[1]:
        raise DataLoadError(str(path), f"move {rec['id']} hits range {list(hits)} is inverted")
    return Move(
        id=rec["id"],
        name=rec["name"],
        type=_parse_types([rec["type"]], path)[0],
        category=MoveCategory(rec["category"]),
        power=rec.get("power", 0) or 0,
        accuracy=rec.get("accuracy", 100),
        priority=rec.get("priority", 0),
        max_pp=rec["pp"],
        effect=effect,
        high_crit=rec.get("high_crit", False),
        hits=hits,
    )


def _index(items: Iterable, path: Path) -> Dict[int, Any]:
    out: Dict[int, Any] = {}
    for item in items:
        if item.id in out:
            raise DataLoadError(str(path), f"duplicate id {item.id}")
        out[item.id] = item
    return out


class GameData:
    """Immutable species / move lookup tables used by one or more battles."""

    def __init__(self, species: Iterable[Species], moves: Iterable[Move]):
        self._species: Dict[int, Species] = _index(species, SPECIES_FILE)
        self._moves: Dict[int, Move] = _index(moves, MOVES_FILE)

    def species(self, species_id: int) -> Species:
        try:
            return self._species[species_id]
        except KeyError:
            raise ConfigurationError(f"Species id {species_id} not found") from None

    def move(self, move_id: int) -> Move:
        try:
            return self._moves[move_id]
        except KeyError:
            raise ConfigurationError(f"Move id {move_id} not found") from None

    def find_species(self, name: str) -> Optional[Species]:
        name_lower = name.strip().lower()
        for sp in self._species.values():
            if sp.name.lower() == name_lower:
                return sp
        return None

    def species_ids(self) -> tuple:
        return tuple(sorted(self._species))

    def move_ids(self) -> tuple:
        return tuple(sorted(self._moves))

    def check_references(self) -> List[str]:
        """Dangling learnset / evolution references, as readable strings."""
        problems: List[str] = []
        for sp in self._species.values():
            for e in sp.learnset:
                if e.move_id not in self._moves:
                    problems.append(f"{sp.name}: learnset move {e.move_id} missing")
            if sp.evolution and sp.evolution.species_id not in self._species:
                problems.append(f"{sp.name}: evolution target {sp.evolution.species_id} missing")
        return problems


def load_game_data(species_path: Path = SPECIES_FILE, moves_path: Path = MOVES_FILE) -> GameData:
    species = [parse_species(r, species_path) for r in _read_records(species_path, "species.schema.json")]
    moves = [parse_move(r, moves_path) for r in _read_records(moves_path, "move.schema.json")]
    data = GameData(species, moves)
    for problem in data.check_references():
        logger.warn("DataReferenceMissing", detail=problem)
    logger.debug("GameDataLoaded", species=len(species), moves=len(moves))
    return data


@lru_cache(maxsize=None)
def default_data() -> GameData:
    return load_game_data()

__all__ = ["GameData","load_game_data","default_data","parse_species","parse_move"]
