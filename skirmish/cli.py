"""Developer CLI: replay a seeded auto-battle and print its event log.

    python -m skirmish.cli simulate flamling 12 leafling 10 --seed 7
    python -m skirmish.cli species
"""
from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.box import ROUNDED

from skirmish.battle.ai import random_move_policy, strongest_move_policy
from skirmish.battle.events import EventKind, TurnResult
from skirmish.battle.models import CreatureInstance, Species
from skirmish.battle.service import BattleService
from skirmish.core.errors import SkirmishError
from skirmish.core.logging import logger
from skirmish.core.types import rich_type_markup

console = Console()

POLICIES = {
    "random": random_move_policy,
    "strongest": strongest_move_policy,
}

_KIND_STYLE = {
    EventKind.DAMAGE_DEALT: "red",
    EventKind.FAINTED: "bold red",
    EventKind.CRITICAL_HIT: "bold yellow",
    EventKind.MULTI_HIT: "red",
    EventKind.STATUS_INFLICTED: "magenta",
    EventKind.STATUS_TICK: "magenta",
    EventKind.HP_RESTORED: "green",
    EventKind.EXPERIENCE_GAINED: "cyan",
    EventKind.LEVEL_UP: "bold cyan",
    EventKind.BATTLE_ENDED: "bold",
}


def _resolve_species(service: BattleService, ref: str) -> Species:
    if ref.isdigit():
        return service.data.species(int(ref))
    sp = service.data.find_species(ref)
    if sp is None:
        raise SkirmishError(f"Unknown species '{ref}'")
    return sp


def _turn_table(result: TurnResult) -> Table:
    table = Table(title=f"Turn {result.turn}", box=ROUNDED, show_lines=False)
    table.add_column("Side", style="dim", width=9)
    table.add_column("Event")
    table.add_column("Details")
    for evt in result:
        details = ", ".join(f"{k}={v}" for k, v in evt.data.items())
        style = _KIND_STYLE.get(evt.kind, "")
        table.add_row(evt.side.value if evt.side else "-", f"[{style}]{evt.kind.value}[/]" if style else evt.kind.value, details)
    return table


def cmd_simulate(args: argparse.Namespace) -> int:
    service = BattleService()
    if args.log_level:
        logger.set_level(args.log_level)
    p_sp = _resolve_species(service, args.player)
    o_sp = _resolve_species(service, args.opponent)
    player = CreatureInstance(instance_id="player-1", species_id=p_sp.id, level=args.player_level)
    session = service.start_battle(
        player, (o_sp.id, args.opponent_level),
        is_trainer=args.trainer, seed=args.seed,
        choose_action=POLICIES[args.opponent_policy],
    )
    console.print(Panel(
        f"{p_sp.name} Lv{args.player_level} {rich_type_markup(p_sp.types)}  vs  "
        f"{o_sp.name} Lv{args.opponent_level} {rich_type_markup(o_sp.types)}",
        title="Battle", box=ROUNDED,
    ))
    results = session.run_auto(POLICIES[args.player_policy], max_turns=args.max_turns)
    for res in results:
        console.print(_turn_table(res))
    console.print(f"[bold]Outcome:[/] {session.outcome.value} after {len(results)} turn(s)")
    return 0


def cmd_species(args: argparse.Namespace) -> int:
    service = BattleService()
    table = Table(title="Species", box=ROUNDED)
    for col in ("Id", "Name", "Types", "HP", "Atk", "Def", "SpA", "SpD", "Spe", "Catch", "Growth"):
        table.add_column(col)
    for sid in service.data.species_ids():
        sp = service.data.species(sid)
        b = sp.base_stats
        table.add_row(str(sp.id), sp.name, rich_type_markup(sp.types), str(b.hp), str(b.attack), str(b.defense),
                      str(b.sp_atk), str(b.sp_def), str(b.speed), str(sp.catch_rate), sp.growth_rate)
    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skirmish", description="Turn-based creature battle engine tools")
    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="Run a seeded auto-battle and print the event log")
    sim.add_argument("player", help="Player species id or name")
    sim.add_argument("player_level", type=int)
    sim.add_argument("opponent", help="Opponent species id or name")
    sim.add_argument("opponent_level", type=int)
    sim.add_argument("--seed", type=int, default=None, help="RNG seed (defaults to settings seed)")
    sim.add_argument("--trainer", action="store_true", help="Treat the opponent as trainer-owned")
    sim.add_argument("--player-policy", choices=sorted(POLICIES), default="strongest")
    sim.add_argument("--opponent-policy", choices=sorted(POLICIES), default="random")
    sim.add_argument("--max-turns", type=int, default=None)
    sim.add_argument("--log-level", choices=["DEBUG","INFO","WARN","ERROR"], default=None)
    sim.set_defaults(func=cmd_simulate)

    sp = sub.add_parser("species", help="List bundled species")
    sp.set_defaults(func=cmd_species)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except SkirmishError as e:
        console.print(f"[red]error:[/] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
