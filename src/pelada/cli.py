"""Command-line interface for drawing balanced teams from a roster file."""

from __future__ import annotations

import argparse
import random
from pathlib import Path

from pydantic import TypeAdapter

from pelada.balancer import balance_teams, team_overall
from pelada.config import get_rules
from pelada.models import Player


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Split a pelada roster into two balanced teams")
    parser.add_argument("roster", type=Path, help="Path to roster JSON (list of players)")
    parser.add_argument("--match-id", default="cli", help="Match id recorded on the assignment")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible draw")
    parser.add_argument("--rules", default="default", help="Match rules name")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write teams JSON")
    return parser.parse_args()


def _load_roster(path: Path) -> list[Player]:
    return TypeAdapter(list[Player]).validate_json(path.read_text(encoding="utf-8"))


def main() -> None:
    args = _parse_args()
    rules = get_rules(args.rules)
    roster = _load_roster(args.roster)
    rng = random.Random(args.seed) if args.seed is not None else None

    assignment = balance_teams(roster, match_id=args.match_id, rng=rng, rules=rules)
    by_id = {player.player_id: player for player in roster}

    for label, ids in (("A", assignment.team_a), ("B", assignment.team_b)):
        members = [by_id[pid] for pid in ids]
        print(f"Team {label} ({len(members)} players, overall {team_overall(members):.1f})")
        for player in members:
            positions = "/".join(position.value for position in player.positions) or "-"
            keeper = " [GK]" if player.is_goalkeeper else ""
            print(f"  {player.name}{keeper}  {positions}  {player.overall_display}")

    if args.output:
        args.output.write_text(assignment.model_dump_json(indent=2), encoding="utf-8")
        print(f"Wrote teams to {args.output}")


if __name__ == "__main__":
    main()
