#!/usr/bin/env python3
"""CLI utility for generating coach scenarios and running drills."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Optional

from coach.constants import TABLE_SIZES
from coach.service import CoachService

STREET_CHOICES = ["preflop", "flop", "turn", "river"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Preflop coach CLI")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    def _scenario_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--street", default="preflop", choices=STREET_CHOICES)
        p.add_argument("--table-size", type=int, default=None, choices=TABLE_SIZES)
        p.add_argument("--hero-position", default=None, help="e.g. UTG, CO, BTN, BB")
        p.add_argument("--seed", type=int, default=None)

    gen = sub.add_parser("generate", help="Generate one scenario")
    _scenario_args(gen)

    drill = sub.add_parser("drill", help="Play one decision and print the coaching analysis")
    _scenario_args(drill)
    drill.add_argument("--choice", type=int, default=None, help="Option number (1-based); prompts when omitted")
    drill.add_argument("--advance", action="store_true", help="Continue to later streets after each decision")
    return parser


def _scenario_payload(args: argparse.Namespace) -> dict:
    payload = {"street": args.street}
    if args.table_size is not None:
        payload["table_size"] = args.table_size
    if args.hero_position:
        payload["hero_position"] = args.hero_position
    if args.seed is not None:
        payload["seed"] = args.seed
    return payload


def _read_choice(count: int, preset: Optional[int]) -> int:
    if preset is not None:
        if preset < 1 or preset > count:
            raise ValueError(f"--choice must be between 1 and {count}")
        return preset - 1
    while True:
        raw = input(f"Your choice [1-{count}]: ").strip()
        if raw.isdigit() and 1 <= int(raw) <= count:
            return int(raw) - 1
        print(f"Enter a number between 1 and {count}.")


def _run_drill(service: CoachService, args: argparse.Namespace) -> None:
    spot = service.generate(_scenario_payload(args))
    while True:
        print(spot["description"])
        for idx, option in enumerate(spot["options"], start=1):
            print(f"  {idx}. {option['label']} - {option['description']}")

        choice = _read_choice(len(spot["options"]), args.choice)
        result = service.analyze({"scenario": spot["scenario"], "choice": choice})
        analysis = result["analysis"]
        print()
        print(f"Equity: {analysis['equity']}%")
        print(f"Recommendation: {analysis['recommendation']}")
        print(f"Strategy: {json.dumps(analysis['strategy'])}")
        print(f"Verdict: {analysis['verdict']}")
        print()
        print(analysis["feedback"])

        chosen = spot["options"][choice]
        if not args.advance or chosen["action"] == "fold" or spot["scenario"]["current_street"] == "river":
            return
        acted = service.act(
            {
                "scenario": spot["scenario"],
                "action": chosen["action"],
                "amount": chosen.get("amount") if chosen["action"] in ("bet", "raise") else None,
            }
        )
        print()
        spot = service.advance({"scenario": acted["scenario"]})


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    service = CoachService()

    if args.command == "generate":
        spot = service.generate(_scenario_payload(args))
        print(json.dumps(spot["scenario"], indent=2))
        print(spot["description"])
        return

    if args.command == "drill":
        try:
            _run_drill(service, args)
        except ValueError as exc:
            parser.error(str(exc))
        return

    raise RuntimeError(f"Unknown command: {args.command}")


if __name__ == "__main__":
    main()
