"""Application service layer for the preflop coach."""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional

from coach.analysis import FeedbackClient, generate_analysis
from coach.constants import POSITION_SETS, STREETS, TABLE_SIZES
from coach.equity import calculate_equity
from coach.feedback import client_from_env
from coach.models import (
    DecisionOption,
    GameScenario,
    parse_action_kind,
    parse_position,
    parse_street,
)
from coach.options import generate_decision_options
from coach.scenario import (
    advance_to_next_street,
    generate_scenario,
    generate_scenario_description,
    record_action,
    validate_scenario,
)

logger = logging.getLogger(__name__)


class CoachService:
    """High-level API used by HTTP handlers and scripts."""

    def __init__(self, feedback_client: Optional[FeedbackClient] = None):
        self.feedback_client = feedback_client if feedback_client is not None else client_from_env()

    @staticmethod
    def _rng(payload: dict) -> Optional[random.Random]:
        seed = payload.get("seed")
        if seed is None or seed == "":
            return None
        try:
            return random.Random(int(seed))
        except (TypeError, ValueError):
            raise ValueError("seed must be an integer") from None

    @staticmethod
    def _scenario(payload: dict) -> GameScenario:
        raw = payload.get("scenario")
        if not isinstance(raw, dict):
            raise ValueError("scenario is required")
        return validate_scenario(GameScenario.from_dict(raw))

    @staticmethod
    def _choice(raw: Any, options: List[DecisionOption]) -> DecisionOption:
        if isinstance(raw, dict):
            return DecisionOption.from_dict(raw)
        if raw is None or isinstance(raw, bool):
            raise ValueError("choice is required")
        try:
            idx = int(raw)
        except (TypeError, ValueError):
            raise ValueError("choice must be an option index or an option object") from None
        if idx < 0 or idx >= len(options):
            raise ValueError(f"choice index out of range: {idx}")
        return options[idx]

    @staticmethod
    def _spot(scenario: GameScenario) -> Dict[str, Any]:
        return {
            "scenario": scenario.to_dict(),
            "description": generate_scenario_description(scenario),
            "options": [o.to_dict() for o in generate_decision_options(scenario)],
        }

    def app_config(self) -> Dict[str, Any]:
        return {
            "streets": [s.value for s in STREETS],
            "table_sizes": list(TABLE_SIZES),
            "position_sets": {str(size): [p.value for p in seats] for size, seats in POSITION_SETS.items()},
            "remote_feedback": self.feedback_client is not None,
            "defaults": {
                "street": STREETS[0].value,
                "table_size": None,
                "hero_position": None,
            },
        }

    def generate(self, payload: dict) -> dict:
        street = parse_street(payload.get("street") or "preflop")

        table_size = payload.get("table_size")
        if table_size is not None and table_size != "":
            try:
                table_size = int(table_size)
            except (TypeError, ValueError):
                raise ValueError("table_size must be an integer") from None
            if table_size not in TABLE_SIZES:
                raise ValueError(f"table_size must be one of {TABLE_SIZES}")
        else:
            table_size = None

        hero_position = payload.get("hero_position")
        hero = parse_position(hero_position) if hero_position else None

        scenario = generate_scenario(
            street=street,
            rng=self._rng(payload),
            table_size=table_size,
            hero_position=hero,
        )
        return self._spot(scenario)

    def advance(self, payload: dict) -> dict:
        scenario = advance_to_next_street(self._scenario(payload), rng=self._rng(payload))
        return self._spot(scenario)

    def options(self, payload: dict) -> dict:
        scenario = self._scenario(payload)
        return {"options": [o.to_dict() for o in generate_decision_options(scenario)]}

    def act(self, payload: dict) -> dict:
        scenario = self._scenario(payload)
        position = payload.get("position")
        seat = parse_position(position) if position else scenario.hero_position
        kind = parse_action_kind(payload.get("action"))
        amount = payload.get("amount")
        updated = record_action(
            scenario,
            position=seat,
            kind=kind,
            amount=float(amount) if amount is not None else None,
        )
        return self._spot(updated)

    def equity(self, payload: dict) -> dict:
        scenario = self._scenario(payload)
        value = calculate_equity(
            scenario.hero_cards,
            scenario.current_street_actions,
            board=scenario.board_cards,
            street=scenario.current_street,
        )
        return {"equity": value}

    def analyze(self, payload: dict) -> dict:
        scenario = self._scenario(payload)
        choice = self._choice(payload.get("choice"), generate_decision_options(scenario))

        equity = payload.get("equity")
        if equity is None:
            equity = calculate_equity(
                scenario.hero_cards,
                scenario.current_street_actions,
                board=scenario.board_cards,
                street=scenario.current_street,
            )
        else:
            try:
                equity = int(equity)
            except (TypeError, ValueError):
                raise ValueError("equity must be an integer percentage") from None

        logger.debug(f"Analyzing {choice.kind.value} at {equity}% equity")
        analysis = generate_analysis(scenario, choice, equity, client=self.feedback_client)
        return {
            "scenario": scenario.to_dict(),
            "analysis": analysis.to_dict(),
        }
