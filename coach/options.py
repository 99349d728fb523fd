"""Decision menu offered to the learner for a scenario."""

from __future__ import annotations

import math
from typing import List

from coach.constants import (
    POSTFLOP_BET_SIZES,
    POSTFLOP_RAISE_SIZES,
    PREFLOP_OPEN_RAISE_BB,
    STARTING_TO_CALL_BB,
    THREE_BET_MULTIPLIER,
)
from coach.models import ActionKind, DecisionOption, GameScenario, Street, format_bb


def _preflop_options(to_call: float) -> List[DecisionOption]:
    if to_call > STARTING_TO_CALL_BB:
        three_bet = math.floor(to_call * THREE_BET_MULTIPLIER + 1)
        return [
            DecisionOption(
                kind=ActionKind.CALL,
                amount=to_call,
                label=f"Call {format_bb(to_call)}BB",
                description="Call the raise passively",
            ),
            DecisionOption(
                kind=ActionKind.RAISE,
                amount=float(three_bet),
                label=f"3-Bet to {three_bet}BB",
                description="Re-raise for strength",
            ),
        ]
    return [
        DecisionOption(
            kind=ActionKind.CALL,
            amount=STARTING_TO_CALL_BB,
            label=f"Call {format_bb(STARTING_TO_CALL_BB)}BB",
            description="Limp in passively",
        ),
        DecisionOption(
            kind=ActionKind.RAISE,
            amount=float(PREFLOP_OPEN_RAISE_BB),
            label=f"Raise to {PREFLOP_OPEN_RAISE_BB}BB",
            description="Standard open raise",
        ),
    ]


def _postflop_options(to_call: float, pot_size: float) -> List[DecisionOption]:
    options: List[DecisionOption] = []
    if to_call > 0:
        options.append(
            DecisionOption(
                kind=ActionKind.CALL,
                amount=to_call,
                label=f"Call {format_bb(to_call)}BB",
                description="Call the bet passively",
            )
        )
        for multiplier, label, description in POSTFLOP_RAISE_SIZES:
            amount = math.floor(to_call * multiplier)
            options.append(
                DecisionOption(
                    kind=ActionKind.RAISE,
                    amount=float(amount),
                    label=f"{label} {amount}BB",
                    description=description,
                )
            )
        return options

    options.append(
        DecisionOption(
            kind=ActionKind.CHECK,
            label="Check",
            description="Pass without betting and see what opponents do",
        )
    )
    for ratio, label, description in POSTFLOP_BET_SIZES:
        amount = max(1, math.floor(pot_size * ratio))
        options.append(
            DecisionOption(
                kind=ActionKind.BET,
                amount=float(amount),
                label=f"{label} {amount}BB",
                description=description,
            )
        )
    return options


def generate_decision_options(scenario: GameScenario) -> List[DecisionOption]:
    """Ordered menu for the scenario; fold is always first."""
    options = [
        DecisionOption(kind=ActionKind.FOLD, label="Fold", description="Give up the hand"),
    ]
    if scenario.current_street == Street.PREFLOP:
        options.extend(_preflop_options(scenario.to_call))
    else:
        options.extend(_postflop_options(scenario.to_call, scenario.pot_size))
    return options
