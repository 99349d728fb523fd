"""Closed-form equity heuristic: hero hand score against inferred range strength.

No enumeration or simulation happens here. The hero's two cards (plus board
ranks after the flop) map to a 0-95 score, the last observed action maps to an
opponent range score, and the difference is scaled into a clamped percentage.
"""

from __future__ import annotations

import math
from typing import Sequence

from coach.constants import (
    DEFAULT_RANGE_STRENGTH,
    EQUITY_CEILING,
    EQUITY_FLOOR,
    MAX_UNPAIRED_STRENGTH,
    OPPONENT_RANGE_STRENGTH,
    POSTFLOP_BET_STRENGTH_BONUS,
    POSTFLOP_CHECK_STRENGTH_PENALTY,
    POSTFLOP_EQUITY_SCALE,
    PREFLOP_EQUITY_SCALE,
    UNOPENED_RANGE_STRENGTH,
    position_bucket,
)
from coach.models import ActionKind, Card, PlayerAction, Position, Street


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _banded_score(high: int, low: int) -> float:
    if high == 14:
        return 60 + low * 2
    if high == 13:
        return 40 + low * 1.5
    if high == 12:
        return 30 + low * 1.2
    if high == 11:
        return 25 + low
    return max(high + low - 2, 15)


def _score(hero_cards: Sequence[Card], ranks: Sequence[int]) -> float:
    first, second = hero_cards[0], hero_cards[1]
    if first.rank == second.rank:
        if first.rank >= 10:
            return 85.0
        if first.rank >= 7:
            return 65.0
        return 45.0

    strength = _banded_score(max(ranks), min(ranks))
    if first.suit == second.suit:
        strength += 5
    if abs(int(first.rank) - int(second.rank)) == 1:
        strength += 3
    return min(float(strength), MAX_UNPAIRED_STRENGTH)


def preflop_hand_strength(hero_cards: Sequence[Card]) -> float:
    return _score(hero_cards, [int(c.rank) for c in hero_cards])


def postflop_hand_strength(hero_cards: Sequence[Card], board: Sequence[Card]) -> float:
    """
    Same banded score with high/low taken across hole and board ranks.

    A rough stand-in for a made-hand evaluator; it never looks at pairs or
    draws formed with the board.
    """
    ranks = [int(c.rank) for c in list(hero_cards) + list(board)]
    return _score(hero_cards, ranks)


def opponent_range_strength(position: Position, raise_like: bool) -> float:
    key = (position_bucket(position), "raise" if raise_like else "call")
    return OPPONENT_RANGE_STRENGTH.get(key, DEFAULT_RANGE_STRENGTH)


def combined_range_strength(actions: Sequence[PlayerAction], street: Street = Street.PREFLOP) -> float:
    """Range strength implied by the most recent action; unopened spots use a flat default."""
    if not actions:
        return UNOPENED_RANGE_STRENGTH[street]

    last = actions[-1]
    if street != Street.PREFLOP and last.kind in (ActionKind.BET, ActionKind.CHECK):
        if last.kind == ActionKind.BET:
            return opponent_range_strength(last.position, True) + POSTFLOP_BET_STRENGTH_BONUS
        return opponent_range_strength(last.position, False) - POSTFLOP_CHECK_STRENGTH_PENALTY

    raise_like = last.kind in (ActionKind.RAISE, ActionKind.BET)
    return opponent_range_strength(last.position, raise_like)


def calculate_equity(
    hero_cards: Sequence[Card],
    actions: Sequence[PlayerAction],
    board: Sequence[Card] = (),
    street: Street = Street.PREFLOP,
) -> int:
    """Win-probability percentage in [15, 85]."""
    if street == Street.PREFLOP:
        hero = preflop_hand_strength(hero_cards)
        scale = PREFLOP_EQUITY_SCALE
    else:
        hero = postflop_hand_strength(hero_cards, board)
        scale = POSTFLOP_EQUITY_SCALE

    opponent = combined_range_strength(actions, street)
    equity = 50 + (hero - opponent) * scale
    return round_half_up(_clamp(equity, EQUITY_FLOOR, EQUITY_CEILING))
