"""Stochastic prior-action generator driven by position tendencies."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from coach.cards import RandomSource, resolve_rng, uniform_index
from coach.constants import (
    FACING_RAISE_SCALING,
    MIN_RAISE_BB,
    POSITION_TENDENCIES,
    RAISE_SIZE_CHOICES,
    Tendency,
    position_bucket,
)
from coach.models import ActionKind, PlayerAction, Position, Street


def position_tendency(position: Position) -> Tendency:
    return POSITION_TENDENCIES[position_bucket(position)]


def adjusted_tendency(position: Position, has_raise: bool) -> Tendency:
    """
    Tendency for ``position`` normalized to sum to 1.

    Once someone ahead has raised, folds become more likely and calls and
    raises less likely before renormalizing.
    """
    base = position_tendency(position)
    if has_raise:
        base = Tendency(
            fold_rate=base.fold_rate * FACING_RAISE_SCALING.fold_rate,
            call_rate=base.call_rate * FACING_RAISE_SCALING.call_rate,
            raise_rate=base.raise_rate * FACING_RAISE_SCALING.raise_rate,
        )
    total = base.fold_rate + base.call_rate + base.raise_rate
    return Tendency(
        fold_rate=base.fold_rate / total,
        call_rate=base.call_rate / total,
        raise_rate=base.raise_rate / total,
    )


def sample_player_action(
    position: Position,
    has_raise: bool = False,
    street: Street = Street.PREFLOP,
    rng: Optional[RandomSource] = None,
) -> PlayerAction:
    source = resolve_rng(rng)
    tendency = adjusted_tendency(position, has_raise)
    draw = source.random()

    if draw < tendency.fold_rate:
        return PlayerAction(position=position, kind=ActionKind.FOLD, street=street)
    if draw < tendency.fold_rate + tendency.call_rate:
        return PlayerAction(position=position, kind=ActionKind.CALL, street=street)
    size = uniform_index(source, RAISE_SIZE_CHOICES) + MIN_RAISE_BB
    return PlayerAction(position=position, kind=ActionKind.RAISE, street=street, amount=float(size))


def generate_action_history(
    positions: Sequence[Position],
    street: Street = Street.PREFLOP,
    rng: Optional[RandomSource] = None,
) -> Tuple[List[PlayerAction], List[PlayerAction]]:
    """
    Sample one action per position, in order.

    Returns:
        (all_actions, street_actions) where ``street_actions`` drops folds.
    """
    source = resolve_rng(rng)
    all_actions: List[PlayerAction] = []
    street_actions: List[PlayerAction] = []
    has_raise = False

    for position in positions:
        action = sample_player_action(position, has_raise=has_raise, street=street, rng=source)
        all_actions.append(action)
        if action.kind != ActionKind.FOLD:
            street_actions.append(action)
        if action.kind == ActionKind.RAISE:
            has_raise = True

    return all_actions, street_actions
