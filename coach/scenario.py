"""Scenario generation, street advancement and action recording."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from coach.action_history import generate_action_history
from coach.cards import (
    RandomSource,
    deal,
    format_cards,
    full_deck,
    remove_cards,
    resolve_rng,
    shuffle_deck,
    uniform_index,
)
from coach.constants import (
    POSITION_DISPLAY_NAMES,
    STARTING_POT_BB,
    STARTING_TO_CALL_BB,
    STREET_BOARD_COUNT,
    TABLE_SIZES,
    position_index,
    positions_for_table,
)
from coach.models import (
    ActionKind,
    Card,
    GameScenario,
    PlayerAction,
    Position,
    Street,
    format_bb,
)

logger = logging.getLogger(__name__)

NEXT_STREET = {
    Street.PREFLOP: Street.FLOP,
    Street.FLOP: Street.TURN,
    Street.TURN: Street.RIVER,
    Street.RIVER: Street.RIVER,
}


def _settle(
    pot: float,
    to_call: float,
    last_bet: Optional[float],
    action: PlayerAction,
) -> Tuple[float, float, Optional[float]]:
    """
    Apply one action's chips to (pot, to_call, last_bet).

    A raise adds only its own size; earlier callers are not topped up.
    """
    if action.kind == ActionKind.CALL:
        return pot + to_call, to_call, last_bet
    if action.kind in (ActionKind.BET, ActionKind.RAISE) and action.amount:
        return pot + action.amount, action.amount, action.amount
    return pot, to_call, last_bet


def _deal_board(
    used: Iterable[Card],
    count: int,
    rng: RandomSource,
) -> List[Card]:
    """Deal ``count`` board cards from a fresh shuffle of the unused cards."""
    deck = shuffle_deck(remove_cards(full_deck(), used), rng)
    dealt, _remaining = deal(deck, count)
    return dealt


def generate_scenario(
    street: Street = Street.PREFLOP,
    rng: Optional[RandomSource] = None,
    table_size: Optional[int] = None,
    hero_position: Optional[Position] = None,
) -> GameScenario:
    """
    Build a random decision spot for the hero.

    Table size and hero seat are drawn uniformly unless given. Preflop action
    is sampled for every seat ahead of the hero; for a postflop start the
    board is dealt and the current-street state is cleared.
    """
    source = resolve_rng(rng)

    if table_size is None:
        table_size = TABLE_SIZES[uniform_index(source, len(TABLE_SIZES))]
    positions = positions_for_table(table_size)
    table_size = len(positions)

    if hero_position is None:
        hero_position = positions[uniform_index(source, len(positions))]
    elif hero_position not in positions:
        hero_position = positions[0]
    hero_idx = position_index(hero_position, table_size)

    hero_cards, _rest = deal(shuffle_deck(full_deck(), source), 2)

    all_actions, street_actions = generate_action_history(
        positions[:hero_idx], street=Street.PREFLOP, rng=source
    )

    pot = STARTING_POT_BB
    to_call = STARTING_TO_CALL_BB
    last_bet: Optional[float] = None
    for action in street_actions:
        pot, to_call, last_bet = _settle(pot, to_call, last_bet, action)

    scenario = GameScenario(
        table_size=table_size,
        hero_position=hero_position,
        hero_cards=(hero_cards[0], hero_cards[1]),
        board_cards=(),
        current_street=Street.PREFLOP,
        all_actions=tuple(all_actions),
        current_street_actions=tuple(street_actions),
        pot_size=pot,
        to_call=to_call,
        last_bet_size=last_bet,
    )

    if street != Street.PREFLOP:
        board = _deal_board(hero_cards, STREET_BOARD_COUNT[street], source)
        scenario = replace(
            scenario,
            board_cards=tuple(board),
            current_street=street,
            current_street_actions=(),
            to_call=0.0,
            last_bet_size=None,
        )

    logger.debug(
        f"Generated {scenario.current_street.value} scenario: {table_size}-max, "
        f"hero {hero_position.value}, pot {format_bb(scenario.pot_size)}BB"
    )
    return scenario


def advance_to_next_street(
    scenario: GameScenario,
    rng: Optional[RandomSource] = None,
) -> GameScenario:
    """
    Move to the next street, appending only the newly dealt board cards.

    The river is terminal: advancing from it returns the scenario unchanged.
    """
    next_street = NEXT_STREET[scenario.current_street]
    if next_street == scenario.current_street:
        return scenario

    missing = STREET_BOARD_COUNT[next_street] - len(scenario.board_cards)
    board = list(scenario.board_cards)
    if missing > 0:
        used = list(scenario.hero_cards) + board
        board.extend(_deal_board(used, missing, resolve_rng(rng)))

    return replace(
        scenario,
        current_street=next_street,
        board_cards=tuple(board),
        current_street_actions=(),
        to_call=0.0,
        last_bet_size=None,
    )


def record_action(
    scenario: GameScenario,
    position: Position,
    kind: ActionKind,
    amount: Optional[float] = None,
) -> GameScenario:
    """Append one action on the current street and settle its chips."""
    if kind in (ActionKind.BET, ActionKind.RAISE):
        if amount is None or float(amount) <= 0:
            raise ValueError(f"{kind.value} requires a positive amount")
        amount = float(amount)
    else:
        amount = None

    action = PlayerAction(
        position=position,
        kind=kind,
        street=scenario.current_street,
        amount=amount,
    )
    pot, to_call, last_bet = _settle(
        scenario.pot_size, scenario.to_call, scenario.last_bet_size, action
    )
    if position == scenario.hero_position:
        to_call = 0.0

    street_actions = scenario.current_street_actions
    if kind != ActionKind.FOLD:
        street_actions = street_actions + (action,)

    return replace(
        scenario,
        all_actions=scenario.all_actions + (action,),
        current_street_actions=street_actions,
        pot_size=pot,
        to_call=to_call,
        last_bet_size=last_bet,
    )


def validate_scenario(scenario: GameScenario) -> GameScenario:
    """Reject scenarios from outside the engine that break the table or board invariants."""
    if scenario.table_size not in TABLE_SIZES:
        raise ValueError(f"table_size must be one of {TABLE_SIZES}")
    if position_index(scenario.hero_position, scenario.table_size) < 0:
        raise ValueError(
            f"hero_position {scenario.hero_position.value} is not a seat at a "
            f"{scenario.table_size}-handed table"
        )
    expected = STREET_BOARD_COUNT[scenario.current_street]
    if len(scenario.board_cards) != expected:
        raise ValueError(
            f"{scenario.current_street.value} requires {expected} board cards, "
            f"got {len(scenario.board_cards)}"
        )
    if any(a.kind == ActionKind.FOLD for a in scenario.current_street_actions):
        raise ValueError("current_street_actions must not contain folds")
    if scenario.pot_size < 0 or scenario.to_call < 0:
        raise ValueError("pot_size and to_call must be non-negative")
    return scenario


def describe_action(action: PlayerAction) -> str:
    who = action.position.value
    if action.kind == ActionKind.RAISE:
        return f"{who} raises to {format_bb(action.amount or 0)}BB"
    if action.kind == ActionKind.BET:
        return f"{who} bets {format_bb(action.amount or 0)}BB"
    return f"{who} {action.kind.value}s"


def generate_scenario_description(scenario: GameScenario) -> str:
    """Plain-text summary of the spot shown to the learner."""
    position_name = POSITION_DISPLAY_NAMES[scenario.hero_position]
    lines = [
        f"You are in {position_name} at a {scenario.table_size}-handed table "
        f"holding {format_cards(scenario.hero_cards)}."
    ]
    preflop = scenario.current_street == Street.PREFLOP
    if not preflop and scenario.board_cards:
        lines.append(
            f"The board on the {scenario.current_street.value} is "
            f"{format_cards(scenario.board_cards)}."
        )

    actions = scenario.current_street_actions
    if not actions:
        lines.append(
            "Everyone before you has folded." if preflop else "Everyone before you has checked."
        )
    else:
        described = ", ".join(describe_action(a) for a in actions)
        passive = position_index(scenario.hero_position, scenario.table_size) - len(actions)
        if passive > 0:
            verb = "folded" if preflop else "folded or checked"
            noun = "player" if passive == 1 else "players"
            lines.append(f"{passive} {noun} ahead of you {verb}; {described}.")
        else:
            lines.append(f"{described}.")

    if scenario.to_call > 0:
        lines.append(
            f"The pot is {format_bb(scenario.pot_size)}BB and it costs "
            f"{format_bb(scenario.to_call)}BB to call."
        )
    else:
        lines.append(f"The pot is {format_bb(scenario.pot_size)}BB.")
    lines.append("Action is on you. What do you do?")
    return " ".join(lines)
