#!/usr/bin/env python3
"""Tests for scenario generation, options, equity and strategy synthesis."""

from __future__ import annotations

import random
from collections import Counter

from coach.action_history import adjusted_tendency, generate_action_history
from coach.cards import (
    analyze_board_texture,
    analyze_hand_strength,
    deal,
    full_deck,
    shuffle_deck,
)
from coach.constants import position_index, positions_for_table
from coach.equity import calculate_equity
from coach.models import (
    ActionKind,
    Card,
    DecisionOption,
    GameScenario,
    PlayerAction,
    Position,
    Street,
)
from coach.options import generate_decision_options
from coach.scenario import (
    advance_to_next_street,
    generate_scenario,
    generate_scenario_description,
    record_action,
    validate_scenario,
)
from coach.strategy import evaluate_choice, generate_gto_strategy, gto_recommendation


class FixedRandom:
    """Random source that always yields the same draw."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


def _cards(text: str):
    return tuple(Card.parse(text[i : i + 2]) for i in range(0, len(text), 2))


def _scenario(**overrides) -> GameScenario:
    fields = {
        "table_size": 6,
        "hero_position": Position.BTN,
        "hero_cards": _cards("AsAh"),
    }
    fields.update(overrides)
    return GameScenario(**fields)


def _option(kind: ActionKind) -> DecisionOption:
    return DecisionOption(kind=kind, label=kind.value.title(), description="")


def test_position_sets_by_table_size():
    for size in (6, 7, 8):
        positions = positions_for_table(size)
        assert len(positions) == size
        assert positions[0] == Position.UTG
        assert positions[-1] == Position.BB
        assert len(set(positions)) == size

    assert positions_for_table(9) == positions_for_table(6)
    assert positions_for_table(7)[1] == Position.UTG1
    assert position_index(Position.BTN, 6) == 3
    assert position_index(Position.UTG2, 6) == -1


def test_shuffle_preserves_deck_and_varies():
    deck = full_deck()
    assert len(deck) == 52
    assert len(set(deck)) == 52

    first = shuffle_deck(deck, random.Random(1))
    second = shuffle_deck(deck, random.Random(2))
    assert Counter(first) == Counter(deck)
    assert Counter(second) == Counter(deck)
    assert first != second
    assert deck == full_deck()

    dealt, remaining = deal(first, 2)
    assert len(dealt) == 2
    assert len(remaining) == 50
    assert not set(dealt) & set(remaining)


def test_card_text_forms():
    card = Card.parse("Td")
    assert str(card) == "Td"
    assert card.pretty == "T♦"
    try:
        Card.parse("1x")
    except ValueError:
        pass
    else:
        raise AssertionError("expected ValueError for an invalid card")


def test_action_history_all_raises_with_high_draws():
    positions = positions_for_table(6)[:4]
    all_actions, street_actions = generate_action_history(positions, rng=FixedRandom(0.99))
    assert [a.kind for a in all_actions] == [ActionKind.RAISE] * 4
    assert all(a.amount == 4.0 for a in all_actions)
    assert street_actions == all_actions


def test_action_history_drops_folds_from_street_actions():
    positions = positions_for_table(8)[:5]
    all_actions, street_actions = generate_action_history(positions, rng=FixedRandom(0.0))
    assert len(all_actions) == 5
    assert all(a.kind == ActionKind.FOLD for a in all_actions)
    assert street_actions == []


def test_tendency_shifts_toward_folding_after_raise():
    calm = adjusted_tendency(Position.CO, has_raise=False)
    raised = adjusted_tendency(Position.CO, has_raise=True)
    assert raised.fold_rate > calm.fold_rate
    assert raised.raise_rate < calm.raise_rate
    assert abs(raised.fold_rate + raised.call_rate + raised.raise_rate - 1.0) < 1e-9


def test_generate_scenario_with_low_draws():
    scenario = generate_scenario(rng=FixedRandom(0.0))
    assert scenario.table_size == 6
    assert scenario.hero_position == Position.UTG
    assert scenario.all_actions == ()
    assert scenario.pot_size == 1.5
    assert scenario.to_call == 1.0
    assert "Everyone before you has folded." in generate_scenario_description(scenario)


def test_generate_scenario_with_high_draws_raises_ahead():
    scenario = generate_scenario(rng=FixedRandom(0.99))
    assert scenario.table_size == 8
    assert scenario.hero_position == Position.BB
    assert len(scenario.current_street_actions) == 7
    assert scenario.has_raise
    assert scenario.pot_size == 1.5 + 7 * 4.0
    assert scenario.to_call == 4.0
    assert scenario.last_bet_size == 4.0


def test_generate_scenario_replays_with_same_seed():
    first = generate_scenario(Street.TURN, rng=random.Random(42))
    second = generate_scenario(Street.TURN, rng=random.Random(42))
    assert first == second


def test_generated_scenarios_keep_cards_distinct():
    rng = random.Random(7)
    expected = {Street.PREFLOP: 0, Street.FLOP: 3, Street.TURN: 4, Street.RIVER: 5}
    for street, board_count in expected.items():
        for _ in range(25):
            scenario = generate_scenario(street, rng=rng)
            assert scenario.hero_cards[0] != scenario.hero_cards[1]
            assert len(scenario.board_cards) == board_count
            assert len(set(scenario.board_cards)) == board_count
            assert not set(scenario.board_cards) & set(scenario.hero_cards)
            assert scenario.current_street == street
            assert position_index(scenario.hero_position, scenario.table_size) >= 0
            if street != Street.PREFLOP:
                assert scenario.current_street_actions == ()
                assert scenario.to_call == 0


def test_generate_scenario_honours_table_and_seat():
    scenario = generate_scenario(rng=random.Random(3), table_size=7, hero_position=Position.CO)
    assert scenario.table_size == 7
    assert scenario.hero_position == Position.CO
    assert len(scenario.all_actions) == 3

    fallback = generate_scenario(rng=random.Random(3), table_size=6, hero_position=Position.UTG2)
    assert fallback.hero_position == Position.UTG


def test_advance_only_appends_board_cards():
    rng = random.Random(11)
    preflop = generate_scenario(rng=rng)
    flop = advance_to_next_street(preflop, rng=rng)
    turn = advance_to_next_street(flop, rng=rng)
    river = advance_to_next_street(turn, rng=rng)

    assert [s.current_street for s in (flop, turn, river)] == [Street.FLOP, Street.TURN, Street.RIVER]
    assert len(flop.board_cards) == 3
    assert turn.board_cards[:3] == flop.board_cards
    assert river.board_cards[:4] == turn.board_cards
    assert len(set(river.board_cards)) == 5
    assert not set(river.board_cards) & set(river.hero_cards)
    assert river.all_actions == preflop.all_actions
    assert river.current_street_actions == ()
    assert river.to_call == 0
    assert river.last_bet_size is None
    assert advance_to_next_street(river, rng=rng) is river


def test_record_action_updates_pot_and_histories():
    flop = advance_to_next_street(generate_scenario(rng=random.Random(5)), rng=random.Random(6))
    villain = Position.UTG if flop.hero_position != Position.UTG else Position.BB

    bet = record_action(flop, villain, ActionKind.BET, 4)
    assert bet.to_call == 4.0
    assert bet.last_bet_size == 4.0
    assert bet.pot_size == flop.pot_size + 4.0
    assert bet.current_street_actions[-1].street == Street.FLOP

    folded = record_action(bet, Position.SB if villain != Position.SB else Position.CO, ActionKind.FOLD)
    assert folded.current_street_actions == bet.current_street_actions
    assert len(folded.all_actions) == len(bet.all_actions) + 1

    called = record_action(bet, flop.hero_position, ActionKind.CALL)
    assert called.pot_size == bet.pot_size + 4.0
    assert called.to_call == 0

    try:
        record_action(flop, villain, ActionKind.RAISE)
    except ValueError:
        pass
    else:
        raise AssertionError("expected ValueError for a raise without an amount")


def test_preflop_options_unraised_and_facing_raise():
    unraised = generate_decision_options(_scenario(to_call=1.0))
    assert [(o.kind, o.amount) for o in unraised] == [
        (ActionKind.FOLD, None),
        (ActionKind.CALL, 1.0),
        (ActionKind.RAISE, 3.0),
    ]
    assert unraised[2].label == "Raise to 3BB"

    facing = generate_decision_options(_scenario(to_call=5.0))
    assert [(o.kind, o.amount) for o in facing] == [
        (ActionKind.FOLD, None),
        (ActionKind.CALL, 5.0),
        (ActionKind.RAISE, 13.0),
    ]
    assert facing[2].label == "3-Bet to 13BB"


def test_postflop_options():
    board = _cards("Kd7c2h")
    checked = generate_decision_options(
        _scenario(board_cards=board, current_street=Street.FLOP, pot_size=10.0, to_call=0.0)
    )
    assert [o.kind for o in checked] == [ActionKind.FOLD, ActionKind.CHECK] + [ActionKind.BET] * 4
    assert [o.amount for o in checked[2:]] == [2.0, 5.0, 7.0, 10.0]

    tiny_pot = generate_decision_options(
        _scenario(board_cards=board, current_street=Street.FLOP, pot_size=2.0, to_call=0.0)
    )
    assert tiny_pot[2].amount == 1.0

    facing = generate_decision_options(
        _scenario(board_cards=board, current_street=Street.FLOP, pot_size=10.0, to_call=4.0)
    )
    assert [o.kind for o in facing] == [ActionKind.FOLD, ActionKind.CALL] + [ActionKind.RAISE] * 4
    assert [o.amount for o in facing[1:]] == [4.0, 10.0, 12.0, 16.0, 22.0]


def test_equity_stays_in_bounds():
    deck = full_deck()
    openers = [
        (),
        (PlayerAction(Position.UTG, ActionKind.RAISE, amount=3.0),),
        (PlayerAction(Position.BTN, ActionKind.CALL),),
    ]
    postflop = [
        (PlayerAction(Position.CO, ActionKind.BET, Street.FLOP, 3.0),),
        (PlayerAction(Position.BB, ActionKind.CHECK, Street.FLOP),),
    ]
    board = _cards("Qd9c4h")
    for i in range(0, 52, 3):
        for j in range(1, 52, 5):
            if deck[i] == deck[j] or deck[i] in board or deck[j] in board:
                continue
            hero = (deck[i], deck[j])
            for actions in openers:
                value = calculate_equity(hero, actions)
                assert isinstance(value, int)
                assert 15 <= value <= 85
            for actions in openers[:1] + postflop:
                value = calculate_equity(hero, actions, board, Street.FLOP)
                assert 15 <= value <= 85


def test_equity_reference_values():
    assert calculate_equity(_cards("AsAh"), ()) == 85
    assert calculate_equity(_cards("7c2d"), (PlayerAction(Position.UTG, ActionKind.RAISE, amount=3.0),)) == 15
    # pair of jacks vs a cutoff raise: 50 + (85 - 68) * 0.8
    assert calculate_equity(_cards("JsJd"), (PlayerAction(Position.CO, ActionKind.RAISE, amount=3.0),)) == 64


def test_strategy_always_sums_to_100():
    raise_ahead = (PlayerAction(Position.UTG, ActionKind.RAISE, amount=3.0),)
    board = _cards("Kd7c2h")
    for position in Position:
        for street in (Street.PREFLOP, Street.FLOP, Street.RIVER):
            for actions in ((), raise_ahead):
                for to_call in (0.0, 1.0, 4.0):
                    scenario = _scenario(
                        table_size=8,
                        hero_position=position,
                        current_street=street,
                        board_cards=() if street == Street.PREFLOP else board,
                        current_street_actions=actions,
                        to_call=to_call,
                    )
                    for equity in range(0, 101):
                        strategy = generate_gto_strategy(scenario, equity)
                        assert strategy.total() == 100
                        assert min(strategy.to_dict().values()) >= 0


def test_strong_late_position_hand_prefers_raise():
    for position in (Position.BTN, Position.CO, Position.BB):
        scenario = _scenario(hero_position=position)
        strategy = generate_gto_strategy(scenario, 85)
        assert strategy.raise_ >= 70
        assert strategy.fold <= 5
        assert strategy.check is None
        assert evaluate_choice(_option(ActionKind.RAISE), strategy)
        assert not evaluate_choice(_option(ActionKind.FOLD), strategy)

    assert generate_gto_strategy(_scenario(), 85).to_dict() == {"fold": 0, "call": 5, "raise": 95}
    assert gto_recommendation(_scenario(), 85) == "Raise"


def test_checked_to_postflop_strategy_uses_check_and_bet():
    scenario = _scenario(
        board_cards=_cards("Kd7c2h"),
        current_street=Street.FLOP,
        to_call=0.0,
    )
    strategy = generate_gto_strategy(scenario, 85)
    assert strategy.call == 0
    assert strategy.raise_ == 0
    assert (strategy.fold, strategy.check, strategy.bet) == (5, 5, 90)
    assert evaluate_choice(_option(ActionKind.BET), strategy)
    assert not evaluate_choice(_option(ActionKind.CHECK), strategy)
    assert not evaluate_choice(_option(ActionKind.RAISE), strategy)
    assert gto_recommendation(scenario, 85) == "Bet for value"


def test_recommendation_bands_facing_raise():
    scenario = _scenario(
        current_street_actions=(PlayerAction(Position.UTG, ActionKind.RAISE, amount=3.0),),
        to_call=3.0,
    )
    assert gto_recommendation(scenario, 80) == "3-bet or call"
    assert gto_recommendation(scenario, 62) == "Call"
    assert gto_recommendation(scenario, 50) == "Fold"
    assert gto_recommendation(_scenario(), 50) == "Call or raise small"
    assert gto_recommendation(_scenario(), 10) == "Fold"


def test_board_texture_and_hand_strength():
    wet = analyze_board_texture(_cards("AsKsQs"))
    assert wet.type == "coordinated"
    assert wet.flush_draw and wet.straight_draw

    dry = analyze_board_texture(_cards("2c7dQh"))
    assert dry.type == "dry"
    assert dry.pairs == 0
    assert dry.high_card.symbol == "Q"

    trips = analyze_hand_strength(_cards("AsAh"), _cards("AdKc2h"))
    assert trips.type == "trips"
    assert trips.rank == 4

    pair = analyze_hand_strength(_cards("9s9h"), _cards("AdKc"))
    assert pair.type == "pair"


def test_scenario_dict_round_trip_validates_cards():
    scenario = generate_scenario(Street.FLOP, rng=random.Random(9))
    assert GameScenario.from_dict(scenario.to_dict()) == scenario

    payload = scenario.to_dict()
    payload["board_cards"] = [payload["hero_cards"][0], "2c", "3c"]
    try:
        GameScenario.from_dict(payload)
    except ValueError:
        pass
    else:
        raise AssertionError("expected ValueError when the board repeats a hero card")


def test_validate_scenario_rejects_broken_state():
    generated = generate_scenario(Street.TURN, rng=random.Random(12))
    assert validate_scenario(generated) is generated

    broken = [
        _scenario(current_street=Street.RIVER),
        _scenario(board_cards=_cards("Kd7c2h")),
        _scenario(table_size=6, hero_position=Position.UTG1),
        _scenario(table_size=9, hero_position=Position.UTG),
        _scenario(current_street_actions=(PlayerAction(Position.UTG, ActionKind.FOLD),)),
    ]
    for scenario in broken:
        try:
            validate_scenario(scenario)
        except ValueError:
            pass
        else:
            raise AssertionError(f"expected ValueError for {scenario}")


def test_hand_strength_categories():
    cases = [
        ("AsKd", "Qh7c2d", "high_card"),
        ("AsKd", "AhKc2d", "two_pair"),
        ("5s4d", "3h2cAd", "straight"),
        ("9s8d", "7h6c5dKs2h", "straight"),
        ("AhJh", "9h5h2hKs", "flush"),
        ("7s7d", "7h2c2d", "full_house"),
        ("7s7d", "7h7c2d", "quads"),
        ("9h8h", "7h6h5hAsAd", "straight_flush"),
    ]
    for hero, board, expected in cases:
        strength = analyze_hand_strength(_cards(hero), _cards(board))
        assert strength.type == expected, (hero, board)

    wheel = analyze_hand_strength(_cards("5s4d"), _cards("3h2cAd"))
    assert wheel.kickers[0].symbol == "5"
    full = analyze_hand_strength(_cards("7s7d"), _cards("7h2c2dKs"))
    assert [k.symbol for k in full.kickers] == ["7", "2"]
