"""Mixed-strategy baseline synthesis and learner-choice evaluation."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from coach.constants import (
    ALIGNMENT_THRESHOLD,
    BIG_BLIND_FACING_RAISE_DELTA,
    POSITION_STRATEGY_DELTAS,
    STRATEGY_BANDS,
    UNBET_FOLD_MINIMUM,
    UNBET_FOLD_RETENTION,
    UNBET_FOLD_TO_BET,
    UNBET_FOLD_TO_CHECK,
    position_bucket,
)
from coach.equity import round_half_up
from coach.models import DecisionOption, GameScenario, GTOStrategy, Position, Street


def base_weights(equity: float, has_raise: bool) -> Tuple[float, float, float]:
    for min_equity, unraised, raised in STRATEGY_BANDS:
        if equity >= min_equity:
            return raised if has_raise else unraised
    _min_equity, unraised, raised = STRATEGY_BANDS[-1]
    return raised if has_raise else unraised


def position_adjustment(position: Position, has_raise: bool) -> Tuple[float, float, float]:
    bucket = position_bucket(position)
    if bucket == "big_blind" and has_raise:
        return BIG_BLIND_FACING_RAISE_DELTA
    return POSITION_STRATEGY_DELTAS[bucket]


def normalize_percentages(weights: Sequence[float]) -> List[int]:
    """
    Scale non-negative weights to whole percentages summing to exactly 100.

    All but the last bucket are rounded; the last absorbs the remainder.
    """
    clean = [max(0.0, float(w)) for w in weights]
    total = sum(clean)
    if total <= 0:
        return [100] + [0] * (len(clean) - 1)
    out: List[int] = []
    for w in clean[:-1]:
        share = round_half_up(w / total * 100)
        out.append(min(share, 100 - sum(out)))
    out.append(100 - sum(out))
    return out


def generate_gto_strategy(scenario: GameScenario, equity: float) -> GTOStrategy:
    """Fold/call/raise mix (or fold/check/bet when checked to) for the hero."""
    has_raise = scenario.has_raise
    fold, call, raise_ = base_weights(equity, has_raise)
    d_fold, d_call, d_raise = position_adjustment(scenario.hero_position, has_raise)
    fold = max(0.0, fold + d_fold)
    call = max(0.0, call + d_call)
    raise_ = max(0.0, raise_ + d_raise)

    if scenario.current_street != Street.PREFLOP and scenario.to_call <= 0:
        unbet_fold = max(UNBET_FOLD_MINIMUM, fold * UNBET_FOLD_RETENTION)
        check = call + fold * UNBET_FOLD_TO_CHECK
        bet = raise_ + fold * UNBET_FOLD_TO_BET
        fold_pct, check_pct, bet_pct = normalize_percentages([unbet_fold, check, bet])
        return GTOStrategy(fold=fold_pct, call=0, raise_=0, check=check_pct, bet=bet_pct)

    fold_pct, call_pct, raise_pct = normalize_percentages([fold, call, raise_])
    return GTOStrategy(fold=fold_pct, call=call_pct, raise_=raise_pct)


def gto_recommendation(scenario: GameScenario, equity: float) -> str:
    """One-line headline advice by equity band."""
    if scenario.current_street != Street.PREFLOP and scenario.to_call <= 0:
        if equity >= 60:
            return "Bet for value"
        if equity >= 45:
            return "Check or bet small"
        return "Check"

    has_raise = scenario.has_raise
    if equity >= 75:
        return "3-bet or call" if has_raise else "Raise"
    if equity >= 60:
        return "Call" if has_raise else "Raise"
    if equity >= 45:
        return "Fold" if has_raise else "Call or raise small"
    if equity >= 30:
        return "Fold" if has_raise else "Call cautiously"
    return "Fold"


def format_strategy(strategy: GTOStrategy) -> str:
    labels = [
        ("Fold", strategy.fold),
        ("Check", strategy.check),
        ("Call", strategy.call),
        ("Bet", strategy.bet),
        ("Raise", strategy.raise_),
    ]
    return " / ".join(f"{name} {pct}%" for name, pct in labels if pct)


def evaluate_choice(choice: DecisionOption, strategy: GTOStrategy) -> bool:
    """A choice is aligned when the baseline plays it at least 20% of the time."""
    return strategy.percentage_for(choice.kind) >= ALIGNMENT_THRESHOLD
