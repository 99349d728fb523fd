"""Learner-choice analysis: baseline strategy, verdict and coaching text."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from coach.cards import analyze_board_texture, analyze_hand_strength
from coach.feedback import FeedbackUnavailable, build_analysis_prompt, fallback_feedback
from coach.models import AnalysisResult, DecisionOption, GameScenario, Street
from coach.strategy import evaluate_choice, generate_gto_strategy, gto_recommendation

logger = logging.getLogger(__name__)


class FeedbackClient(Protocol):
    def generate(self, prompt: str) -> str:
        ...


def generate_analysis(
    scenario: GameScenario,
    choice: DecisionOption,
    equity: float,
    client: Optional[FeedbackClient] = None,
) -> AnalysisResult:
    """
    Analyze the learner's choice.

    Equity, strategy, recommendation and verdict are computed locally and
    never depend on the remote service. The client only supplies commentary;
    when it is missing or fails the templated fallback text is used instead.
    """
    strategy = generate_gto_strategy(scenario, equity)
    recommendation = gto_recommendation(scenario, equity)
    is_correct = evaluate_choice(choice, strategy)

    board_texture = None
    hand_strength = None
    if scenario.current_street != Street.PREFLOP and len(scenario.board_cards) >= 3:
        board_texture = analyze_board_texture(scenario.board_cards)
        hand_strength = analyze_hand_strength(scenario.hero_cards, scenario.board_cards)

    feedback: Optional[str] = None
    if client is not None:
        try:
            feedback = client.generate(build_analysis_prompt(scenario, choice, equity))
        except FeedbackUnavailable as exc:
            logger.warning(f"Remote feedback unavailable, using fallback: {exc}")

    remote = feedback is not None
    if feedback is None:
        feedback = fallback_feedback(choice, equity, strategy, recommendation, is_correct)

    return AnalysisResult(
        equity=equity,
        recommendation=recommendation,
        strategy=strategy,
        choice=choice,
        feedback=feedback,
        is_correct=is_correct,
        street=scenario.current_street,
        board_texture=board_texture,
        hand_strength=hand_strength,
        remote_feedback=remote,
    )
