"""Natural-language coaching feedback: prompt, remote client, and local fallback."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from http.client import HTTPException
from typing import Any, Optional
from urllib.error import URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from coach.cards import format_cards
from coach.models import DecisionOption, GameScenario, GTOStrategy, format_bb
from coach.scenario import describe_action, generate_scenario_description
from coach.strategy import format_strategy

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.5-pro"
DEFAULT_GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEOUT_SECONDS = 20


class FeedbackUnavailable(RuntimeError):
    """Raised when the remote feedback service cannot produce text."""


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return int(default)
    try:
        return int(str(raw).strip())
    except ValueError:
        return int(default)


@dataclass(frozen=True)
class FeedbackConfig:
    api_key: str
    model: str = DEFAULT_GEMINI_MODEL
    api_base: str = DEFAULT_GEMINI_API_BASE
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS


def load_feedback_config() -> FeedbackConfig:
    return FeedbackConfig(
        api_key=str(os.getenv("COACH_GEMINI_API_KEY", "")).strip(),
        model=str(os.getenv("COACH_GEMINI_MODEL", DEFAULT_GEMINI_MODEL)).strip() or DEFAULT_GEMINI_MODEL,
        api_base=(
            str(os.getenv("COACH_GEMINI_API_BASE", DEFAULT_GEMINI_API_BASE)).strip().rstrip("/")
            or DEFAULT_GEMINI_API_BASE
        ),
        timeout_seconds=max(1, _env_int("COACH_FEEDBACK_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)),
    )


class GeminiFeedbackClient:
    """Gemini ``generateContent`` caller for coaching commentary."""

    def __init__(self, config: FeedbackConfig):
        self.config = config

    @property
    def configured(self) -> bool:
        return bool(self.config.api_key and self.config.model)

    @property
    def url(self) -> str:
        model = quote(self.config.model, safe="-._")
        return f"{self.config.api_base}/models/{model}:generateContent"

    @staticmethod
    def _extract_text(payload: Any) -> str:
        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise FeedbackUnavailable("Feedback response is missing candidate text") from exc
        text = str(text or "").strip()
        if not text:
            raise FeedbackUnavailable("Feedback response text is empty")
        return text

    def generate(self, prompt: str) -> str:
        if not self.configured:
            raise FeedbackUnavailable("Feedback service is not configured")
        body = json.dumps({"contents": [{"parts": [{"text": prompt}]}]}).encode("utf-8")
        req = Request(
            url=self.url,
            data=body,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self.config.api_key,
            },
        )
        logger.debug(f"Requesting feedback from model {self.config.model}")
        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as resp:
                status = int(getattr(resp, "status", 200))
                if status >= 400:
                    raise FeedbackUnavailable(f"Feedback service rejected request with status {status}")
                raw = resp.read()
        except (URLError, OSError, HTTPException) as exc:
            raise FeedbackUnavailable(f"Feedback service request failed: {exc}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise FeedbackUnavailable("Feedback service returned invalid JSON") from exc
        return self._extract_text(payload)


def client_from_env() -> Optional[GeminiFeedbackClient]:
    """Client built from environment, or None when no API key is set."""
    client = GeminiFeedbackClient(load_feedback_config())
    return client if client.configured else None


def build_analysis_prompt(scenario: GameScenario, choice: DecisionOption, equity: float) -> str:
    prior = ", ".join(describe_action(a) for a in scenario.current_street_actions)
    if not prior:
        prior = "everyone folded" if scenario.current_street.value == "preflop" else "no bets yet"
    board = format_cards(scenario.board_cards) if scenario.board_cards else "none"
    return (
        "You are a world-class No-Limit Hold'em coach who knows game-theory-optimal "
        "strategy and explains it in plain language to beginners. Be encouraging, "
        "but point out mistakes directly.\n\n"
        "Spot:\n"
        f"- {generate_scenario_description(scenario)}\n"
        f"- Table size: {scenario.table_size}-handed\n"
        f"- Hero position: {scenario.hero_position.value}\n"
        f"- Hero cards: {format_cards(scenario.hero_cards)}\n"
        f"- Street: {scenario.current_street.value}\n"
        f"- Board: {board}\n"
        f"- Prior actions: {prior}\n"
        f"- Pot: {format_bb(scenario.pot_size)}BB\n"
        f"- To call: {format_bb(scenario.to_call)}BB\n\n"
        f"Player's choice: {choice.label} ({choice.description})\n"
        f"Estimated equity against the opponent range: {equity:.1f}%\n\n"
        "Write the feedback as short paragraphs:\n"
        "1. Judge the choice up front (correct, incorrect, or debatable).\n"
        "2. Use the equity figure to support the judgement.\n"
        "3. Explain the reasoning and consequences of the choice.\n"
        "4. State the GTO-preferred play and why.\n"
        "5. Close with one concise improvement tip.\n"
        "Keep it between 150 and 250 words."
    )


def fallback_feedback(
    choice: DecisionOption,
    equity: float,
    strategy: GTOStrategy,
    recommendation: str,
    is_correct: bool,
) -> str:
    """Deterministic templated commentary used when the remote service is unavailable."""
    mix = format_strategy(strategy)
    if is_correct:
        return (
            f'Your choice "{choice.label}" fits the baseline strategy.\n\n'
            f"Estimated equity is {equity:.1f}%, and the baseline mix here is {mix}.\n\n"
            "Keep basing decisions on position, hand strength and the action in front of you."
        )

    hint = ""
    if choice.kind.value == "fold" and equity > 50:
        hint = "Avoid being too passive with hands that hold this much equity. "
    elif choice.kind.value in ("raise", "bet") and equity < 40:
        hint = "Avoid over-aggression with hands this weak. "
    return (
        f'Your choice "{choice.label}" is rarely part of the baseline strategy.\n\n'
        f"With {equity:.1f}% estimated equity, a better option is: {recommendation}. "
        f"The baseline mix here is {mix}.\n\n"
        f"{hint}Weigh position, equity and opponent action before committing chips. "
        "Every mistake is a chance to learn."
    )
