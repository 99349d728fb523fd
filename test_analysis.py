#!/usr/bin/env python3
"""Tests for choice analysis and the remote feedback boundary."""

from __future__ import annotations

import json
import os
from http.client import IncompleteRead
from unittest.mock import MagicMock, patch
from urllib.error import URLError

from coach.analysis import generate_analysis
from coach.feedback import (
    FeedbackConfig,
    FeedbackUnavailable,
    GeminiFeedbackClient,
    build_analysis_prompt,
    load_feedback_config,
)
from coach.models import ActionKind, Card, DecisionOption, GameScenario, Position, Street
from coach.options import generate_decision_options


def _scenario(**overrides) -> GameScenario:
    fields = {
        "table_size": 6,
        "hero_position": Position.BTN,
        "hero_cards": (Card.parse("As"), Card.parse("Ah")),
    }
    fields.update(overrides)
    return GameScenario(**fields)


def _client() -> GeminiFeedbackClient:
    return GeminiFeedbackClient(
        FeedbackConfig(api_key="test-key", model="gemini-test", api_base="https://example.invalid/v1beta")
    )


def _response(payload, status: int = 200):
    resp = MagicMock()
    resp.status = status
    resp.read.return_value = json.dumps(payload).encode("utf-8")
    cm = MagicMock()
    cm.__enter__.return_value = resp
    cm.__exit__.return_value = False
    return cm


def _truncated_response():
    resp = MagicMock()
    resp.status = 200
    resp.read.side_effect = IncompleteRead(b'{"cand')
    cm = MagicMock()
    cm.__enter__.return_value = resp
    cm.__exit__.return_value = False
    return cm


class StubClient:
    def __init__(self, text: str = "", error: Exception = None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


def test_analysis_uses_remote_text_when_available():
    scenario = _scenario()
    raise_option = generate_decision_options(scenario)[2]
    client = StubClient(text="Great open from the button.")

    result = generate_analysis(scenario, raise_option, 85, client=client)

    assert result.feedback == "Great open from the button."
    assert result.remote_feedback
    assert result.is_correct
    assert result.verdict == "aligned"
    assert result.strategy.raise_ >= 70
    assert result.board_texture is None
    assert len(client.prompts) == 1
    assert "Raise to 3BB" in client.prompts[0]
    assert "85.0%" in client.prompts[0]


def test_remote_failure_only_changes_feedback():
    scenario = _scenario()
    fold_option = generate_decision_options(scenario)[0]

    local = generate_analysis(scenario, fold_option, 85)
    failed = generate_analysis(
        scenario, fold_option, 85, client=StubClient(error=FeedbackUnavailable("timed out"))
    )
    remote = generate_analysis(scenario, fold_option, 85, client=StubClient(text="Never fold aces."))

    assert failed == local
    assert not failed.remote_feedback
    assert not failed.is_correct
    assert "Avoid being too passive" in failed.feedback
    assert remote.equity == local.equity
    assert remote.strategy == local.strategy
    assert remote.is_correct == local.is_correct
    assert remote.feedback != local.feedback


def test_postflop_analysis_includes_board_summary():
    scenario = _scenario(
        board_cards=tuple(Card.parse(c) for c in ("Ad", "Kc", "2h")),
        current_street=Street.FLOP,
        to_call=0.0,
        pot_size=6.5,
    )
    bet = DecisionOption(kind=ActionKind.BET, label="Half-pot bet 3BB", description="", amount=3.0)
    result = generate_analysis(scenario, bet, 85)
    assert result.street == Street.FLOP
    assert result.hand_strength.type == "trips"
    assert result.board_texture.type in {"dry", "wet", "coordinated"}
    assert result.to_dict()["strategy"]["bet"] == result.strategy.bet


def test_prompt_mentions_spot_details():
    scenario = _scenario(to_call=1.0)
    prompt = build_analysis_prompt(scenario, generate_decision_options(scenario)[1], 72)
    assert "A♠A♥" in prompt
    assert "BTN" in prompt
    assert "To call: 1BB" in prompt
    assert "Call 1BB" in prompt
    assert "72.0%" in prompt


def test_gemini_client_posts_prompt_and_reads_text():
    payload = {"candidates": [{"content": {"parts": [{"text": "  Solid play.  "}]}}]}
    with patch("coach.feedback.urlopen", return_value=_response(payload)) as mock_urlopen:
        text = _client().generate("hello")

    assert text == "Solid play."
    req = mock_urlopen.call_args[0][0]
    assert req.full_url == "https://example.invalid/v1beta/models/gemini-test:generateContent"
    assert req.get_method() == "POST"
    assert req.get_header("X-goog-api-key") == "test-key"
    assert json.loads(req.data.decode("utf-8")) == {"contents": [{"parts": [{"text": "hello"}]}]}
    assert mock_urlopen.call_args[1]["timeout"] == 20


def test_gemini_client_failures_raise_feedback_unavailable():
    cases = [
        {"side_effect": URLError("boom")},
        {"side_effect": TimeoutError("slow")},
        {"return_value": _response({"candidates": []})},
        {"return_value": _response({"candidates": [{"content": {"parts": [{"text": "   "}]}}]})},
        {"return_value": _response({"error": "quota"}, status=429)},
        {"return_value": _truncated_response()},
    ]
    for kwargs in cases:
        with patch("coach.feedback.urlopen", **kwargs):
            try:
                _client().generate("hello")
            except FeedbackUnavailable:
                pass
            else:
                raise AssertionError(f"expected FeedbackUnavailable for {kwargs}")


def test_unconfigured_client_never_calls_network():
    client = GeminiFeedbackClient(FeedbackConfig(api_key=""))
    assert not client.configured
    with patch("coach.feedback.urlopen") as mock_urlopen:
        try:
            client.generate("hello")
        except FeedbackUnavailable:
            pass
        else:
            raise AssertionError("expected FeedbackUnavailable")
    mock_urlopen.assert_not_called()


def test_analysis_falls_back_when_network_fails():
    scenario = _scenario()
    raise_option = generate_decision_options(scenario)[2]
    with patch("coach.feedback.urlopen", side_effect=URLError("offline")):
        result = generate_analysis(scenario, raise_option, 85, client=_client())
    assert not result.remote_feedback
    assert result.is_correct
    assert "fits the baseline strategy" in result.feedback


def test_feedback_config_from_env():
    env = {
        "COACH_GEMINI_API_KEY": " secret ",
        "COACH_GEMINI_MODEL": "gemini-2.5-flash",
        "COACH_GEMINI_API_BASE": "https://proxy.local/v1/",
        "COACH_FEEDBACK_TIMEOUT_SECONDS": "0",
    }
    with patch.dict(os.environ, env, clear=False):
        config = load_feedback_config()
    assert config.api_key == "secret"
    assert config.model == "gemini-2.5-flash"
    assert config.api_base == "https://proxy.local/v1"
    assert config.timeout_seconds == 1

    with patch.dict(os.environ, {"COACH_FEEDBACK_TIMEOUT_SECONDS": "soon"}, clear=False):
        assert load_feedback_config().timeout_seconds == 20


def test_analysis_falls_back_on_truncated_response():
    scenario = _scenario()
    raise_option = generate_decision_options(scenario)[2]
    local = generate_analysis(scenario, raise_option, 85)
    with patch("coach.feedback.urlopen", return_value=_truncated_response()):
        result = generate_analysis(scenario, raise_option, 85, client=_client())
    assert result == local
    assert not result.remote_feedback
