"""
Core data models for the preflop coach.

This module defines the value types shared by every engine component:
cards, positions, streets, recorded actions, the scenario itself, the
learner's decision options, and the analysis produced for a decision.
Everything here is immutable; street transitions and recorded actions
produce new scenario values instead of mutating existing ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple


class Rank(IntEnum):
    """Card ranks, valued 2 (deuce) through 14 (ace)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def symbol(self) -> str:
        return RANK_SYMBOLS[self.value - 2]

    @classmethod
    def from_symbol(cls, symbol: str) -> "Rank":
        idx = RANK_SYMBOLS.find(str(symbol).upper())
        if idx < 0 or len(str(symbol)) != 1:
            raise ValueError(f"Unknown rank: {symbol!r}")
        return cls(idx + 2)


class Suit(Enum):
    """Card suits in deck-construction order."""
    CLUBS = "c"
    DIAMONDS = "d"
    HEARTS = "h"
    SPADES = "s"

    @property
    def glyph(self) -> str:
        return SUIT_GLYPHS[self]


RANK_SYMBOLS = "23456789TJQKA"
SUIT_GLYPHS = {
    Suit.CLUBS: "♣",
    Suit.DIAMONDS: "♦",
    Suit.HEARTS: "♥",
    Suit.SPADES: "♠",
}


class Street(Enum):
    """Betting rounds."""
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"


class Position(Enum):
    """Seats at a 6-8 handed table, named by preflop action order."""
    UTG = "UTG"
    UTG1 = "UTG+1"
    UTG2 = "UTG+2"
    MP = "MP"
    CO = "CO"
    BTN = "BTN"
    SB = "SB"
    BB = "BB"


class ActionKind(Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"


def parse_street(value: Any) -> Street:
    if isinstance(value, Street):
        return value
    try:
        return Street(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"street must be one of {[s.value for s in Street]}") from None


def parse_position(value: Any) -> Position:
    if isinstance(value, Position):
        return value
    try:
        return Position(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown position: {value!r}") from None


def parse_action_kind(value: Any) -> ActionKind:
    if isinstance(value, ActionKind):
        return value
    try:
        return ActionKind(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"action must be one of {[a.value for a in ActionKind]}") from None


def format_bb(amount: float) -> str:
    """Render a big-blind amount without trailing zeros, e.g. 1.5 or 3."""
    return f"{float(amount):g}"


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


@dataclass(frozen=True)
class Card:
    """A single playing card; text form is rank symbol + suit letter, e.g. "As"."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank.symbol}{self.suit.value}"

    @property
    def pretty(self) -> str:
        return f"{self.rank.symbol}{self.suit.glyph}"

    @classmethod
    def parse(cls, text: str) -> "Card":
        raw = str(text or "").strip()
        if len(raw) != 2:
            raise ValueError(f"Invalid card: {text!r}")
        try:
            suit = Suit(raw[1].lower())
        except ValueError:
            raise ValueError(f"Invalid card suit: {text!r}") from None
        return cls(rank=Rank.from_symbol(raw[0]), suit=suit)


@dataclass(frozen=True)
class PlayerAction:
    """
    One recorded action.

    Attributes:
        position: Seat that acted
        kind: fold / check / call / bet / raise
        street: Street the action happened on
        amount: Bet or raise size in big blinds (None for fold/check/call)
    """
    position: Position
    kind: ActionKind
    street: Street = Street.PREFLOP
    amount: Optional[float] = None

    def to_dict(self) -> dict:
        out = {
            "position": self.position.value,
            "action": self.kind.value,
            "street": self.street.value,
        }
        if self.amount is not None:
            out["amount"] = self.amount
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "PlayerAction":
        if not isinstance(data, dict):
            raise ValueError("Each action must be an object")
        return cls(
            position=parse_position(data.get("position")),
            kind=parse_action_kind(data.get("action")),
            street=parse_street(data.get("street", Street.PREFLOP.value)),
            amount=_optional_float(data.get("amount")),
        )


@dataclass(frozen=True)
class GameScenario:
    """
    Single source of truth for a hand in progress.

    Attributes:
        table_size: Number of seats (6-8)
        hero_position: Learner's seat
        hero_cards: Learner's two hole cards
        board_cards: Community cards dealt so far (0/3/4/5)
        current_street: Street the learner is deciding on
        all_actions: Every action on every street, folds included
        current_street_actions: Voluntary (non-fold) actions on the current street
        pot_size: Pot in big blinds
        to_call: Amount the learner owes to continue, in big blinds
        last_bet_size: Size of the last bet/raise on the current street
    """
    table_size: int
    hero_position: Position
    hero_cards: Tuple[Card, Card]
    board_cards: Tuple[Card, ...] = ()
    current_street: Street = Street.PREFLOP
    all_actions: Tuple[PlayerAction, ...] = ()
    current_street_actions: Tuple[PlayerAction, ...] = ()
    pot_size: float = 1.5
    to_call: float = 1.0
    last_bet_size: Optional[float] = None

    @property
    def has_raise(self) -> bool:
        return any(a.kind == ActionKind.RAISE for a in self.current_street_actions)

    def to_dict(self) -> dict:
        return {
            "table_size": self.table_size,
            "hero_position": self.hero_position.value,
            "hero_cards": [str(c) for c in self.hero_cards],
            "board_cards": [str(c) for c in self.board_cards],
            "current_street": self.current_street.value,
            "all_actions": [a.to_dict() for a in self.all_actions],
            "current_street_actions": [a.to_dict() for a in self.current_street_actions],
            "pot_size": round(self.pot_size, 2),
            "to_call": round(self.to_call, 2),
            "last_bet_size": self.last_bet_size,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameScenario":
        if not isinstance(data, dict):
            raise ValueError("scenario must be an object")
        hero_cards = tuple(Card.parse(c) for c in data.get("hero_cards") or [])
        if len(hero_cards) != 2 or hero_cards[0] == hero_cards[1]:
            raise ValueError("hero_cards must be two distinct cards")
        board_cards = tuple(Card.parse(c) for c in data.get("board_cards") or [])
        if len(set(board_cards)) != len(board_cards) or set(board_cards) & set(hero_cards):
            raise ValueError("board_cards must be distinct and exclude hero_cards")
        return cls(
            table_size=int(data.get("table_size", 6)),
            hero_position=parse_position(data.get("hero_position")),
            hero_cards=(hero_cards[0], hero_cards[1]),
            board_cards=board_cards,
            current_street=parse_street(data.get("current_street", Street.PREFLOP.value)),
            all_actions=tuple(PlayerAction.from_dict(a) for a in data.get("all_actions") or []),
            current_street_actions=tuple(
                PlayerAction.from_dict(a) for a in data.get("current_street_actions") or []
            ),
            pot_size=float(data.get("pot_size", 1.5)),
            to_call=float(data.get("to_call", 0.0)),
            last_bet_size=_optional_float(data.get("last_bet_size")),
        )


@dataclass(frozen=True)
class DecisionOption:
    """One button in the learner's decision menu."""

    kind: ActionKind
    label: str
    description: str
    amount: Optional[float] = None

    def to_dict(self) -> dict:
        out = {
            "action": self.kind.value,
            "label": self.label,
            "description": self.description,
        }
        if self.amount is not None:
            out["amount"] = self.amount
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "DecisionOption":
        if not isinstance(data, dict):
            raise ValueError("choice must be an object")
        kind = parse_action_kind(data.get("action"))
        return cls(
            kind=kind,
            label=str(data.get("label") or kind.value.title()),
            description=str(data.get("description") or ""),
            amount=_optional_float(data.get("amount")),
        )


@dataclass(frozen=True)
class GTOStrategy:
    """
    Mixed-strategy frequencies in whole percentages.

    ``check`` and ``bet`` are only set for a postflop spot where nothing is owed;
    every present value sums to exactly 100.
    """
    fold: int
    call: int
    raise_: int
    check: Optional[int] = None
    bet: Optional[int] = None

    def percentage_for(self, kind: ActionKind) -> int:
        value = {
            ActionKind.FOLD: self.fold,
            ActionKind.CHECK: self.check,
            ActionKind.CALL: self.call,
            ActionKind.BET: self.bet,
            ActionKind.RAISE: self.raise_,
        }[kind]
        return int(value or 0)

    def total(self) -> int:
        return self.fold + self.call + self.raise_ + (self.check or 0) + (self.bet or 0)

    def to_dict(self) -> dict:
        out: Dict[str, int] = {"fold": self.fold}
        if self.check is not None:
            out["check"] = self.check
        out["call"] = self.call
        if self.bet is not None:
            out["bet"] = self.bet
        out["raise"] = self.raise_
        return out


@dataclass(frozen=True)
class BoardTexture:
    type: str
    pairs: int
    flush_draw: bool
    straight_draw: bool
    high_card: Rank

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "pairs": self.pairs,
            "flush_draw": self.flush_draw,
            "straight_draw": self.straight_draw,
            "high_card": self.high_card.symbol,
        }


@dataclass(frozen=True)
class HandStrength:
    type: str
    rank: int
    kickers: Tuple[Rank, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "rank": self.rank,
            "kickers": [k.symbol for k in self.kickers],
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of one learner decision; built once, never mutated."""

    equity: int
    recommendation: str
    strategy: GTOStrategy
    choice: DecisionOption
    feedback: str
    is_correct: bool
    street: Street
    board_texture: Optional[BoardTexture] = None
    hand_strength: Optional[HandStrength] = None
    remote_feedback: bool = False

    @property
    def verdict(self) -> str:
        return "aligned" if self.is_correct else "misaligned"

    def to_dict(self) -> dict:
        return {
            "equity": self.equity,
            "recommendation": self.recommendation,
            "strategy": self.strategy.to_dict(),
            "choice": self.choice.to_dict(),
            "feedback": self.feedback,
            "is_correct": self.is_correct,
            "verdict": self.verdict,
            "street": self.street.value,
            "board_texture": self.board_texture.to_dict() if self.board_texture else None,
            "hand_strength": self.hand_strength.to_dict() if self.hand_strength else None,
            "remote_feedback": self.remote_feedback,
        }
