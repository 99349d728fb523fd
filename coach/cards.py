"""Card utilities: deck building, shuffling, dealing, and board/hand summaries."""

from __future__ import annotations

import random
from collections import Counter
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from coach.models import BoardTexture, Card, HandStrength, Rank, Suit


class RandomSource(Protocol):
    """Anything yielding uniform floats in [0, 1); ``random.Random`` qualifies."""

    def random(self) -> float:
        ...


# Process-wide source used when callers do not inject one.
_DEFAULT_RNG = random.Random()


def resolve_rng(rng: Optional[RandomSource]) -> RandomSource:
    return _DEFAULT_RNG if rng is None else rng


def uniform_index(rng: RandomSource, size: int) -> int:
    """Uniform integer in [0, size)."""
    return min(size - 1, int(rng.random() * size))


def full_deck() -> List[Card]:
    """Return the ordered 52-card deck, suit by suit."""
    return [Card(rank=rank, suit=suit) for suit in Suit for rank in Rank]


def shuffle_deck(deck: Sequence[Card], rng: Optional[RandomSource] = None) -> List[Card]:
    """Fisher-Yates shuffle into a new list; the input is left untouched."""
    source = resolve_rng(rng)
    shuffled = list(deck)
    for i in range(len(shuffled) - 1, 0, -1):
        j = uniform_index(source, i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def deal(deck: Sequence[Card], count: int) -> Tuple[List[Card], List[Card]]:
    """Take ``count`` cards from the front. Returns (dealt, remaining)."""
    if count < 0 or count > len(deck):
        raise ValueError(f"Cannot deal {count} cards from a {len(deck)}-card deck")
    return list(deck[:count]), list(deck[count:])


def remove_cards(deck: Sequence[Card], cards: Iterable[Card]) -> List[Card]:
    used = set(cards)
    return [c for c in deck if c not in used]


def parse_card(text: str) -> Card:
    return Card.parse(text)


def format_card(card: Card) -> str:
    return str(card)


def format_cards(cards: Iterable[Card]) -> str:
    return "".join(c.pretty for c in cards)


HAND_TYPES = [
    "high_card",
    "pair",
    "two_pair",
    "trips",
    "straight",
    "flush",
    "full_house",
    "quads",
    "straight_flush",
]


def _top_straight(ranks: Iterable[int]) -> int:
    """Highest card of a five-long run (wheel counts as 5), or 0."""
    present = set(ranks)
    if 14 in present:
        present.add(1)
    for high in range(14, 4, -1):
        if all(r in present for r in range(high - 4, high + 1)):
            return high
    return 0


def _made_hand(cards: Sequence[Card]) -> Tuple[int, Tuple[int, ...]]:
    """Best category index into HAND_TYPES plus its defining ranks, for any 2-7 cards."""
    by_suit = Counter(c.suit for c in cards)
    suit, suited = by_suit.most_common(1)[0]
    if suited >= 5:
        flush_ranks = sorted((int(c.rank) for c in cards if c.suit == suit), reverse=True)
        run = _top_straight(flush_ranks)
        if run:
            return (8, (run,))
    else:
        flush_ranks = []

    counts = Counter(int(c.rank) for c in cards)
    groups = sorted(counts.items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
    trips = [r for r, n in groups if n >= 3]
    pairs = [r for r, n in groups if n == 2]

    if groups[0][1] >= 4:
        return (7, (groups[0][0],))
    if trips and (len(trips) > 1 or pairs):
        return (6, (trips[0], (trips[1:] + pairs)[0]))
    if flush_ranks:
        return (5, tuple(flush_ranks[:5]))
    run = _top_straight(counts)
    if run:
        return (4, (run,))
    if trips:
        return (3, (trips[0],))
    if len(pairs) >= 2:
        return (2, tuple(pairs[:2]))
    if pairs:
        return (1, (pairs[0],))
    return (0, tuple(sorted(counts, reverse=True)[:5]))


def analyze_hand_strength(hero_cards: Sequence[Card], board: Sequence[Card]) -> HandStrength:
    """Summarize the made hand from hole cards plus board (display only)."""
    category, tiebreak = _made_hand((list(hero_cards) + list(board))[:7])
    return HandStrength(
        type=HAND_TYPES[category],
        rank=category + 1,
        kickers=tuple(Rank(v) for v in tiebreak),
    )


def analyze_board_texture(board: Sequence[Card]) -> BoardTexture:
    """Classify the board as dry, wet or coordinated."""
    if len(board) < 3:
        return BoardTexture(
            type="dry",
            pairs=0,
            flush_draw=False,
            straight_draw=False,
            high_card=Rank.TWO,
        )

    rank_counts = Counter(c.rank for c in board)
    pairs = sum(1 for count in rank_counts.values() if count >= 2)
    flush_draw = max(Counter(c.suit for c in board).values()) >= 2

    values = sorted(int(c.rank) for c in board)
    straight_draw = any(b - a <= 2 for a, b in zip(values, values[1:]))

    texture = "dry"
    if flush_draw and straight_draw:
        texture = "coordinated"
    elif flush_draw or straight_draw or pairs > 0:
        texture = "wet"

    return BoardTexture(
        type=texture,
        pairs=pairs,
        flush_draw=flush_draw,
        straight_draw=straight_draw,
        high_card=max(c.rank for c in board),
    )
