"""Shared constants and fixed lookup tables for the preflop coach."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from coach.models import Position, Street

STREETS = [Street.PREFLOP, Street.FLOP, Street.TURN, Street.RIVER]

STREET_BOARD_COUNT: Dict[Street, int] = {
    Street.PREFLOP: 0,
    Street.FLOP: 3,
    Street.TURN: 4,
    Street.RIVER: 5,
}

POSITION_SETS: Dict[int, List[Position]] = {
    6: [Position.UTG, Position.MP, Position.CO, Position.BTN, Position.SB, Position.BB],
    7: [
        Position.UTG,
        Position.UTG1,
        Position.MP,
        Position.CO,
        Position.BTN,
        Position.SB,
        Position.BB,
    ],
    8: [
        Position.UTG,
        Position.UTG1,
        Position.UTG2,
        Position.MP,
        Position.CO,
        Position.BTN,
        Position.SB,
        Position.BB,
    ],
}
DEFAULT_TABLE_SIZE = 6
TABLE_SIZES = sorted(POSITION_SETS)

POSITION_BUCKETS: Dict[Position, str] = {
    Position.UTG: "early",
    Position.UTG1: "early",
    Position.UTG2: "middle",
    Position.MP: "middle",
    Position.CO: "cutoff",
    Position.BTN: "button",
    Position.SB: "small_blind",
    Position.BB: "big_blind",
}

POSITION_DISPLAY_NAMES: Dict[Position, str] = {
    Position.UTG: "Under the Gun (UTG)",
    Position.UTG1: "Under the Gun +1 (UTG+1)",
    Position.UTG2: "Under the Gun +2 (UTG+2)",
    Position.MP: "Middle Position (MP)",
    Position.CO: "Cutoff (CO)",
    Position.BTN: "Button (BTN)",
    Position.SB: "Small Blind (SB)",
    Position.BB: "Big Blind (BB)",
}


@dataclass(frozen=True)
class Tendency:
    """Preflop fold/call/raise frequencies for one position bucket."""

    fold_rate: float
    call_rate: float
    raise_rate: float


POSITION_TENDENCIES: Dict[str, Tendency] = {
    "early": Tendency(fold_rate=0.75, call_rate=0.15, raise_rate=0.10),
    "middle": Tendency(fold_rate=0.65, call_rate=0.20, raise_rate=0.15),
    "cutoff": Tendency(fold_rate=0.55, call_rate=0.25, raise_rate=0.20),
    "button": Tendency(fold_rate=0.45, call_rate=0.25, raise_rate=0.30),
    "small_blind": Tendency(fold_rate=0.60, call_rate=0.20, raise_rate=0.20),
    "big_blind": Tendency(fold_rate=0.50, call_rate=0.35, raise_rate=0.15),
}

# Scaling applied once anyone ahead has raised.
FACING_RAISE_SCALING = Tendency(fold_rate=1.5, call_rate=0.8, raise_rate=0.5)

MIN_RAISE_BB = 2
RAISE_SIZE_CHOICES = 3  # uniform integer in [2, 4]

STARTING_POT_BB = 1.5
STARTING_TO_CALL_BB = 1.0

# Average strength of the range implied by a (bucket, action) pair, 0-100.
OPPONENT_RANGE_STRENGTH: Dict[Tuple[str, str], float] = {
    ("early", "call"): 52.0,
    ("early", "raise"): 78.0,
    ("middle", "call"): 48.0,
    ("middle", "raise"): 72.0,
    ("cutoff", "call"): 45.0,
    ("cutoff", "raise"): 68.0,
    ("button", "call"): 40.0,
    ("button", "raise"): 62.0,
    ("small_blind", "call"): 35.0,
    ("small_blind", "raise"): 65.0,
    ("big_blind", "call"): 32.0,
    ("big_blind", "raise"): 75.0,
}
DEFAULT_RANGE_STRENGTH = 50.0
UNOPENED_RANGE_STRENGTH: Dict[Street, float] = {
    Street.PREFLOP: 30.0,
    Street.FLOP: 25.0,
    Street.TURN: 25.0,
    Street.RIVER: 25.0,
}
POSTFLOP_BET_STRENGTH_BONUS = 10.0
POSTFLOP_CHECK_STRENGTH_PENALTY = 5.0

EQUITY_FLOOR = 15
EQUITY_CEILING = 85
PREFLOP_EQUITY_SCALE = 0.8
POSTFLOP_EQUITY_SCALE = 1.2
MAX_UNPAIRED_STRENGTH = 95.0

PREFLOP_OPEN_RAISE_BB = 3
THREE_BET_MULTIPLIER = 2.5
POSTFLOP_RAISE_SIZES: List[Tuple[float, str, str]] = [
    (2.5, "Min raise", "Conservative raise"),
    (3.0, "Standard raise", "Standard 3x raise"),
    (4.0, "Large raise", "Strong 4x raise"),
    (5.5, "Overbet raise", "Maximum pressure"),
]
POSTFLOP_BET_SIZES: List[Tuple[float, str, str]] = [
    (0.25, "Small bet", "Probing bet"),
    (0.50, "Half-pot bet", "Standard value bet"),
    (0.75, "Large bet", "Strong pressure bet"),
    (1.00, "Pot-size bet", "Maximum value or pressure"),
]

# (min equity, weights without a raise, weights facing a raise); weights are fold/call/raise.
STRATEGY_BANDS: List[Tuple[int, Tuple[float, float, float], Tuple[float, float, float]]] = [
    (80, (5.0, 10.0, 85.0), (5.0, 25.0, 70.0)),
    (65, (10.0, 20.0, 70.0), (10.0, 40.0, 50.0)),
    (50, (15.0, 45.0, 40.0), (30.0, 50.0, 20.0)),
    (35, (35.0, 50.0, 15.0), (60.0, 30.0, 10.0)),
    (20, (65.0, 25.0, 10.0), (85.0, 10.0, 5.0)),
    (0, (80.0, 15.0, 5.0), (95.0, 3.0, 2.0)),
]

POSITION_STRATEGY_DELTAS: Dict[str, Tuple[float, float, float]] = {
    "early": (10.0, -5.0, -5.0),
    "middle": (5.0, 0.0, -5.0),
    "cutoff": (-5.0, 0.0, 5.0),
    "button": (-10.0, -5.0, 15.0),
    "small_blind": (5.0, 5.0, -10.0),
    "big_blind": (-5.0, 5.0, 0.0),
}
BIG_BLIND_FACING_RAISE_DELTA = (-10.0, 10.0, 0.0)

UNBET_FOLD_RETENTION = 0.3
UNBET_FOLD_MINIMUM = 5.0
UNBET_FOLD_TO_CHECK = 0.4
UNBET_FOLD_TO_BET = 0.3

ALIGNMENT_THRESHOLD = 20


def positions_for_table(table_size: int) -> List[Position]:
    """Return positions in preflop action order; unknown sizes use the 6-max order."""
    return list(POSITION_SETS.get(table_size, POSITION_SETS[DEFAULT_TABLE_SIZE]))


def position_index(position: Position, table_size: int) -> int:
    positions = positions_for_table(table_size)
    for idx, candidate in enumerate(positions):
        if candidate == position:
            return idx
    return -1


def position_bucket(position: Position) -> str:
    return POSITION_BUCKETS[position]
