"""
Stat Calculator - Starting resources from strategy and key stat.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import KeyStat, Strategy

BASE_HP = 24
BASE_MP = 6

# (HP delta, MP delta)
KEY_STAT_DELTAS: dict[KeyStat, tuple[int, int]] = {
    KeyStat.STRENGTH: (8, 2),
    KeyStat.INTELLIGENCE: (2, 6),
    KeyStat.CHARISMA: (2, 2),
}

STRATEGY_DELTAS: dict[Strategy, tuple[int, int]] = {
    Strategy.DEFENSIVE: (4, 0),
    Strategy.BALANCED: (2, 2),
    Strategy.AGGRESSIVE: (0, 4),
}

MP_REGEN: dict[Strategy, int] = {
    Strategy.AGGRESSIVE: 4,
    Strategy.BALANCED: 3,
    Strategy.DEFENSIVE: 2,
}


@dataclass(frozen=True)
class PlayerStats:
    hp: int
    mp: int


def calculate_player_stats(strategy: Strategy, key_stat: KeyStat) -> PlayerStats:
    """Base stats plus the independent key-stat and strategy deltas."""
    stat_hp, stat_mp = KEY_STAT_DELTAS[key_stat]
    strategy_hp, strategy_mp = STRATEGY_DELTAS[strategy]
    return PlayerStats(
        hp=BASE_HP + stat_hp + strategy_hp,
        mp=BASE_MP + stat_mp + strategy_mp,
    )


def mp_regen_for(strategy: Strategy) -> int:
    """MP regenerated per turn for a strategy."""
    return MP_REGEN[strategy]
