"""
Engine Core - Deterministic match state management and rule transitions.

The engine is the runtime that:
1. Initializes a match from a profile and a deck (seeded shuffle)
2. Moves the active side through draw and upkeep
3. Validates and executes card plays
4. Finalizes turns and concessions
"""

from .state import (
    Card,
    CardCost,
    CardType,
    Collection,
    Deck,
    KeyStat,
    LogEntry,
    MatchRules,
    MatchSnapshot,
    MatchState,
    Phase,
    PlayerState,
    Profile,
    Rarity,
    Side,
    Strategy,
)
from .action import Action, ActionType, ActionResult, ErrorCode
from .rng import SeededRandom, generate_seed, shuffle
from .stats import PlayerStats, calculate_player_stats, mp_regen_for
from .effect_resolver import EffectResolver, BasicEffectResolver, deal_damage
from .reducer import (
    PlayResult,
    Reducer,
    apply_action,
    concede,
    end_turn,
    initialize_match,
    max_plays_for_fatigue,
    play_card,
    start_of_turn_draw,
    upkeep,
)
from .action_generator import ActionGenerator, legal_actions

__all__ = [
    "Card",
    "CardCost",
    "CardType",
    "Collection",
    "Deck",
    "KeyStat",
    "LogEntry",
    "MatchRules",
    "MatchSnapshot",
    "MatchState",
    "Phase",
    "PlayerState",
    "Profile",
    "Rarity",
    "Side",
    "Strategy",
    "Action",
    "ActionType",
    "ActionResult",
    "ErrorCode",
    "SeededRandom",
    "generate_seed",
    "shuffle",
    "PlayerStats",
    "calculate_player_stats",
    "mp_regen_for",
    "EffectResolver",
    "BasicEffectResolver",
    "deal_damage",
    "PlayResult",
    "Reducer",
    "apply_action",
    "concede",
    "end_turn",
    "initialize_match",
    "max_plays_for_fatigue",
    "play_card",
    "start_of_turn_draw",
    "upkeep",
    "ActionGenerator",
    "legal_actions",
]
