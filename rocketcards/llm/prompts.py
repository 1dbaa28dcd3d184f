"""
LLM Prompt Templates

The opponent strategy prompt and the game-state payload embedded in it.
"""

from __future__ import annotations
import json
from typing import Any

from ..engine_core.state import MatchSnapshot, PlayerState

OPPONENT_STRATEGY_PROMPT = """
{system_prompt}

Current game state:
{game_state}

Based on the opponent's hand and the current battlefield situation, determine the best strategy for the opponent's turn.
Return a JSON response with the following structure:
{{
  "plays": [
    {{
      "cardId": "string - ID of card to play",
      "reason": "string - brief explanation of why this card was chosen"
    }}
  ],
  "endTurn": "boolean - whether to end the turn after playing cards"
}}

Guidelines:
- Only return cards that are actually in the opponent's hand
- Consider costs and whether the opponent can afford to play the cards
- Prioritize strategic plays that advance the opponent's position
- You can play multiple cards if the opponent has enough resources
- Set endTurn to true when no more beneficial plays can be made
"""


def _side_summary(state: PlayerState) -> dict[str, Any]:
    return {
        "hp": state.hp,
        "mp": state.mp,
        "fatigue": state.fatigue,
        "hand": list(state.hand),
        "champions": [slot.to_dict() for slot in state.champions],
    }


def game_state_to_json(snapshot: MatchSnapshot) -> dict[str, Any]:
    """Reduce a snapshot to the fields the strategy prompt needs."""
    match = snapshot.match
    return {
        "match": {
            "turn": match.turn,
            "phase": match.phase.value,
            "activePlayer": match.active_player.value,
            "rules": match.rules.to_dict(),
        },
        "player": _side_summary(snapshot.player),
        "opponent": _side_summary(snapshot.opponent),
    }


def build_strategy_prompt(snapshot: MatchSnapshot, system_prompt: str) -> str:
    return OPPONENT_STRATEGY_PROMPT.format(
        system_prompt=system_prompt,
        game_state=json.dumps(game_state_to_json(snapshot), indent=2),
    )
