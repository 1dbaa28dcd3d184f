"""
Action System - Actions, payloads, and results.

Actions represent:
1. Player actions (play a card, concede)
2. Turn boundary actions (start turn, end turn)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import Side


class ActionType(Enum):
    """Types of actions in the system."""
    # Player actions
    PLAY_CARD = "play_card"
    CONCEDE = "concede"

    # Turn boundary actions
    START_TURN = "start_turn"
    END_TURN = "end_turn"


class ErrorCode(Enum):
    """Why an action was rejected."""
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    WRONG_PHASE = "WRONG_PHASE"
    NOT_IN_HAND = "NOT_IN_HAND"
    FATIGUE_LIMIT = "FATIGUE_LIMIT"
    OVERPLAY = "OVERPLAY"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    CANNOT_AFFORD = "CANNOT_AFFORD"
    CHAMPION_IN_PLAY = "CHAMPION_IN_PLAY"
    NO_CHAMPION = "NO_CHAMPION"
    NO_HANDLER = "NO_HANDLER"
    # Raised by the match controller, not the reducer
    NO_MATCH = "NO_MATCH"
    MATCH_OVER = "MATCH_OVER"


@dataclass
class Action:
    """
    A complete action to be applied to a match snapshot.

    Actions are:
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    side: Side = Side.PLAYER
    card_id: str | None = None
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def play_card(cls, side: Side, card_id: str) -> Action:
        """Factory for play card action."""
        return cls(action_type=ActionType.PLAY_CARD, side=side, card_id=card_id)

    @classmethod
    def start_turn(cls, side: Side) -> Action:
        return cls(action_type=ActionType.START_TURN, side=side)

    @classmethod
    def end_turn(cls, side: Side) -> Action:
        return cls(action_type=ActionType.END_TURN, side=side)

    @classmethod
    def concede(cls, side: Side = Side.PLAYER) -> Action:
        return cls(action_type=ActionType.CONCEDE, side=side)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New snapshot (always present for engine actions, even on failure,
      because a rejected play can still carry a penalty)
    - Error details (if failed)
    - Human-readable changes (for UI)
    """
    success: bool
    new_state: Any | None = None  # MatchSnapshot
    error: str | None = None
    error_code: ErrorCode | None = None
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: ErrorCode | None = None,
        state: Any | None = None,
    ) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, state_changes=changes or [])
