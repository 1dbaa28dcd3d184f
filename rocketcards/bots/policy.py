"""
Opponent Policy - Interface for opponent turn decisions.

A policy looks at a match snapshot during its side's main phase and
returns the cards it wants to play, in order, and whether to end the
turn afterwards. The controller applies the plays through the engine,
so a policy cannot change state directly.

Decisions are async because a policy may call out to a remote model.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..engine_core.state import MatchSnapshot, Side


@dataclass
class OpponentDecision:
    """
    A turn plan made by a policy.

    Contains:
    - Card ids to play, in order
    - Whether to end the turn afterwards
    - Explanation (for UI/debugging)
    """
    plays: list[str] = field(default_factory=list)
    end_turn: bool = True
    explanation: str = ""
    reasons: dict[str, str] = field(default_factory=dict)

    @classmethod
    def default(cls) -> OpponentDecision:
        """Play nothing and end the turn."""
        return cls(plays=[], end_turn=True, explanation="Default decision")


class OpponentPolicy(ABC):
    """
    Abstract base class for opponent policies.

    Implementations range from a local heuristic to a remote LLM.
    """

    @abstractmethod
    async def decide(self, snapshot: MatchSnapshot, side: Side = Side.OPPONENT) -> OpponentDecision:
        """
        Plan the turn for a side.

        Args:
            snapshot: Current match snapshot, side in its main phase
            side: The side to plan for

        Returns:
            OpponentDecision with the cards to play
        """
        pass

    def get_name(self) -> str:
        """Get the policy's name/identifier."""
        return self.__class__.__name__


class PassPolicy(OpponentPolicy):
    """
    Pass policy - never plays a card.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    async def decide(self, snapshot: MatchSnapshot, side: Side = Side.OPPONENT) -> OpponentDecision:
        return OpponentDecision(plays=[], end_turn=True, explanation="Passed")
