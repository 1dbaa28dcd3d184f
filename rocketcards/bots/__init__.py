"""
Bots module - Opponent policies.

Provides:
- OpponentPolicy: Interface for opponent turn decisions
- LocalAIPolicy: Heuristic opponent, no network
- LLMOpponentPolicy: Opponent driven by a completion model
"""

from .policy import OpponentDecision, OpponentPolicy, PassPolicy
from .local_ai import LocalAIPolicy
from .llm_opponent import LLMOpponentPolicy, LLMResolverDisabledError

__all__ = [
    "OpponentDecision",
    "OpponentPolicy",
    "PassPolicy",
    "LocalAIPolicy",
    "LLMOpponentPolicy",
    "LLMResolverDisabledError",
]
