"""
LLM Opponent - Asks a completion model for the turn plan.

Failures (disabled resolver, network errors, non-200 responses) raise;
the match controller turns any failure into the default decision.
Unparseable output is not a failure: it already parses to the default.
"""

from __future__ import annotations
import logging

from ..engine_core.state import MatchSnapshot, Side
from ..llm.config import LLMConfig
from ..llm.parsing import parse_strategy_response
from ..llm.prompts import build_strategy_prompt
from ..llm.provider import HTTPCompletionProvider, LLMProvider
from .policy import OpponentDecision, OpponentPolicy

logger = logging.getLogger(__name__)


class LLMResolverDisabledError(RuntimeError):
    """The LLM turn resolver is switched off in configuration."""


class LLMOpponentPolicy(OpponentPolicy):
    """Opponent policy backed by an LLMProvider."""

    def __init__(self, config: LLMConfig | None = None, provider: LLMProvider | None = None):
        self.config = config or LLMConfig.from_env()
        self.provider = provider or HTTPCompletionProvider(self.config)

    async def decide(self, snapshot: MatchSnapshot, side: Side = Side.OPPONENT) -> OpponentDecision:
        if not self.config.enable_turn_resolver:
            raise LLMResolverDisabledError("LLM turn resolver is not enabled")

        prompt = build_strategy_prompt(snapshot, self.config.system_prompt)
        response = await self.provider.complete(prompt)
        strategy = parse_strategy_response(response.content)

        hand = snapshot.get_side(side).hand
        plays: list[str] = []
        reasons: dict[str, str] = {}
        for planned in strategy.plays:
            if planned.card_id not in hand:
                logger.info("LLM suggested %s which is not in hand; skipping", planned.card_id)
                continue
            plays.append(planned.card_id)
            reasons[planned.card_id] = planned.reason

        return OpponentDecision(
            plays=plays,
            end_turn=strategy.end_turn,
            explanation=f"LLM plan from {response.model}",
            reasons=reasons,
        )
