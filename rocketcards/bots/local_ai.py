"""
Local AI - Heuristic opponent that runs without a model.

Plans by simulating plays against a copy of the state with the real
play rules, so every planned card is affordable when its turn comes
and the plan never runs past the plays remaining.

Difficulty:
- easy:   at most one card, first playable in hand order
- medium: cheapest MP cost first, as many as fit
- hard:   most expensive MP cost first, as many as fit
"""

from __future__ import annotations
import logging

from ..engine_core.action_generator import ActionGenerator
from ..engine_core.effect_resolver import BasicEffectResolver, EffectResolver
from ..engine_core.reducer import play_card
from ..engine_core.state import AIDifficulty, Card, MatchSnapshot, Side
from ..content.collections import CardCatalog
from .policy import OpponentDecision, OpponentPolicy

logger = logging.getLogger(__name__)


class LocalAIPolicy(OpponentPolicy):
    """
    Greedy heuristic policy.

    Usage:
        policy = LocalAIPolicy(catalog, AIDifficulty.MEDIUM)
        decision = await policy.decide(snapshot, Side.OPPONENT)
    """

    def __init__(
        self,
        catalog: CardCatalog,
        difficulty: AIDifficulty = AIDifficulty.MEDIUM,
        resolver: EffectResolver | None = None,
    ):
        self.catalog = catalog
        self.difficulty = difficulty
        self.resolver = resolver or BasicEffectResolver()
        self.generator = ActionGenerator(catalog=catalog)

    def _pick(self, playable: list[Card]) -> Card:
        if self.difficulty is AIDifficulty.EASY:
            return playable[0]
        # cost.mp is signed: more negative means more expensive
        if self.difficulty is AIDifficulty.HARD:
            return min(playable, key=lambda card: card.cost.mp)
        return max(playable, key=lambda card: card.cost.mp)

    def plan(self, snapshot: MatchSnapshot, side: Side) -> OpponentDecision:
        """Synchronous planning; decide() wraps this."""
        plays: list[str] = []
        reasons: dict[str, str] = {}
        sim = snapshot

        while True:
            playable = self.generator.playable_cards(sim, side)
            if not playable:
                break
            card = self._pick(playable)
            result = play_card(sim.match, sim.get_side(side), card.id, self.catalog, self.resolver,
                               opponent=sim.get_side(side.other))
            if not result.success:
                break
            plays.append(card.id)
            reasons[card.id] = f"Affordable at {sim.get_side(side).mp} MP"
            sim = result.applied_to(sim)
            if self.difficulty is AIDifficulty.EASY:
                break

        logger.debug("%s planned %d plays for %s", self.get_name(), len(plays), side.value)
        return OpponentDecision(
            plays=plays,
            end_turn=True,
            explanation=f"{self.difficulty.value} heuristic",
            reasons=reasons,
        )

    async def decide(self, snapshot: MatchSnapshot, side: Side = Side.OPPONENT) -> OpponentDecision:
        return self.plan(snapshot, side)
