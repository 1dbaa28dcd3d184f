"""
Match Controller - Owns one live match and sequences engine calls.

The controller is the single writer for a match:
- Starts a match through the initializer
- Runs draw then upkeep exactly once per turn (begin_turn)
- Routes plays, turn ends and concessions through the reducer
- Drives the opponent's turn through an OpponentPolicy
- Saves a snapshot after every mutating call when a store is attached

The opponent decision is the only long-running call. It is bounded by a
timeout; any failure or timeout is logged and replaced by the default
decision (play nothing, end the turn).
"""

from __future__ import annotations
import asyncio
import logging
from typing import TYPE_CHECKING

from ..engine_core.action import Action, ActionResult, ErrorCode
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.effect_resolver import BasicEffectResolver, EffectResolver
from ..engine_core.reducer import Reducer, initialize_match
from ..engine_core.state import (
    AIDifficulty,
    Deck,
    MatchRules,
    MatchSnapshot,
    OpponentType,
    Phase,
    Profile,
    Side,
)
from ..bots.policy import OpponentDecision, OpponentPolicy
from .snapshot import SnapshotStore

if TYPE_CHECKING:
    from ..content.collections import CardCatalog

logger = logging.getLogger(__name__)

DEFAULT_DECISION_TIMEOUT = 30.0
# Decision rounds per opponent turn before the turn is ended for it
MAX_DECISION_ROUNDS = 3
# Rejections after which no later play in the plan can succeed
STOP_CODES = (ErrorCode.OVERPLAY, ErrorCode.FATIGUE_LIMIT)


class MatchController:
    """
    Live match owner.

    Usage:
        controller = MatchController(catalog, opponent_policy=LocalAIPolicy(catalog))
        controller.start_match(profile, deck, seed="ABCDEFGHIJKLMNOP")
        controller.begin_turn()
        controller.play_card("fantasy_spark")
        controller.end_turn()
        await controller.run_opponent_turn()
    """

    def __init__(
        self,
        catalog: CardCatalog,
        opponent_policy: OpponentPolicy | None = None,
        store: SnapshotStore | None = None,
        decision_timeout: float = DEFAULT_DECISION_TIMEOUT,
        resolver: EffectResolver | None = None,
    ):
        self.catalog = catalog
        self.opponent_policy = opponent_policy
        self.store = store
        self.decision_timeout = decision_timeout
        self.reducer = Reducer(catalog=catalog, resolver=resolver or BasicEffectResolver())
        self._snapshot: MatchSnapshot | None = None

    # =========================================================================
    # State access
    # =========================================================================

    @property
    def snapshot(self) -> MatchSnapshot | None:
        """Current snapshot. Engine values are replaced, never mutated, so this is safe to hold."""
        return self._snapshot

    @property
    def winner(self) -> Side | None:
        """The side still standing once either side's HP reaches 0."""
        if self._snapshot is None:
            return None
        if self._snapshot.player.hp <= 0:
            return Side.OPPONENT
        if self._snapshot.opponent.hp <= 0:
            return Side.PLAYER
        return None

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    def legal_actions(self, side: Side = Side.PLAYER) -> list[Action]:
        if self._snapshot is None or self.is_over:
            return []
        return ActionGenerator(catalog=self.catalog).generate(self._snapshot, side)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start_match(
        self,
        profile: Profile,
        deck: Deck | None,
        opponent_type: OpponentType = OpponentType.AI,
        ai_difficulty: AIDifficulty = AIDifficulty.MEDIUM,
        timed_match: bool = True,
        mulligan_enabled: bool = True,
        seed: str | None = None,
        rules: MatchRules | None = None,
    ) -> MatchSnapshot:
        """Initialize a new match, replacing any current one."""
        snapshot = initialize_match(
            profile,
            deck,
            opponent_type=opponent_type,
            ai_difficulty=ai_difficulty,
            timed_match=timed_match,
            mulligan_enabled=mulligan_enabled,
            seed=seed or None,
            rules=rules,
        )
        logger.info("Match started (seed=%s, opponent=%s)", snapshot.match.rng_seed,
                    opponent_type.value)
        self._commit(snapshot)
        return snapshot

    def restore(self) -> MatchSnapshot | None:
        """Load the persisted match, if any, as the current match."""
        if self.store is None:
            return None
        snapshot = self.store.load()
        if snapshot is not None:
            self._snapshot = snapshot
            logger.info("Restored match at turn %d", snapshot.match.turn)
        return snapshot

    def reset(self):
        """Drop the current match and its saved snapshot (return to lobby)."""
        self._snapshot = None
        if self.store is not None:
            self.store.clear()

    # =========================================================================
    # Turn operations
    # =========================================================================

    def begin_turn(self) -> ActionResult:
        """
        Draw then upkeep for the active side.

        Only valid in the start phase, which makes a second call in the
        same turn a rejection instead of a double draw.
        """
        guard = self._guard()
        if guard:
            return guard
        snapshot = self._snapshot
        if snapshot.match.phase is not Phase.START:
            return ActionResult.failure("Turn already started", ErrorCode.WRONG_PHASE, snapshot)
        return self._apply(Action.start_turn(snapshot.match.active_player))

    def play_card(self, card_id: str, side: Side = Side.PLAYER) -> ActionResult:
        guard = self._guard()
        if guard:
            return guard
        return self._apply(Action.play_card(side, card_id))

    def end_turn(self, side: Side = Side.PLAYER) -> ActionResult:
        guard = self._guard()
        if guard:
            return guard
        return self._apply(Action.end_turn(side))

    def concede(self, side: Side = Side.PLAYER) -> ActionResult:
        guard = self._guard()
        if guard:
            return guard
        logger.info("%s conceded", side.label)
        return self._apply(Action.concede(side))

    async def decide_opponent_turn(self, side: Side = Side.OPPONENT) -> OpponentDecision:
        """
        Ask the opponent policy for a plan, bounded by the decision timeout.

        Never raises: timeout, cancellation of the pending call or any
        policy error yields OpponentDecision.default().
        """
        if self.opponent_policy is None or self._snapshot is None:
            return OpponentDecision.default()
        try:
            return await asyncio.wait_for(
                self.opponent_policy.decide(self._snapshot, side),
                timeout=self.decision_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.1fs; using default decision",
                           self.opponent_policy.get_name(), self.decision_timeout)
        except asyncio.CancelledError:
            logger.warning("%s decision cancelled; using default decision",
                           self.opponent_policy.get_name())
        except Exception as e:
            logger.warning("%s failed (%s); using default decision",
                           self.opponent_policy.get_name(), e)
        return OpponentDecision.default()

    async def run_opponent_turn(self, side: Side = Side.OPPONENT) -> list[ActionResult]:
        """
        Play out the side's whole turn and hand the turn back.

        Starts the turn if needed, applies each planned play in order,
        and stops early after an overplay, once fatigue blocks further
        plays, or once the turn is over.
        If the policy keeps the turn open for too many rounds, the
        turn is ended for it.
        """
        guard = self._guard()
        if guard:
            return [guard]
        if self._snapshot.match.active_player is not side:
            return [ActionResult.failure(f"Not {side.value}'s turn", ErrorCode.NOT_YOUR_TURN,
                                         self._snapshot)]

        results: list[ActionResult] = []
        if self._snapshot.match.phase is Phase.START:
            results.append(self.begin_turn())

        for _ in range(MAX_DECISION_ROUNDS):
            decision = await self.decide_opponent_turn(side)
            stop = False
            for card_id in decision.plays:
                result = self.play_card(card_id, side)
                results.append(result)
                if result.error_code in STOP_CODES or self.is_over:
                    stop = True
                    break
            if stop or decision.end_turn or self._snapshot.match.phase is Phase.END:
                break

        if not self.is_over and self._snapshot.match.active_player is side:
            results.append(self.end_turn(side))
        return results

    # =========================================================================
    # Internals
    # =========================================================================

    def _guard(self) -> ActionResult | None:
        if self._snapshot is None:
            return ActionResult.failure("No match in progress", ErrorCode.NO_MATCH)
        if self.is_over:
            return ActionResult.failure("Match is over", ErrorCode.MATCH_OVER, self._snapshot)
        return None

    def _apply(self, action: Action) -> ActionResult:
        result = self.reducer.apply(self._snapshot, action)
        if result.new_state is not None and result.new_state is not self._snapshot:
            self._commit(result.new_state)
        if not result.success:
            logger.debug("%s rejected: %s", action.action_type.value, result.error)
        return result

    def _commit(self, snapshot: MatchSnapshot):
        self._snapshot = snapshot
        if self.store is not None:
            self.store.save(snapshot)
