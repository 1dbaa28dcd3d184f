"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to controller calls
2. Manages matches through the MatchManager
3. Runs the AI opponent's turn after the player ends theirs
4. Formats responses for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field

from ..config import data_dir, snapshot_dir
from ..content.collections import CardCatalog
from ..content.decks import DeckDocument, auto_build_deck, validate_deck
from ..content.profiles import create_profile
from ..engine_core.action import ActionResult
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.state import (
    Card,
    Collection,
    Deck,
    MatchSnapshot,
    OpponentType,
    Phase,
    PlayerState,
    Side,
)
from ..session.manager import MatchManager, MatchSession
from .schemas import (
    # Requests
    CreateMatchRequest,
    DeckImportRequest,
    PlayCardRequest,
    # Responses
    ActionResponse,
    CollectionListResponse,
    DeckImportResponse,
    EndMatchResponse,
    HealthResponse,
    MatchListResponse,
    MatchResponse,
    # Shared
    CardCostInfo,
    CardInfo,
    CollectionInfo,
    LogEntryInfo,
    MatchStateInfo,
    PlayerStateInfo,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "rocketcards-engine"
SERVICE_VERSION = "0.1.0"


class ProfileRequiredError(ValueError):
    """A match was requested without a profile."""


def _default_catalog() -> CardCatalog:
    return CardCatalog.from_directory(data_dir())


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Start a match
        response = service.create_match(request)

        # Play and end turn
        service.play_card(response.match_id, PlayCardRequest(card_id="fantasy_spark"))
        await service.end_turn(response.match_id)
    """
    catalog: CardCatalog = field(default_factory=_default_catalog)
    manager: MatchManager | None = None

    def __post_init__(self):
        if self.manager is None:
            self.manager = MatchManager(self.catalog, snapshot_dir=snapshot_dir())

    # =========================================================================
    # Matches
    # =========================================================================

    def create_match(self, request: CreateMatchRequest) -> MatchResponse:
        """
        Start a match and open the player's first turn.

        Raises ProfileRequiredError without a profile, ValueError when
        no usable deck can be built.
        """
        if request.profile is None:
            raise ProfileRequiredError("A profile is required to start a match")

        profile = create_profile(
            request.profile.display_name,
            request.profile.strategy,
            request.profile.key_stat,
        )
        deck = self._resolve_deck(request)

        session = self.manager.create_session(
            opponent_type=request.opponent_type,
            ai_difficulty=request.ai_difficulty,
        )
        controller = session.controller
        controller.start_match(
            profile,
            deck,
            opponent_type=request.opponent_type,
            ai_difficulty=request.ai_difficulty,
            timed_match=request.timed_match,
            mulligan_enabled=request.mulligan_enabled,
            seed=request.seed,
        )
        controller.begin_turn()
        return self._match_response(session)

    def get_match(self, match_id: str) -> MatchResponse:
        """Raises MatchNotFoundError for unknown ids."""
        return self._match_response(self.manager.get_session(match_id))

    def list_matches(self) -> MatchListResponse:
        ids = [session.match_id for session in self.manager.list_sessions()]
        return MatchListResponse(matches=ids, count=len(ids))

    def play_card(self, match_id: str, request: PlayCardRequest) -> ActionResponse:
        session = self.manager.get_session(match_id)
        result = session.controller.play_card(request.card_id, Side(request.side))
        return self._action_response(session, result)

    async def end_turn(self, match_id: str, side: Side = Side.PLAYER) -> ActionResponse:
        """
        End a side's turn.

        Against the AI the opponent then plays its whole turn and the
        player's next turn is opened. In pvp the next side's turn is
        opened for it.
        """
        session = self.manager.get_session(match_id)
        controller = session.controller
        result = controller.end_turn(side)
        opponent_actions: list[str] = []

        if result.success and not controller.is_over:
            snapshot = controller.snapshot
            if (snapshot.match.opponent_type is OpponentType.AI
                    and snapshot.match.active_player is Side.OPPONENT):
                for opponent_result in await controller.run_opponent_turn():
                    if opponent_result.success:
                        opponent_actions.extend(opponent_result.state_changes)
                    elif opponent_result.error:
                        opponent_actions.append(opponent_result.error)
            if not controller.is_over and controller.snapshot.match.phase is Phase.START:
                controller.begin_turn()

        return self._action_response(session, result, opponent_actions)

    def concede(self, match_id: str, side: Side = Side.PLAYER) -> ActionResponse:
        """
        Concede for a side.

        Against the AI only the player may concede; raises ValueError
        for any other side.
        """
        session = self.manager.get_session(match_id)
        snapshot = session.controller.snapshot
        if (snapshot is not None and snapshot.match.opponent_type is OpponentType.AI
                and side is not Side.PLAYER):
            raise ValueError("Only the player can concede a match against the AI")
        result = session.controller.concede(side)
        return self._action_response(session, result)

    def end_match(self, match_id: str) -> EndMatchResponse:
        """Raises MatchNotFoundError for unknown ids."""
        self.manager.end_session(match_id)
        return EndMatchResponse(success=True, match_id=match_id)

    # =========================================================================
    # Content
    # =========================================================================

    def list_collections(self) -> CollectionListResponse:
        collections = [_collection_info(c) for c in self.catalog.collections]
        return CollectionListResponse(collections=collections, count=len(collections))

    def import_deck(self, request: DeckImportRequest) -> DeckImportResponse:
        document = DeckDocument(name=request.name, collection=request.collection, cards=request.cards)
        result = validate_deck(document, self.catalog)
        return DeckImportResponse(
            name=result.deck.name,
            collection=result.deck.collection,
            cards=result.deck.cards,
            skipped=result.skipped,
        )

    def health(self) -> HealthResponse:
        return HealthResponse(status="healthy", service=SERVICE_NAME, version=SERVICE_VERSION)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _resolve_deck(self, request: CreateMatchRequest) -> Deck:
        if request.deck_cards is not None:
            document = DeckDocument(
                name=request.deck_name or "Custom Deck",
                collection=request.collection_id,
                cards=request.deck_cards,
            )
            result = validate_deck(document, self.catalog)
            if result.skipped:
                logger.info("Skipped %d invalid deck entries", len(result.skipped))
            if not result.deck.cards:
                raise ValueError("Deck has no valid cards")
            return result.deck

        collection = self._pick_collection(request.collection_id)
        return auto_build_deck(collection, name=request.deck_name, seed=request.seed)

    def _pick_collection(self, collection_id: str | None) -> Collection:
        if collection_id:
            collection = self.catalog.get_collection(collection_id)
            if collection is None:
                raise ValueError(f"Unknown collection: {collection_id}")
            return collection
        if not self.catalog.collections:
            raise ValueError("No collections loaded")
        return self.catalog.collections[0]

    def _match_response(self, session: MatchSession) -> MatchResponse:
        controller = session.controller
        snapshot = controller.snapshot
        if snapshot is None:
            raise ValueError(f"Match {session.match_id} has not started")
        playable = ActionGenerator(catalog=self.catalog).playable_cards(snapshot, Side.PLAYER)
        winner = controller.winner
        hide_opponent = snapshot.match.opponent_type is OpponentType.AI
        return MatchResponse(
            match_id=session.match_id,
            match=_match_info(snapshot),
            player=_player_info(snapshot.player),
            opponent=_player_info(snapshot.opponent, hide_hand=hide_opponent),
            playable_cards=[card.id for card in playable],
            winner=winner.value if winner else None,
            is_over=controller.is_over,
        )

    def _action_response(
        self,
        session: MatchSession,
        result: ActionResult,
        opponent_actions: list[str] | None = None,
    ) -> ActionResponse:
        return ActionResponse(
            success=result.success,
            error=result.error,
            engine_error_code=result.error_code.value if result.error_code else None,
            state_changes=result.state_changes,
            opponent_actions=opponent_actions or [],
            match=self._match_response(session),
        )


# =============================================================================
# Conversion Helpers
# =============================================================================

def _card_info(card: Card) -> CardInfo:
    return CardInfo(
        id=card.id,
        title=card.title,
        type=card.type.value,
        rarity=card.rarity.value,
        effect=card.effect,
        description=card.description,
        cost=CardCostInfo(**card.cost.to_dict()),
        tags=list(card.tags),
        token_cost=card.token_cost,
    )


def _collection_info(collection: Collection) -> CollectionInfo:
    return CollectionInfo(
        id=collection.id,
        name=collection.name,
        description=collection.description,
        cards=[_card_info(card) for card in collection.cards],
    )


def _player_info(state: PlayerState, hide_hand: bool = False) -> PlayerStateInfo:
    return PlayerStateInfo(
        side=state.side.value,
        hp=state.hp,
        mp=state.mp,
        fatigue=state.fatigue,
        hand=None if hide_hand else list(state.hand),
        hand_count=len(state.hand),
        deck_count=len(state.deck),
        discard=list(state.discard),
        champions=[slot.to_dict() for slot in state.champions],
        extra_plays_remaining=state.extra_plays_remaining,
        flags=list(state.flags),
    )


def _match_info(snapshot: MatchSnapshot) -> MatchStateInfo:
    match = snapshot.match
    return MatchStateInfo(
        turn=match.turn,
        phase=match.phase.value,
        active_player=match.active_player.value,
        log=[LogEntryInfo(message=entry.message, turn=entry.turn) for entry in match.log],
        rules=match.rules.to_dict(),
        rng_seed=match.rng_seed,
        opponent_type=match.opponent_type,
        ai_difficulty=match.ai_difficulty,
        timed_match=match.timed_match,
        mulligan_enabled=match.mulligan_enabled,
    )
