"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a client UI and the engine.

Error Codes:
- MATCH_NOT_FOUND: Match does not exist or has been ended
- INVALID_REQUEST: Request body could not be turned into a match or deck
- NO_PROFILE: A match was requested without a player profile
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..engine_core.state import AIDifficulty, KeyStat, OpponentType, Strategy


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    MATCH_NOT_FOUND = "MATCH_NOT_FOUND"
    INVALID_REQUEST = "INVALID_REQUEST"
    NO_PROFILE = "NO_PROFILE"


# =============================================================================
# Shared Models
# =============================================================================

class CardCostInfo(BaseModel):
    HP: int = 0
    MP: int = 0
    fatigue: int = 0


class CardInfo(BaseModel):
    """Card definition for display."""
    id: str
    title: str
    type: str
    rarity: str
    effect: str = ""
    description: str = ""
    cost: CardCostInfo = Field(default_factory=CardCostInfo)
    tags: list[str] = Field(default_factory=list)
    token_cost: Optional[int] = None


class LogEntryInfo(BaseModel):
    message: str
    turn: int


class PlayerStateInfo(BaseModel):
    """One side's state. The opponent's hand is hidden; only its size is sent."""
    side: str
    hp: int
    mp: int
    fatigue: int
    hand: Optional[list[str]] = Field(None, description="Card ids; null for the hidden side")
    hand_count: int
    deck_count: int
    discard: list[str] = Field(default_factory=list)
    champions: list[dict[str, Any]] = Field(default_factory=list)
    extra_plays_remaining: int
    flags: list[str] = Field(default_factory=list)


class MatchStateInfo(BaseModel):
    turn: int
    phase: str = Field(description="start, main or end")
    active_player: str
    log: list[LogEntryInfo] = Field(default_factory=list)
    rules: dict[str, Any] = Field(default_factory=dict)
    rng_seed: str
    opponent_type: OpponentType
    ai_difficulty: AIDifficulty
    timed_match: bool
    mulligan_enabled: bool


# =============================================================================
# Request Models
# =============================================================================

class ProfileInput(BaseModel):
    """Player identity for a new match."""
    display_name: str = Field(..., min_length=1)
    strategy: Strategy
    key_stat: KeyStat


class CreateMatchRequest(BaseModel):
    """Request to start a new match."""
    profile: Optional[ProfileInput] = Field(None, description="Required")
    deck_name: Optional[str] = Field(None, description="Name for the deck")
    deck_cards: Optional[list[str]] = Field(
        None, description="Card ids; invalid entries are skipped. Auto-built if omitted"
    )
    collection_id: Optional[str] = Field(
        None, description="Collection to auto-build from (first loaded if omitted)"
    )
    opponent_type: OpponentType = OpponentType.AI
    ai_difficulty: AIDifficulty = AIDifficulty.MEDIUM
    timed_match: bool = True
    mulligan_enabled: bool = True
    seed: Optional[str] = Field(None, description="Shuffle seed for a reproducible match")


class PlayCardRequest(BaseModel):
    card_id: str = Field(..., description="Id of a card in the acting side's hand")
    side: str = Field("player", description="player, or opponent in pvp matches")


class DeckImportRequest(BaseModel):
    """A deck export document."""
    name: str = Field(..., min_length=1)
    collection: Optional[str] = None
    cards: list[str] = Field(default_factory=list)


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class MatchResponse(BaseModel):
    """Full view of a match."""
    match_id: str
    match: MatchStateInfo
    player: PlayerStateInfo
    opponent: PlayerStateInfo
    playable_cards: list[str] = Field(default_factory=list, description="Player cards that can be played now")
    winner: Optional[str] = None
    is_over: bool = False
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Result of a match action."""
    success: bool
    error: Optional[str] = None
    engine_error_code: Optional[str] = Field(
        None, description="NOT_YOUR_TURN, WRONG_PHASE, NOT_IN_HAND, OVERPLAY, ..."
    )
    state_changes: list[str] = Field(default_factory=list)
    opponent_actions: list[str] = Field(
        default_factory=list, description="What the AI opponent did, if it moved"
    )
    match: MatchResponse
    api_version: str = "v1"


class MatchListResponse(BaseModel):
    matches: list[str]
    count: int
    api_version: str = "v1"


class EndMatchResponse(BaseModel):
    success: bool
    match_id: str
    api_version: str = "v1"


class CollectionInfo(BaseModel):
    id: str
    name: str
    description: str = ""
    cards: list[CardInfo] = Field(default_factory=list)


class CollectionListResponse(BaseModel):
    collections: list[CollectionInfo]
    count: int
    api_version: str = "v1"


class DeckImportResponse(BaseModel):
    """Imported deck plus ids that failed validation."""
    name: str
    collection: Optional[str] = None
    cards: list[str]
    skipped: list[str] = Field(default_factory=list)
    api_version: str = "v1"


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
