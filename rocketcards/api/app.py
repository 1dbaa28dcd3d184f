"""
FastAPI Application - REST API for the match engine.

Endpoints:
    GET    /health                          Health check
    GET    /api/v1/collections              List loaded card collections
    POST   /api/v1/matches                  Start a match
    GET    /api/v1/matches                  List match ids
    GET    /api/v1/matches/{id}             Get match state
    POST   /api/v1/matches/{id}/play        Play a card
    POST   /api/v1/matches/{id}/end-turn    End the turn (AI opponent then moves)
    POST   /api/v1/matches/{id}/concede     Concede
    DELETE /api/v1/matches/{id}             End a match and drop its snapshot
    POST   /api/v1/decks/import             Validate a deck document

Rejected plays are not HTTP errors: they return 200 with success=false
and the engine's error code, because an overplay still changes state.
"""

from typing import Annotated, Optional

from ..config import allowed_origins


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from ..engine_core.state import Side
    from ..session.manager import MatchNotFoundError
    from .service import APIService, ProfileRequiredError, SERVICE_VERSION
    from .schemas import (
        # Request models
        CreateMatchRequest,
        DeckImportRequest,
        PlayCardRequest,
        # Response models
        ActionResponse,
        CollectionListResponse,
        DeckImportResponse,
        EndMatchResponse,
        ErrorResponse,
        HealthResponse,
        MatchListResponse,
        MatchResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="RocketCards Engine API",
        description="""
Turn-based card match engine with a local or LLM-driven AI opponent.

## Error Codes

| Code | Description |
|------|-------------|
| `MATCH_NOT_FOUND` | Match does not exist |
| `INVALID_REQUEST` | Request could not be turned into a match or deck |
| `NO_PROFILE` | A match was requested without a profile |
        """,
        version=SERVICE_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def not_found(match_id: str) -> JSONResponse:
        return make_error_response(
            ErrorCode.MATCH_NOT_FOUND,
            f"Match {match_id} not found",
            status_code=404,
        )

    # =========================================================================
    # Content Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/collections",
        response_model=CollectionListResponse,
        tags=["Content"],
        summary="List loaded card collections",
    )
    async def list_collections() -> CollectionListResponse:
        return api_service.list_collections()

    @app.post(
        "/api/v1/decks/import",
        response_model=DeckImportResponse,
        tags=["Content"],
        summary="Validate a deck document",
    )
    async def import_deck(request: DeckImportRequest) -> DeckImportResponse:
        """
        Re-validate a deck export document.

        Unknown ids and copies over the rarity limit are returned in
        `skipped` instead of failing the import.
        """
        return api_service.import_deck(request)

    # =========================================================================
    # Match Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches",
        response_model=MatchResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="Start a new match",
    )
    async def create_match(request: CreateMatchRequest):
        """
        Start a match. Without `deck_cards` a deck is auto-built from
        `collection_id` (or the first loaded collection).
        """
        try:
            return api_service.create_match(request)
        except ProfileRequiredError as e:
            return make_error_response(ErrorCode.NO_PROFILE, str(e))
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_REQUEST, str(e))

    @app.get(
        "/api/v1/matches",
        response_model=MatchListResponse,
        tags=["Matches"],
        summary="List matches",
    )
    async def list_matches() -> MatchListResponse:
        return api_service.list_matches()

    @app.get(
        "/api/v1/matches/{match_id}",
        response_model=MatchResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="Get match state",
    )
    async def get_match(match_id: str):
        try:
            return api_service.get_match(match_id)
        except MatchNotFoundError:
            return not_found(match_id)

    @app.post(
        "/api/v1/matches/{match_id}/play",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Match Actions"],
        summary="Play a card",
    )
    async def play_card(match_id: str, request: PlayCardRequest):
        try:
            return api_service.play_card(match_id, request)
        except MatchNotFoundError:
            return not_found(match_id)
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_REQUEST, str(e))

    @app.post(
        "/api/v1/matches/{match_id}/end-turn",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Match Actions"],
        summary="End the current turn",
    )
    async def end_turn(
        match_id: str,
        side: Annotated[str, Query(description="player, or opponent in pvp matches")] = "player",
    ):
        """End the turn. Against the AI, the response includes the opponent's actions."""
        try:
            return await api_service.end_turn(match_id, Side(side))
        except MatchNotFoundError:
            return not_found(match_id)
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_REQUEST, str(e))

    @app.post(
        "/api/v1/matches/{match_id}/concede",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Match Actions"],
        summary="Concede the match",
    )
    async def concede(
        match_id: str,
        side: Annotated[str, Query(description="Conceding side")] = "player",
    ):
        try:
            return api_service.concede(match_id, Side(side))
        except MatchNotFoundError:
            return not_found(match_id)
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_REQUEST, str(e))

    @app.delete(
        "/api/v1/matches/{match_id}",
        response_model=EndMatchResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="End a match",
    )
    async def end_match(match_id: str):
        try:
            return api_service.end_match(match_id)
        except MatchNotFoundError:
            return not_found(match_id)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return api_service.health()

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "RocketCards Engine API",
            "version": SERVICE_VERSION,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app
