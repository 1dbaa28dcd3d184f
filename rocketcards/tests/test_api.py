"""
Tests for the API service and the FastAPI application.
"""

import asyncio

import pytest
from fastapi import testclient

from ..api.app import create_app
from ..api.schemas import CreateMatchRequest, PlayCardRequest
from ..api.service import APIService, ProfileRequiredError
from ..engine_core.state import Side
from ..llm.config import LLMConfig
from ..session.manager import MatchManager, MatchNotFoundError

PROFILE = {"display_name": "Tester", "strategy": "balanced", "key_stat": "intelligence"}
DECK = ["strike", "focus", "haste", "mend", "guardian",
        "oracle", "strike", "focus", "haste", "mend"]


@pytest.fixture
def service(catalog):
    """Service over the test catalog with the local AI and no persistence."""
    return APIService(catalog=catalog, manager=MatchManager(catalog, llm_config=LLMConfig()))


@pytest.fixture
def client(service):
    return testclient.TestClient(create_app(service))


def _create(client, **overrides):
    body = {"profile": PROFILE, "deck_cards": DECK, "seed": "TESTSEED12345678"}
    body.update(overrides)
    return client.post("/api/v1/matches", json=body)


class TestAPIService:
    """Tests for the framework-agnostic service."""

    def test_create_match_opens_first_turn(self, service):
        response = service.create_match(CreateMatchRequest(profile=PROFILE, deck_cards=DECK, seed="S"))
        assert response.match.phase == "main"
        assert response.match.turn == 0
        assert len(response.player.hand) == 6
        assert response.opponent.hand is None
        assert response.opponent.hand_count == 5
        assert response.player.hp == 28

    def test_profile_required(self, service):
        with pytest.raises(ProfileRequiredError):
            service.create_match(CreateMatchRequest(deck_cards=DECK))

    def test_auto_built_deck(self, service):
        response = service.create_match(CreateMatchRequest(profile=PROFILE, collection_id="test"))
        assert response.player.deck_count == 30 - 5 - 1

    def test_unknown_collection(self, service):
        with pytest.raises(ValueError):
            service.create_match(CreateMatchRequest(profile=PROFILE, collection_id="nope"))

    def test_deck_with_no_valid_cards(self, service):
        with pytest.raises(ValueError):
            service.create_match(CreateMatchRequest(profile=PROFILE, deck_cards=["ghost"]))

    def test_end_turn_runs_ai_and_reopens(self, service):
        created = service.create_match(CreateMatchRequest(profile=PROFILE, deck_cards=DECK, seed="S"))
        response = asyncio.run(service.end_turn(created.match_id))

        assert response.success
        assert response.opponent_actions
        assert response.match.match.active_player == "player"
        assert response.match.match.phase == "main"
        assert response.match.match.turn == 2

    def test_pvp_turn_opens_for_opponent(self, service):
        created = service.create_match(
            CreateMatchRequest(profile=PROFILE, deck_cards=DECK, seed="S", opponent_type="pvp")
        )
        response = asyncio.run(service.end_turn(created.match_id))
        assert response.opponent_actions == []
        assert response.match.match.active_player == "opponent"
        assert response.match.match.phase == "main"
        assert response.match.opponent.hand is not None

        card_id = response.match.opponent.hand[0]
        played = service.play_card(created.match_id, PlayCardRequest(card_id=card_id, side="opponent"))
        assert played.success

    def test_unknown_match(self, service):
        with pytest.raises(MatchNotFoundError):
            service.get_match("missing")

    def test_concede(self, service):
        created = service.create_match(CreateMatchRequest(profile=PROFILE, deck_cards=DECK))
        response = service.concede(created.match_id, Side.PLAYER)
        assert response.match.winner == "opponent"
        assert response.match.is_over

    def test_ai_match_only_player_concedes(self, service):
        """Conceding for the AI would hand the player a free win."""
        created = service.create_match(CreateMatchRequest(profile=PROFILE, deck_cards=DECK))
        with pytest.raises(ValueError):
            service.concede(created.match_id, Side.OPPONENT)
        assert service.get_match(created.match_id).winner is None

    def test_pvp_opponent_may_concede(self, service):
        created = service.create_match(
            CreateMatchRequest(profile=PROFILE, deck_cards=DECK, opponent_type="pvp")
        )
        response = service.concede(created.match_id, Side.OPPONENT)
        assert response.match.winner == "player"


class TestMatchEndpoints:
    """Tests for the HTTP surface."""

    def test_create_and_get(self, client):
        created = _create(client)
        assert created.status_code == 200
        match_id = created.json()["match_id"]

        fetched = client.get(f"/api/v1/matches/{match_id}")
        assert fetched.status_code == 200
        assert fetched.json()["match"]["rng_seed"] == "TESTSEED12345678"

        listed = client.get("/api/v1/matches").json()
        assert listed["matches"] == [match_id]

    def test_missing_profile(self, client):
        response = client.post("/api/v1/matches", json={"deck_cards": DECK})
        assert response.status_code == 400
        assert response.json()["error_code"] == "NO_PROFILE"

    def test_invalid_request(self, client):
        response = _create(client, deck_cards=None, collection_id="nope")
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"

    def test_match_not_found(self, client):
        response = client.get("/api/v1/matches/missing")
        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "MATCH_NOT_FOUND"
        assert body["api_version"] == "v1"

    def test_play_playable_card(self, client):
        body = _create(client).json()
        card_id = body["playable_cards"][0]

        response = client.post(f"/api/v1/matches/{body['match_id']}/play", json={"card_id": card_id})
        assert response.status_code == 200
        result = response.json()
        assert result["success"]
        player = result["match"]["player"]
        placed = player["discard"] + [slot["card_id"] for slot in player["champions"]]
        assert card_id in placed
        assert player["hand"].count(card_id) == body["player"]["hand"].count(card_id) - 1

    def test_rejected_play_is_not_http_error(self, client):
        match_id = _create(client).json()["match_id"]
        response = client.post(f"/api/v1/matches/{match_id}/play", json={"card_id": "ghost"})
        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["engine_error_code"] == "NOT_IN_HAND"

    def test_invalid_side(self, client):
        match_id = _create(client).json()["match_id"]
        response = client.post(
            f"/api/v1/matches/{match_id}/play", json={"card_id": "strike", "side": "referee"}
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"

    def test_end_turn(self, client):
        match_id = _create(client).json()["match_id"]
        response = client.post(f"/api/v1/matches/{match_id}/end-turn")
        assert response.status_code == 200
        result = response.json()
        assert result["success"]
        assert result["match"]["match"]["turn"] == 2
        assert result["opponent_actions"]

    def test_concede_and_delete(self, client):
        match_id = _create(client).json()["match_id"]
        conceded = client.post(f"/api/v1/matches/{match_id}/concede").json()
        assert conceded["match"]["winner"] == "opponent"

        deleted = client.delete(f"/api/v1/matches/{match_id}")
        assert deleted.json() == {"success": True, "match_id": match_id, "api_version": "v1"}
        assert client.get(f"/api/v1/matches/{match_id}").status_code == 404

    def test_concede_for_ai_rejected(self, client):
        match_id = _create(client).json()["match_id"]
        response = client.post(f"/api/v1/matches/{match_id}/concede", params={"side": "opponent"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"
        assert client.get(f"/api/v1/matches/{match_id}").json()["winner"] is None

    def test_delete_unknown(self, client):
        assert client.delete("/api/v1/matches/missing").status_code == 404


class TestContentEndpoints:

    def test_collections(self, client):
        body = client.get("/api/v1/collections").json()
        assert body["count"] == 1
        assert body["collections"][0]["id"] == "test"

    def test_deck_import(self, client):
        response = client.post(
            "/api/v1/decks/import",
            json={"name": "Mine", "collection": "test", "cards": ["oracle", "oracle", "ghost"]},
        )
        body = response.json()
        assert body["cards"] == ["oracle"]
        assert body["skipped"] == ["oracle", "ghost"]

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["service"] == "rocketcards-engine"

    def test_openapi_schema(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        assert "/api/v1/matches/{match_id}/end-turn" in paths
