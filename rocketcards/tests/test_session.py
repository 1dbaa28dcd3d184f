"""
Tests for the session layer.

Tests:
- Snapshot persistence
- Match controller sequencing and opponent turns
- Match manager bookkeeping
"""

import asyncio
import json

import pytest

from ..bots.local_ai import LocalAIPolicy
from ..bots.llm_opponent import LLMOpponentPolicy
from ..bots.policy import OpponentDecision, OpponentPolicy, PassPolicy
from ..engine_core.action import ErrorCode
from ..engine_core.state import AIDifficulty, OpponentType, Phase, Side
from ..llm.config import LLMConfig
from ..session.controller import MAX_DECISION_ROUNDS, MatchController
from ..session.manager import MatchManager, MatchNotFoundError
from ..session.snapshot import (
    SNAPSHOT_VERSION,
    SnapshotStore,
    snapshot_from_dict,
    snapshot_to_dict,
)


class FailingPolicy(OpponentPolicy):
    async def decide(self, snapshot, side=Side.OPPONENT):
        raise RuntimeError("model unavailable")


class SlowPolicy(OpponentPolicy):
    async def decide(self, snapshot, side=Side.OPPONENT):
        await asyncio.sleep(5)
        return OpponentDecision(plays=list(snapshot.get_side(side).hand))


class GreedyPolicy(OpponentPolicy):
    """Asks to play every card in hand, ignoring the play limit."""

    async def decide(self, snapshot, side=Side.OPPONENT):
        return OpponentDecision(plays=list(snapshot.get_side(side).hand))


class StallingPolicy(OpponentPolicy):
    """Never plays and never ends the turn."""

    def __init__(self):
        self.calls = 0

    async def decide(self, snapshot, side=Side.OPPONENT):
        self.calls += 1
        return OpponentDecision(plays=[], end_turn=False)


@pytest.fixture
def controller(catalog):
    return MatchController(catalog, opponent_policy=PassPolicy())


@pytest.fixture
def started(controller, profile, ten_card_deck):
    """Controller with a match started and the player's turn begun."""
    controller.start_match(profile, ten_card_deck, seed="TESTSEED12345678")
    controller.begin_turn()
    return controller


def _hand_to_opponent(controller):
    """End the player's turn so the opponent is up."""
    result = controller.end_turn(Side.PLAYER)
    assert result.success
    return controller


class TestSnapshotStore:
    """Tests for snapshot persistence."""

    def test_dict_carries_version(self, snapshot):
        data = snapshot_to_dict(snapshot)
        assert data["version"] == SNAPSHOT_VERSION
        assert snapshot_from_dict(data) == snapshot

    def test_unknown_version_rejected(self, snapshot):
        data = snapshot_to_dict(snapshot)
        data["version"] = SNAPSHOT_VERSION + 1
        with pytest.raises(ValueError):
            snapshot_from_dict(data)

    def test_save_and_load(self, tmp_path, main_phase_snapshot):
        store = SnapshotStore(tmp_path / "match.json")
        store.save(main_phase_snapshot)

        assert store.exists()
        assert store.load() == main_phase_snapshot

    def test_load_missing_returns_none(self, tmp_path):
        assert SnapshotStore(tmp_path / "none.json").load() is None

    def test_unreadable_file_returns_none(self, tmp_path):
        path = tmp_path / "match.json"
        path.write_text("{truncated", encoding="utf-8")
        assert SnapshotStore(path).load() is None

    def test_clear(self, tmp_path, snapshot):
        store = SnapshotStore(tmp_path / "match.json")
        store.save(snapshot)
        store.clear()
        assert not store.exists()
        store.clear()

    def test_saved_file_is_plain_json(self, tmp_path, snapshot):
        store = SnapshotStore(tmp_path / "match.json")
        store.save(snapshot)
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data["match"]["rng_seed"] == "TESTSEED12345678"
        assert data["player"]["side"] == "player"


class TestControllerLifecycle:
    """Tests for starting, guarding and restoring matches."""

    def test_no_match_guard(self, controller):
        result = controller.play_card("strike")
        assert not result.success
        assert result.error_code is ErrorCode.NO_MATCH
        assert controller.legal_actions() == []

    def test_start_match(self, controller, profile, ten_card_deck):
        snapshot = controller.start_match(profile, ten_card_deck, seed="SEED")
        assert controller.snapshot is snapshot
        assert snapshot.match.phase is Phase.START
        assert controller.winner is None

    def test_begin_turn_once_per_turn(self, started):
        """A second begin_turn in the same turn is rejected, not a second draw."""
        hand = list(started.snapshot.player.hand)
        result = started.begin_turn()
        assert not result.success
        assert result.error_code is ErrorCode.WRONG_PHASE
        assert started.snapshot.player.hand == hand

    def test_begin_turn_draws(self, controller, profile, ten_card_deck):
        controller.start_match(profile, ten_card_deck, seed="SEED")
        result = controller.begin_turn()
        assert result.success
        assert len(controller.snapshot.player.hand) == 6
        assert controller.snapshot.match.phase is Phase.MAIN

    def test_rejected_play_keeps_snapshot(self, started):
        before = started.snapshot
        result = started.play_card("not-in-hand")
        assert result.error_code is ErrorCode.NOT_IN_HAND
        assert started.snapshot is before

    def test_concede_ends_match(self, started):
        result = started.concede(Side.PLAYER)
        assert result.success
        assert started.winner is Side.OPPONENT
        assert started.is_over

        after = started.end_turn()
        assert after.error_code is ErrorCode.MATCH_OVER
        assert started.legal_actions() == []

    def test_opponent_concede(self, started):
        started.concede(Side.OPPONENT)
        assert started.winner is Side.PLAYER

    def test_persist_and_restore(self, catalog, tmp_path, profile, ten_card_deck):
        store = SnapshotStore(tmp_path / "match.json")
        first = MatchController(catalog, store=store)
        first.start_match(profile, ten_card_deck, seed="SEED")
        first.begin_turn()

        second = MatchController(catalog, store=SnapshotStore(tmp_path / "match.json"))
        restored = second.restore()
        assert restored == first.snapshot
        assert second.snapshot.match.phase is Phase.MAIN

    def test_reset_clears_store(self, catalog, tmp_path, profile, ten_card_deck):
        store = SnapshotStore(tmp_path / "match.json")
        controller = MatchController(catalog, store=store)
        controller.start_match(profile, ten_card_deck, seed="SEED")
        controller.reset()
        assert controller.snapshot is None
        assert not store.exists()

    def test_restore_without_store(self, controller):
        assert controller.restore() is None


class TestOpponentTurn:
    """Tests for driving the opponent through a policy."""

    def test_pass_turn_hands_back(self, started):
        _hand_to_opponent(started)
        asyncio.run(started.run_opponent_turn())

        snapshot = started.snapshot
        assert snapshot.match.active_player is Side.PLAYER
        assert snapshot.match.phase is Phase.START
        assert snapshot.match.turn == 2
        assert len(snapshot.opponent.hand) == 6

    def test_not_opponents_turn(self, started):
        results = asyncio.run(started.run_opponent_turn())
        assert results[0].error_code is ErrorCode.NOT_YOUR_TURN

    def test_failing_policy_falls_back(self, catalog, profile, ten_card_deck):
        controller = MatchController(catalog, opponent_policy=FailingPolicy())
        controller.start_match(profile, ten_card_deck, seed="SEED")
        controller.begin_turn()
        _hand_to_opponent(controller)

        decision = asyncio.run(controller.decide_opponent_turn())
        assert decision.plays == []
        assert decision.end_turn

        asyncio.run(controller.run_opponent_turn())
        assert controller.snapshot.match.active_player is Side.PLAYER

    def test_slow_policy_times_out(self, catalog, profile, ten_card_deck):
        controller = MatchController(catalog, opponent_policy=SlowPolicy(), decision_timeout=0.01)
        controller.start_match(profile, ten_card_deck, seed="SEED")
        controller.begin_turn()
        _hand_to_opponent(controller)

        asyncio.run(controller.run_opponent_turn())
        assert controller.snapshot.opponent.discard == []
        assert controller.snapshot.match.active_player is Side.PLAYER

    def test_overplay_stops_the_plan(self, catalog, profile, ten_card_deck):
        """Plays past the limit are penalised once and the rest are dropped."""
        controller = MatchController(catalog, opponent_policy=GreedyPolicy())
        controller.start_match(profile, ten_card_deck, seed="SEED")
        controller.begin_turn()
        _hand_to_opponent(controller)
        fatigue_before = controller.snapshot.opponent.fatigue

        results = asyncio.run(controller.run_opponent_turn())
        overplays = [r for r in results if r.error_code is ErrorCode.OVERPLAY]
        assert len(overplays) == 1
        assert controller.snapshot.opponent.fatigue > fatigue_before
        messages = [entry.message for entry in controller.snapshot.match.log]
        assert "Penalty: Opponent overplayed - lost 2 HP and gained 1 fatigue" in messages
        assert controller.snapshot.match.active_player is Side.PLAYER

    def test_stalling_policy_is_cut_off(self, catalog, profile, ten_card_deck):
        policy = StallingPolicy()
        controller = MatchController(catalog, opponent_policy=policy)
        controller.start_match(profile, ten_card_deck, seed="SEED")
        controller.begin_turn()
        _hand_to_opponent(controller)

        asyncio.run(controller.run_opponent_turn())
        assert policy.calls == MAX_DECISION_ROUNDS
        assert controller.snapshot.match.active_player is Side.PLAYER

    def test_local_ai_never_overplays(self, catalog, profile, ten_card_deck):
        controller = MatchController(catalog, opponent_policy=LocalAIPolicy(catalog, AIDifficulty.HARD))
        controller.start_match(profile, ten_card_deck, seed="SEED")
        controller.begin_turn()
        _hand_to_opponent(controller)

        results = asyncio.run(controller.run_opponent_turn())
        assert all(r.error_code is not ErrorCode.OVERPLAY for r in results)
        opponent = controller.snapshot.opponent
        assert len(opponent.discard) + len(opponent.champions) >= 1

    def test_fatigue_limit_stops_the_plan(self, catalog, profile, ten_card_deck, tmp_path):
        """A side too tired to play is refused once and the rest of the plan is dropped."""
        store = SnapshotStore(tmp_path / "match.json")
        controller = MatchController(catalog, opponent_policy=GreedyPolicy(), store=store)
        controller.start_match(profile, ten_card_deck, seed="SEED")
        controller.begin_turn()
        _hand_to_opponent(controller)
        snapshot = controller.snapshot
        store.save(snapshot.with_side(snapshot.opponent._copy_with(fatigue=6)))
        controller.restore()

        results = asyncio.run(controller.run_opponent_turn())
        refused = [r for r in results if r.error_code is ErrorCode.FATIGUE_LIMIT]
        assert len(refused) == 1
        assert all(r.error_code is not ErrorCode.OVERPLAY for r in results)
        assert controller.snapshot.opponent.hp == snapshot.opponent.hp
        assert controller.snapshot.match.active_player is Side.PLAYER

    def test_no_policy_ends_turn(self, catalog, profile, ten_card_deck):
        controller = MatchController(catalog)
        controller.start_match(profile, ten_card_deck, seed="SEED")
        controller.begin_turn()
        _hand_to_opponent(controller)

        asyncio.run(controller.run_opponent_turn())
        assert controller.snapshot.match.active_player is Side.PLAYER

    def test_policy_can_drive_player_side(self, catalog, profile, ten_card_deck):
        controller = MatchController(catalog, opponent_policy=PassPolicy())
        controller.start_match(profile, ten_card_deck, seed="SEED")

        asyncio.run(controller.run_opponent_turn(Side.PLAYER))
        assert controller.snapshot.match.active_player is Side.OPPONENT
        assert controller.snapshot.match.turn == 1


class TestMatchManager:
    """Tests for tracking sessions."""

    def test_create_and_get(self, catalog):
        manager = MatchManager(catalog, llm_config=LLMConfig())
        session = manager.create_session()

        assert manager.get_session(session.match_id) is session
        assert isinstance(session.controller.opponent_policy, LocalAIPolicy)
        assert not session.is_active()

    def test_llm_policy_when_enabled(self, catalog):
        manager = MatchManager(catalog, llm_config=LLMConfig(enable_turn_resolver=True))
        session = manager.create_session()
        assert isinstance(session.controller.opponent_policy, LLMOpponentPolicy)

    def test_pvp_has_no_policy(self, catalog):
        manager = MatchManager(catalog, llm_config=LLMConfig())
        session = manager.create_session(opponent_type=OpponentType.PVP)
        assert session.controller.opponent_policy is None

    def test_matches_are_independent(self, catalog, profile, ten_card_deck):
        manager = MatchManager(catalog, llm_config=LLMConfig())
        first = manager.create_session()
        second = manager.create_session()
        first.controller.start_match(profile, ten_card_deck, seed="ONE")
        second.controller.start_match(profile, ten_card_deck, seed="TWO")
        first.controller.concede()

        assert first.controller.is_over
        assert not second.controller.is_over
        assert manager.list_active_sessions() == [second.match_id]

    def test_unknown_id(self, catalog):
        manager = MatchManager(catalog, llm_config=LLMConfig())
        with pytest.raises(MatchNotFoundError):
            manager.get_session("missing")
        with pytest.raises(MatchNotFoundError):
            manager.end_session("missing")

    def test_end_session_removes_snapshot(self, catalog, tmp_path, profile, ten_card_deck):
        manager = MatchManager(catalog, llm_config=LLMConfig(), snapshot_dir=tmp_path)
        session = manager.create_session()
        session.controller.start_match(profile, ten_card_deck, seed="SEED")
        assert (tmp_path / f"{session.match_id}.json").exists()

        manager.end_session(session.match_id)
        assert not (tmp_path / f"{session.match_id}.json").exists()
        assert manager.list_sessions() == []

    def test_cleanup_finished(self, catalog, profile, ten_card_deck):
        manager = MatchManager(catalog, llm_config=LLMConfig())
        done = manager.create_session()
        done.controller.start_match(profile, ten_card_deck, seed="SEED")
        done.controller.concede()
        done.created_at -= 7200
        live = manager.create_session()
        live.controller.start_match(profile, ten_card_deck, seed="SEED")

        assert manager.cleanup_finished_sessions(max_age_seconds=3600) == 1
        assert [s.match_id for s in manager.list_sessions()] == [live.match_id]
