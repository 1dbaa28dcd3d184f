"""
Tests for legal action generation.
"""

from ..engine_core.action import ActionType
from ..engine_core.action_generator import ActionGenerator, legal_actions
from ..engine_core.reducer import play_card
from ..engine_core.state import ChampionSlot, Phase, Side


class TestPlayableCards:
    """Tests for the playable card filter."""

    def test_unaffordable_cards_excluded(self, main_phase_snapshot, catalog):
        """blood_price (HP) and meteor (MP) are filtered out."""
        generator = ActionGenerator(catalog=catalog)
        ids = [card.id for card in generator.playable_cards(main_phase_snapshot, Side.PLAYER)]
        assert ids == ["strike", "focus", "haste", "mend"]

    def test_duplicates_listed_once(self, main_phase_snapshot, catalog):
        player = main_phase_snapshot.player._copy_with(hand=["strike", "strike", "mend"])
        snapshot = main_phase_snapshot.with_side(player)
        ids = [card.id for card in ActionGenerator(catalog).playable_cards(snapshot, Side.PLAYER)]
        assert ids == ["strike", "mend"]

    def test_no_plays_left_means_nothing_playable(self, main_phase_snapshot, catalog):
        """Following the list never triggers an overplay."""
        player = main_phase_snapshot.player._copy_with(extra_plays_remaining=0)
        snapshot = main_phase_snapshot.with_side(player)
        assert ActionGenerator(catalog).playable_cards(snapshot, Side.PLAYER) == []

    def test_unknown_ids_skipped(self, main_phase_snapshot, catalog):
        player = main_phase_snapshot.player._copy_with(hand=["ghost", "strike"])
        snapshot = main_phase_snapshot.with_side(player)
        ids = [card.id for card in ActionGenerator(catalog).playable_cards(snapshot, Side.PLAYER)]
        assert ids == ["strike"]

    def test_too_tired_means_nothing_playable(self, main_phase_snapshot, catalog):
        player = main_phase_snapshot.player._copy_with(fatigue=6)
        snapshot = main_phase_snapshot.with_side(player)
        assert ActionGenerator(catalog).playable_cards(snapshot, Side.PLAYER) == []

    def test_fatigue_five_still_playable(self, main_phase_snapshot, catalog):
        player = main_phase_snapshot.player._copy_with(fatigue=5)
        snapshot = main_phase_snapshot.with_side(player)
        ids = [card.id for card in ActionGenerator(catalog).playable_cards(snapshot, Side.PLAYER)]
        assert ids == ["strike", "focus", "haste", "mend"]

    def test_skills_need_a_champion(self, main_phase_snapshot, catalog):
        player = main_phase_snapshot.player._copy_with(hand=["guardian", "strike", "golden_idol"])
        snapshot = main_phase_snapshot.with_side(player)
        ids = [card.id for card in ActionGenerator(catalog).playable_cards(snapshot, Side.PLAYER)]
        assert ids == ["guardian", "strike"]

    def test_second_champion_excluded(self, main_phase_snapshot, catalog):
        player = main_phase_snapshot.player._copy_with(
            hand=["oracle", "strike", "golden_idol"],
            champions=[ChampionSlot(slot=1, card_id="guardian")],
        )
        snapshot = main_phase_snapshot.with_side(player)
        ids = [card.id for card in ActionGenerator(catalog).playable_cards(snapshot, Side.PLAYER)]
        assert ids == ["strike", "golden_idol"]

    def test_every_listed_card_is_accepted(self, main_phase_snapshot, catalog):
        """play_card succeeds for every card the generator lists."""
        generator = ActionGenerator(catalog)
        for card in generator.playable_cards(main_phase_snapshot, Side.PLAYER):
            result = play_card(
                main_phase_snapshot.match, main_phase_snapshot.player, card.id, catalog
            )
            assert result.success, card.id


class TestGenerate:
    """Tests for the full action list."""

    def test_start_phase_offers_start_turn(self, snapshot, catalog):
        actions = legal_actions(catalog, snapshot, Side.PLAYER)
        assert [a.action_type for a in actions] == [ActionType.START_TURN]

    def test_main_phase_offers_plays_and_end_turn(self, main_phase_snapshot, catalog):
        actions = legal_actions(catalog, main_phase_snapshot, Side.PLAYER)
        assert actions[-1].action_type is ActionType.END_TURN
        assert [a.card_id for a in actions[:-1]] == ["strike", "focus", "haste", "mend"]

    def test_end_phase_offers_only_end_turn(self, main_phase_snapshot, catalog):
        snapshot = main_phase_snapshot.with_match(
            main_phase_snapshot.match._copy_with(phase=Phase.END)
        )
        actions = legal_actions(catalog, snapshot, Side.PLAYER)
        assert [a.action_type for a in actions] == [ActionType.END_TURN]

    def test_waiting_side_has_no_actions(self, main_phase_snapshot, catalog):
        assert legal_actions(catalog, main_phase_snapshot, Side.OPPONENT) == []
