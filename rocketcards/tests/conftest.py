"""
Pytest fixtures for RocketCards tests.
"""

import pytest

from ..content.collections import CardCatalog, parse_collection
from ..engine_core.reducer import initialize_match
from ..engine_core.state import (
    Collection,
    Deck,
    KeyStat,
    MatchSnapshot,
    Phase,
    Profile,
    Strategy,
)
from ..content.profiles import create_profile


TEST_COLLECTION = {
    "id": "test",
    "name": "Test Set",
    "description": "Cards for engine tests",
    "cards": [
        {"id": "strike", "title": "Strike", "type": "events", "rarity": "common",
         "effect": "Deal 1 damage.", "cost": {"HP": 0, "MP": -2, "fatigue": 0}, "tags": []},
        {"id": "focus", "title": "Focus", "type": "tactics", "rarity": "common",
         "effect": "+3 MP", "cost": {"HP": 0, "MP": 0, "fatigue": 1}, "tags": ["mana"]},
        {"id": "haste", "title": "Haste", "type": "tactics", "rarity": "common",
         "effect": "Play one more card.", "cost": {"HP": 0, "MP": -1, "fatigue": 0},
         "tags": ["extra_play:+1"]},
        {"id": "mend", "title": "Mend", "type": "events", "rarity": "common",
         "effect": "Restore 3 HP.", "cost": {"HP": 3, "MP": -1, "fatigue": 0}, "tags": []},
        {"id": "blood_price", "title": "Blood Price", "type": "tactics", "rarity": "common",
         "effect": "Costs a lot of life.", "cost": {"HP": -40, "MP": 0, "fatigue": 0}, "tags": []},
        {"id": "meteor", "title": "Meteor", "type": "events", "rarity": "rare",
         "effect": "Deal 8 damage.", "cost": {"HP": 0, "MP": -20, "fatigue": 2}, "tags": []},
        {"id": "guardian", "title": "Guardian", "type": "champions", "rarity": "rare",
         "effect": "Summon a 2/4 champion.", "cost": {"HP": 0, "MP": -3, "fatigue": 0},
         "tags": ["champion"]},
        {"id": "oracle", "title": "Oracle", "type": "champions", "rarity": "unique",
         "effect": "Summon a 1/1 champion.", "cost": {"HP": 0, "MP": -4, "fatigue": 1},
         "tags": ["champion"]},
        {"id": "golden_idol", "title": "Golden Idol", "type": "skills", "rarity": "rare",
         "effect": "Shiny.", "cost": {"HP": 0, "MP": -1, "fatigue": 0}, "tags": [],
         "tokenCost": 10},
    ],
}


@pytest.fixture
def test_collection() -> Collection:
    """Parsed test collection."""
    return parse_collection(TEST_COLLECTION)


@pytest.fixture
def catalog(test_collection: Collection) -> CardCatalog:
    """Catalog over the test collection only."""
    return CardCatalog(collections=[test_collection])


@pytest.fixture
def profile() -> Profile:
    """Balanced / intelligence profile (hp 28, mp 14)."""
    return create_profile("Tester", Strategy.BALANCED, KeyStat.INTELLIGENCE)


@pytest.fixture
def ten_card_deck() -> Deck:
    """Ten distinct playable test cards."""
    return Deck(
        name="Ten",
        cards=["strike", "focus", "haste", "mend", "guardian",
               "oracle", "strike", "focus", "haste", "mend"],
        collection="test",
    )


@pytest.fixture
def snapshot(profile: Profile, ten_card_deck: Deck) -> MatchSnapshot:
    """Freshly initialized match with a fixed seed."""
    return initialize_match(profile, ten_card_deck, seed="TESTSEED12345678")


@pytest.fixture
def main_phase_snapshot(snapshot: MatchSnapshot) -> MatchSnapshot:
    """Player's turn, main phase, with a known hand."""
    player = snapshot.player._copy_with(
        hand=["strike", "focus", "haste", "mend", "blood_price", "meteor"],
    )
    match = snapshot.match._copy_with(phase=Phase.MAIN)
    return snapshot.with_side(player).with_match(match)
