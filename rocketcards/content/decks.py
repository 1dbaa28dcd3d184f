"""
Deck Building - Copy limits, auto-build, and the export/import document.

Copy limits per deck:
- common: unlimited
- rare: 2
- unique: 1

The export document is human-editable JSON:
    {"name": "My Deck", "collection": "fantasy", "cards": ["id", ...]}
Import re-validates every entry and skips the ones that fail rather
than rejecting the whole document.
"""

from __future__ import annotations
import json
import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from ..engine_core.rng import shuffle
from ..engine_core.state import Card, Collection, Deck, Rarity
from .collections import CardCatalog

logger = logging.getLogger(__name__)

DECK_SIZE = 30

COPY_LIMITS: dict[Rarity, float] = {
    Rarity.COMMON: math.inf,
    Rarity.RARE: 2,
    Rarity.UNIQUE: 1,
}


class DeckImportError(ValueError):
    """The deck document could not be parsed at all."""


class DeckDocument(BaseModel):
    """Deck export/import format."""
    name: str = Field(..., min_length=1, description="Deck name")
    collection: Optional[str] = Field(None, description="Source collection id")
    cards: list[str] = Field(default_factory=list, description="Card ids, in deck order")


@dataclass
class DeckImportResult:
    """An imported deck plus the entries that were dropped."""
    deck: Deck
    skipped: list[str] = field(default_factory=list)


def copy_limit(card: Card) -> float:
    return COPY_LIMITS[card.rarity]


def can_add_card(deck: Deck, card: Card) -> bool:
    """Whether one more copy of card fits the deck's copy limits and size."""
    if len(deck.cards) >= DECK_SIZE:
        return False
    return deck.cards.count(card.id) < copy_limit(card)


def add_to_deck(deck: Deck, card_id: str, catalog: CardCatalog) -> Deck:
    """Return a deck with one more copy of card_id, or the same deck if not allowed."""
    card = catalog.find(card_id)
    if card is None:
        logger.warning("Cannot add unknown card %s to deck %s", card_id, deck.name)
        return deck
    if not can_add_card(deck, card):
        return deck
    return Deck(name=deck.name, cards=[*deck.cards, card_id], collection=deck.collection)


def remove_from_deck(deck: Deck, card_id: str) -> Deck:
    """Return a deck with the first copy of card_id removed."""
    if card_id not in deck.cards:
        return deck
    cards = list(deck.cards)
    cards.remove(card_id)
    return Deck(name=deck.name, cards=cards, collection=deck.collection)


def auto_build_deck(
    collection: Collection,
    name: str | None = None,
    seed: str | None = None,
) -> Deck:
    """
    Fill a DECK_SIZE deck from a collection.

    Every unique once, every rare twice, then commons in rotation.
    Token-cost cards are never auto-selected.
    """
    free = [card for card in collection.cards if card.token_cost is None]
    uniques = [c for c in free if c.rarity is Rarity.UNIQUE]
    rares = [c for c in free if c.rarity is Rarity.RARE]
    commons = [c for c in free if c.rarity is Rarity.COMMON]
    for group in (uniques, rares, commons):
        shuffle(group, seed)

    cards: list[str] = []
    for unique in uniques:
        if len(cards) < DECK_SIZE:
            cards.append(unique.id)
    for rare in rares:
        for _ in range(2):
            if len(cards) < DECK_SIZE:
                cards.append(rare.id)

    if commons:
        remaining = DECK_SIZE - len(cards)
        for i in range(remaining):
            cards.append(commons[i % len(commons)].id)

    return Deck(name=name or f"{collection.name} Deck", cards=cards[:DECK_SIZE],
                collection=collection.id)


def export_deck(deck: Deck) -> str:
    """Serialize a deck to its JSON document."""
    document = DeckDocument(name=deck.name, collection=deck.collection, cards=list(deck.cards))
    return document.model_dump_json(indent=2)


def import_deck(text: str, catalog: CardCatalog) -> DeckImportResult:
    """
    Parse a deck document and re-validate its entries.

    Unknown ids and copies beyond the rarity limit or deck size are
    skipped. Raises DeckImportError if the document itself is invalid.
    """
    try:
        document = DeckDocument.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as e:
        raise DeckImportError(f"Invalid deck document: {e}") from e
    return validate_deck(document, catalog)


def validate_deck(document: DeckDocument, catalog: CardCatalog) -> DeckImportResult:
    """Build a deck from a parsed document, skipping entries that break the rules."""
    deck = Deck(name=document.name, cards=[], collection=document.collection)
    skipped: list[str] = []
    for card_id in document.cards:
        card = catalog.find(card_id)
        if card is None or not can_add_card(deck, card):
            skipped.append(card_id)
            continue
        deck.cards.append(card_id)

    if skipped:
        logger.info("Deck %s import skipped %d entries", deck.name, len(skipped))
    return DeckImportResult(deck=deck, skipped=skipped)
