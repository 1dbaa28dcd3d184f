"""
Collection Loader - Reads themed card collections from JSON files.

A collection file looks like:
    {"id": "fantasy", "name": "Fantasy Realms", "description": "...",
     "cards": [{"id": ..., "title": ..., "type": ..., "rarity": ...,
                "effect": ..., "cost": {"HP": 0, "MP": -2, "fatigue": 1},
                "tags": [...], "collection": "fantasy"}, ...]}

Missing or malformed files are logged and skipped; lookups for unknown
ids return None instead of raising.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from ..engine_core.state import Card, Collection

logger = logging.getLogger(__name__)

BUNDLED_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def parse_collection(data: dict) -> Collection:
    """Build a Collection from its JSON document. Raises KeyError/ValueError if malformed."""
    collection_id = data["id"]
    cards = [Card.from_dict(card, collection=collection_id) for card in data.get("cards", [])]
    return Collection(
        id=collection_id,
        name=data.get("name", collection_id),
        description=data.get("description", ""),
        cards=cards,
    )


def load_collection(path: str | Path) -> Collection | None:
    """Load one collection file; None if it cannot be read or parsed."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return parse_collection(data)
    except FileNotFoundError:
        logger.warning("Collection file not found: %s", path)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        logger.warning("Failed to load collection %s: %s", path, e)
    return None


def load_collections(directory: str | Path | None = None) -> list[Collection]:
    """Load every *.json collection in a directory, sorted by file name."""
    directory = Path(directory) if directory else BUNDLED_DATA_DIR
    if not directory.is_dir():
        logger.warning("Collection directory not found: %s", directory)
        return []

    collections = []
    for path in sorted(directory.glob("*.json")):
        collection = load_collection(path)
        if collection:
            collections.append(collection)
    logger.debug("Loaded %d collections from %s", len(collections), directory)
    return collections


@dataclass
class CardCatalog:
    """
    Read-only lookup across loaded collections.

    Usage:
        catalog = CardCatalog(load_collections())
        card = catalog.find("fantasy_fireball")
    """
    collections: list[Collection] = field(default_factory=list)

    def find(self, card_id: str) -> Card | None:
        """First matching card across collections, in load order."""
        for collection in self.collections:
            card = collection.get_card(card_id)
            if card:
                return card
        return None

    def get_collection(self, collection_id: str) -> Collection | None:
        for collection in self.collections:
            if collection.id == collection_id:
                return collection
        return None

    def cards(self) -> Iterable[Card]:
        for collection in self.collections:
            yield from collection.cards

    @classmethod
    def from_directory(cls, directory: str | Path | None = None) -> CardCatalog:
        return cls(collections=load_collections(directory))
