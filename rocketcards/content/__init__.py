"""
Content - Card collections, decks, and player profiles.

Everything here is reference data the engine reads; none of it changes
during a match.
"""

from .collections import CardCatalog, load_collection, load_collections, parse_collection
from .decks import (
    COPY_LIMITS,
    DECK_SIZE,
    DeckDocument,
    DeckImportError,
    DeckImportResult,
    add_to_deck,
    auto_build_deck,
    can_add_card,
    export_deck,
    import_deck,
    remove_from_deck,
    validate_deck,
)
from .profiles import award_tokens, create_profile, purchase_card

__all__ = [
    "CardCatalog",
    "load_collection",
    "load_collections",
    "parse_collection",
    "COPY_LIMITS",
    "DECK_SIZE",
    "DeckDocument",
    "DeckImportError",
    "DeckImportResult",
    "add_to_deck",
    "auto_build_deck",
    "can_add_card",
    "export_deck",
    "import_deck",
    "remove_from_deck",
    "validate_deck",
    "award_tokens",
    "create_profile",
    "purchase_card",
]
