"""
Profiles - Player identity, derived stats, and the token balance.

Tokens are earned outside the engine and spent on cards that carry a
token_cost. Purchases never go negative and never touch match state.
"""

from __future__ import annotations
import logging
from dataclasses import replace

from ..engine_core.state import KeyStat, Profile, Strategy
from ..engine_core.stats import calculate_player_stats
from .collections import CardCatalog

logger = logging.getLogger(__name__)


def create_profile(
    display_name: str,
    strategy: Strategy | str,
    key_stat: KeyStat | str,
    tokens: int = 0,
) -> Profile:
    """Create a profile with hp/mp derived from strategy and key stat."""
    if not display_name.strip():
        raise ValueError("display_name must not be empty")
    strategy = Strategy(strategy)
    key_stat = KeyStat(key_stat)
    stats = calculate_player_stats(strategy, key_stat)
    return Profile(
        display_name=display_name.strip(),
        strategy=strategy,
        key_stat=key_stat,
        hp=stats.hp,
        mp=stats.mp,
        tokens=tokens,
    )


def award_tokens(profile: Profile, amount: int) -> Profile:
    """Return a profile with amount tokens added."""
    if amount < 0:
        raise ValueError("amount must be non-negative")
    return replace(profile, tokens=profile.tokens + amount)


def purchase_card(profile: Profile, card_id: str, catalog: CardCatalog) -> tuple[bool, Profile]:
    """
    Spend tokens on a card.

    Returns (success, profile). Fails without change when the card is
    unknown, has no token cost, or the balance is too low.
    """
    card = catalog.find(card_id)
    if card is None or not card.token_cost:
        return False, profile
    if profile.tokens < card.token_cost:
        return False, profile

    unlocked = list(profile.unlocked_cards)
    if card_id not in unlocked:
        unlocked.append(card_id)
    logger.info("%s purchased %s for %d tokens", profile.display_name, card_id, card.token_cost)
    return True, replace(profile, tokens=profile.tokens - card.token_cost, unlocked_cards=unlocked)
