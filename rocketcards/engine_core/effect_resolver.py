"""
Effect Resolver - Applies a played card's effect.

The card play executor calls a resolver after costs are paid and the
card has moved to the discard pile. The resolver is an interface so a
richer resolution engine can replace the basic one without touching
the play validation flow.
"""

from __future__ import annotations
import re
from abc import ABC, abstractmethod

from .state import Card, KeyStat, MatchState, PlayerState, Strategy
from .stats import calculate_player_stats

MP_RESTORE_TEXT = "+3 MP"
MP_RESTORE_AMOUNT = 3
EXTRA_PLAY_TAG = "extra_play:+1"
DAMAGE_PATTERN = re.compile(r"deal (\d+) damage", re.IGNORECASE)


class EffectResolver(ABC):
    """Resolves a card's effect for the side that played it."""

    @abstractmethod
    def resolve(
        self,
        match: MatchState,
        player: PlayerState,
        card: Card,
        opponent: PlayerState | None = None,
    ) -> tuple[MatchState, PlayerState, PlayerState | None]:
        """
        Apply the effect of a card that has just been played.

        opponent is the other side of the table; effects that target it
        are skipped when it is not given.

        Returns (new match state, new player state, new opponent state).
        """
        pass


def deal_damage(
    match: MatchState,
    defender: PlayerState,
    amount: int,
    source: str,
) -> tuple[MatchState, PlayerState]:
    """
    Deal damage to a side, hitting its champion first.

    A champion reduced to 0 HP is destroyed and goes to its owner's
    discard pile. Excess damage does not carry over to the side.
    """
    if defender.champions:
        target, *rest = defender.champions
        target = target._copy_with(current_hp=target.current_hp - amount)
        match = match.with_log(f"{source} dealt {amount} damage to {defender.side.label}'s champion")
        if target.current_hp <= 0:
            defender = defender._copy_with(
                champions=rest,
                discard=[*defender.discard, target.card_id],
            )
            return match.with_log(f"{defender.side.label}'s champion was destroyed"), defender
        return match, defender._copy_with(champions=[target, *rest])

    defender = defender._copy_with(hp=defender.hp - amount)
    return match.with_log(f"{source} dealt {amount} damage to {defender.side.label}"), defender


class BasicEffectResolver(EffectResolver):
    """
    Provisional resolver matching effect text and tags literally.

    Recognised:
    - effect text containing "+3 MP": restore 3 MP, capped at the
      MP of a balanced/intelligence profile
    - tag "extra_play:+1": one more play this turn
    - effect text "deal N damage" (any case): N damage to the opponent
    """

    def resolve(
        self,
        match: MatchState,
        player: PlayerState,
        card: Card,
        opponent: PlayerState | None = None,
    ) -> tuple[MatchState, PlayerState, PlayerState | None]:
        if MP_RESTORE_TEXT in card.effect:
            cap = calculate_player_stats(Strategy.BALANCED, KeyStat.INTELLIGENCE).mp
            player = player._copy_with(mp=min(player.mp + MP_RESTORE_AMOUNT, cap))

        if EXTRA_PLAY_TAG in card.tags:
            player = player._copy_with(
                extra_plays_remaining=player.extra_plays_remaining + 1
            )

        damage = DAMAGE_PATTERN.search(card.effect)
        if damage and opponent is not None:
            match, opponent = deal_damage(match, opponent, int(damage.group(1)), card.title)

        return match, player, opponent
