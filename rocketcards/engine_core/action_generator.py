"""
Action Generator - Enumerates legal actions from a match snapshot.

The action generator is used by:
1. Opponent policies to list candidate plays
2. UI to highlight playable cards

A card is reported playable only if play_card would accept it, so a
caller following this list never triggers the overplay penalty.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .state import Card, MatchSnapshot, Phase, Side
from .action import Action
from .reducer import max_plays_for_fatigue, placement_error

if TYPE_CHECKING:
    from ..content.collections import CardCatalog


@dataclass
class ActionGenerator:
    """Generates legal actions for one side of a match."""
    catalog: CardCatalog

    def playable_cards(self, snapshot: MatchSnapshot, side: Side) -> list[Card]:
        """
        Cards in hand that would pass every play check, in hand order.

        Duplicate ids appear once.
        """
        match = snapshot.match
        state = snapshot.get_side(side)

        if match.active_player is not side or match.phase is not Phase.MAIN:
            return []
        if state.extra_plays_remaining <= 0 or max_plays_for_fatigue(state.fatigue) <= 0:
            return []

        playable: list[Card] = []
        seen: set[str] = set()
        for card_id in state.hand:
            if card_id in seen:
                continue
            seen.add(card_id)
            card = self.catalog.find(card_id)
            if card is None:
                continue
            if state.hp + card.cost.hp < 0 or state.mp + card.cost.mp < 0:
                continue
            if placement_error(state, card) is not None:
                continue
            playable.append(card)
        return playable

    def generate(self, snapshot: MatchSnapshot, side: Side) -> list[Action]:
        """
        Generate all legal actions for a side.

        End turn is available whenever it is the side's turn.
        """
        if snapshot.match.active_player is not side:
            return []

        if snapshot.match.phase is Phase.START:
            return [Action.start_turn(side)]

        actions = [Action.play_card(side, card.id) for card in self.playable_cards(snapshot, side)]
        actions.append(Action.end_turn(side))
        return actions


def legal_actions(catalog: CardCatalog, snapshot: MatchSnapshot, side: Side) -> list[Action]:
    """Convenience function to generate legal actions."""
    return ActionGenerator(catalog=catalog).generate(snapshot, side)
