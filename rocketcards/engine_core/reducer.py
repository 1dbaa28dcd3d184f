"""
Reducer - Applies rule transitions to match state.

The reducer functions are the single point of state change.

Design principles:
- Pure functions: (state, ...) -> new state; inputs are never mutated
- Validates before applying; a rejected play leaves state unchanged
  except for the deliberate overplay penalty
- Never raises for illegal actions; failures are reported in the result
- Delegates card effects to an EffectResolver
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .state import (
    AIDifficulty,
    Card,
    CardType,
    ChampionSlot,
    Deck,
    MatchRules,
    MatchSnapshot,
    MatchState,
    OpponentType,
    Phase,
    PlayerState,
    Profile,
    Side,
)
from .action import Action, ActionResult, ActionType, ErrorCode
from .effect_resolver import BasicEffectResolver, EffectResolver
from .rng import generate_seed, shuffle
from .stats import calculate_player_stats, mp_regen_for

if TYPE_CHECKING:
    from ..content.collections import CardCatalog

STARTING_HAND_SIZE = 5
OVERPLAY_HP_PENALTY = 2
OVERPLAY_FATIGUE_PENALTY = 1
# Fatigue below LIGHT allows two plays, up to HEAVY one, above that none
FATIGUE_LIGHT = 3
FATIGUE_HEAVY = 5


@dataclass
class PlayResult:
    """
    Outcome of an attempted card play.

    The returned states are always usable: unchanged on a plain
    rejection, penalised on an overplay, updated on success.
    opponent is only set when a successful play touched the other side.
    """
    success: bool
    match: MatchState
    player: PlayerState
    error: str | None = None
    error_code: ErrorCode | None = None
    opponent: PlayerState | None = None

    def applied_to(self, snapshot: MatchSnapshot) -> MatchSnapshot:
        """Fold this result into the snapshot the play was made from."""
        new_state = snapshot.with_side(self.player)
        if self.opponent is not None:
            new_state = new_state.with_side(self.opponent)
        return new_state.with_match(self.match)


# =============================================================================
# Match Initializer
# =============================================================================

def initialize_match(
    profile: Profile,
    deck: Deck | None,
    opponent_type: OpponentType = OpponentType.AI,
    ai_difficulty: AIDifficulty = AIDifficulty.MEDIUM,
    timed_match: bool = True,
    mulligan_enabled: bool = True,
    seed: str | None = None,
    rules: MatchRules | None = None,
) -> MatchSnapshot:
    """
    Build the initial match snapshot from a profile and a deck.

    The opponent receives an identical copy of the shuffled deck and
    the same starting resources; there is no opponent profile yet.
    """
    rules = rules or MatchRules()
    rng_seed = seed or generate_seed()

    player_deck = list(deck.cards) if deck else []
    shuffle(player_deck, rng_seed)
    opponent_deck = list(player_deck)

    player_hand = player_deck[:STARTING_HAND_SIZE]
    player_deck = player_deck[STARTING_HAND_SIZE:]
    opponent_hand = opponent_deck[:STARTING_HAND_SIZE]
    opponent_deck = opponent_deck[STARTING_HAND_SIZE:]

    stats = calculate_player_stats(profile.strategy, profile.key_stat)
    regen = mp_regen_for(profile.strategy)

    def side_state(side: Side, hand: list[str], draw_pile: list[str]) -> PlayerState:
        return PlayerState(
            side=side,
            hp=stats.hp,
            mp=stats.mp,
            fatigue=0,
            hand=hand,
            deck=draw_pile,
            discard=[],
            champions=[],
            extra_plays_remaining=rules.play_limit_per_turn,
            flags=[],
            mp_regen=regen,
        )

    match = MatchState(
        turn=0,
        phase=Phase.START,
        active_player=Side.PLAYER,
        log=[],
        rules=rules,
        rng_seed=rng_seed,
        opponent_type=opponent_type,
        ai_difficulty=ai_difficulty,
        timed_match=timed_match,
        mulligan_enabled=mulligan_enabled,
    )

    return MatchSnapshot(
        match=match,
        player=side_state(Side.PLAYER, player_hand, player_deck),
        opponent=side_state(Side.OPPONENT, opponent_hand, opponent_deck),
    )


# =============================================================================
# Phase Transitioner
# =============================================================================

def start_of_turn_draw(
    match: MatchState, player: PlayerState
) -> tuple[MatchState, PlayerState]:
    """
    Draw one card from the top (end) of the deck and open the main phase.

    Not idempotent: the controller calls this once per turn.
    """
    hand = list(player.hand)
    deck = list(player.deck)
    if deck:
        hand.append(deck.pop())

    new_player = player._copy_with(
        hand=hand,
        deck=deck,
        extra_plays_remaining=match.rules.play_limit_per_turn,
    )
    return match._copy_with(phase=Phase.MAIN), new_player


def upkeep(match: MatchState, player: PlayerState) -> tuple[MatchState, PlayerState]:
    """
    Regenerate MP and open the main phase.

    Uses the flat upkeep regen unless the rules opt into the
    per-strategy value. The result is clamped to the MP ceiling, so a
    side starting above it comes down to it.
    Not idempotent: the controller calls this once per turn.
    """
    rules = match.rules
    regen = player.mp_regen if rules.strategy_regen else rules.upkeep_mp_regen
    new_mp = min(player.mp + regen, rules.mp_ceiling)

    new_player = player._copy_with(
        mp=new_mp,
        extra_plays_remaining=rules.play_limit_per_turn,
    )
    return match._copy_with(phase=Phase.MAIN), new_player


# =============================================================================
# Card Play Validator/Executor
# =============================================================================

def max_plays_for_fatigue(fatigue: int) -> int:
    """Plays a side's fatigue allows per turn: 2 below 3, 1 up to 5, then none."""
    if fatigue < FATIGUE_LIGHT:
        return 2
    if fatigue <= FATIGUE_HEAVY:
        return 1
    return 0


def placement_error(player: PlayerState, card: Card) -> ErrorCode | None:
    """
    Check where a champion or skill card would go.

    A side fields one champion at a time, and a skill needs a champion
    to attach to. Other card types always pass.
    """
    if card.type is CardType.CHAMPION and player.champions:
        return ErrorCode.CHAMPION_IN_PLAY
    if card.type is CardType.SKILL and not player.champions:
        return ErrorCode.NO_CHAMPION
    return None


def play_card(
    match: MatchState,
    player: PlayerState,
    card_id: str,
    catalog: CardCatalog,
    resolver: EffectResolver | None = None,
    opponent: PlayerState | None = None,
) -> PlayResult:
    """
    Validate and execute playing a card from hand.

    Checks run in order and the first failure short-circuits. Only the
    overplay branch changes state on failure.

    Champions go into play and skills attach to the side's champion.
    Every other card goes to the discard pile and its effect is
    resolved; effects aimed at the other side need opponent.
    """
    label = player.side.label

    if match.active_player is not player.side:
        return PlayResult(False, match, player, f"Not {player.side.value}'s turn",
                          ErrorCode.NOT_YOUR_TURN)

    if match.phase is not Phase.MAIN:
        return PlayResult(False, match, player, "Not in main phase", ErrorCode.WRONG_PHASE)

    if card_id not in player.hand:
        return PlayResult(False, match, player, f"Card {card_id} not in hand",
                          ErrorCode.NOT_IN_HAND)

    if max_plays_for_fatigue(player.fatigue) <= 0:
        new_match = match.with_log(
            f"{label} cannot play card - Fatigue too high ({player.fatigue})"
        )
        return PlayResult(False, new_match, player, "Fatigue too high",
                          ErrorCode.FATIGUE_LIMIT)

    if player.extra_plays_remaining <= 0:
        penalised = player._copy_with(
            hp=player.hp - OVERPLAY_HP_PENALTY,
            fatigue=player.fatigue + OVERPLAY_FATIGUE_PENALTY,
        )
        new_match = match.with_log(
            f"Penalty: {label} overplayed - lost {OVERPLAY_HP_PENALTY} HP "
            f"and gained {OVERPLAY_FATIGUE_PENALTY} fatigue"
        )._copy_with(phase=Phase.END)
        return PlayResult(False, new_match, penalised, "No plays remaining this turn",
                          ErrorCode.OVERPLAY)

    card = catalog.find(card_id)
    if card is None:
        new_match = match.with_log(f"{label} cannot play card - {card_id} not found in collections")
        return PlayResult(False, new_match, player, f"Card {card_id} not found",
                          ErrorCode.CARD_NOT_FOUND)

    if player.hp + card.cost.hp < 0:
        new_match = match.with_log(
            f"{label} cannot play {card.title} - HP cost too high ({player.hp + card.cost.hp})"
        )
        return PlayResult(False, new_match, player, f"Cannot afford {card.title}",
                          ErrorCode.CANNOT_AFFORD)

    if player.mp + card.cost.mp < 0:
        new_match = match.with_log(
            f"{label} cannot play {card.title} - MP cost too high ({player.mp + card.cost.mp})"
        )
        return PlayResult(False, new_match, player, f"Cannot afford {card.title}",
                          ErrorCode.CANNOT_AFFORD)

    placement = placement_error(player, card)
    if placement is ErrorCode.CHAMPION_IN_PLAY:
        new_match = match.with_log(f"{label} cannot play champion - already has one in play")
        return PlayResult(False, new_match, player, "A champion is already in play", placement)
    if placement is ErrorCode.NO_CHAMPION:
        new_match = match.with_log(f"{label} cannot play skill card - no champion in play")
        return PlayResult(False, new_match, player, "No champion in play", placement)

    hand = list(player.hand)
    hand.remove(card_id)
    new_player = player._copy_with(
        hp=player.hp + card.cost.hp,
        mp=player.mp + card.cost.mp,
        fatigue=player.fatigue + card.cost.fatigue,
        hand=hand,
    )

    if card.type is CardType.CHAMPION:
        new_player = new_player._copy_with(champions=[ChampionSlot(slot=1, card_id=card_id)])
        new_match = match.with_log(f"{label} played champion {card.title}")
    elif card.type is CardType.SKILL:
        champion, *rest = new_player.champions
        champion = champion._copy_with(attached_skills=[*champion.attached_skills, card_id])
        new_player = new_player._copy_with(champions=[champion, *rest])
        new_match = match.with_log(f"{label} attached skill {card.title} to champion")
    else:
        new_player = new_player._copy_with(discard=[*player.discard, card_id])
        resolver = resolver or BasicEffectResolver()
        new_match, new_player, opponent = resolver.resolve(match, new_player, card, opponent)
        new_match = new_match.with_log(f"{label} played {card.title}")

    new_player = new_player._copy_with(
        extra_plays_remaining=new_player.extra_plays_remaining - 1
    )
    return PlayResult(True, new_match, new_player, opponent=opponent)


# =============================================================================
# Turn Finalizer and Concede
# =============================================================================

def end_turn(
    match: MatchState, player: PlayerState, opponent: PlayerState
) -> MatchSnapshot:
    """
    Discard down to the hand limit and hand the turn to the other side.

    Excess cards leave from the end of the hand (most recently added first).
    """
    snapshot = MatchSnapshot(match=match, player=player, opponent=opponent)
    active = snapshot.active
    limit = match.rules.hand_limit

    hand = list(active.hand)
    discard = list(active.discard)
    new_match = match
    while len(hand) > limit:
        discard.append(hand.pop())
        new_match = new_match.with_log(
            f"{active.side.label} discarded a card due to hand limit ({limit} cards)"
        )

    snapshot = snapshot.with_side(active._copy_with(hand=hand, discard=discard))
    new_match = new_match._copy_with(
        turn=match.turn + 1,
        active_player=match.active_player.other,
        phase=Phase.START,
    )
    return snapshot.with_match(new_match)


def concede(snapshot: MatchSnapshot, side: Side = Side.PLAYER) -> MatchSnapshot:
    """Set the conceding side's HP to 0. The other side is untouched."""
    conceding = snapshot.get_side(side)
    new_match = snapshot.match.with_log(f"{side.label} conceded the match")
    return snapshot.with_side(conceding._copy_with(hp=0)).with_match(new_match)


# =============================================================================
# Action dispatch
# =============================================================================

@dataclass
class Reducer:
    """
    Reducer applies actions to match snapshots.

    Stateless - all state is in the snapshot.
    The catalog resolves card ids for validation.
    """
    catalog: CardCatalog
    resolver: EffectResolver = field(default_factory=BasicEffectResolver)

    def apply(self, snapshot: MatchSnapshot, action: Action) -> ActionResult:
        """
        Apply an action to the snapshot.

        Returns ActionResult with new state or error.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code=ErrorCode.NO_HANDLER,
                state=snapshot,
            )
        return handler(snapshot, action)

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.START_TURN: self._handle_start_turn,
            ActionType.PLAY_CARD: self._handle_play_card,
            ActionType.END_TURN: self._handle_end_turn,
            ActionType.CONCEDE: self._handle_concede,
        }
        return handlers.get(action_type)

    def _handle_start_turn(self, snapshot: MatchSnapshot, action: Action) -> ActionResult:
        """Draw, then upkeep, for the active side."""
        if action.side is not snapshot.match.active_player:
            return ActionResult.failure(
                f"Not {action.side.value}'s turn",
                error_code=ErrorCode.NOT_YOUR_TURN,
                state=snapshot,
            )
        match, active = start_of_turn_draw(snapshot.match, snapshot.active)
        match, active = upkeep(match, active)
        new_state = snapshot.with_side(active).with_match(match)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Turn {match.turn} started for {action.side.label}"],
        )

    def _handle_play_card(self, snapshot: MatchSnapshot, action: Action) -> ActionResult:
        acting = snapshot.get_side(action.side)
        result = play_card(
            snapshot.match,
            acting,
            action.card_id or "",
            self.catalog,
            self.resolver,
            opponent=snapshot.get_side(action.side.other),
        )
        if not result.success:
            # Silent rejections hand back the original snapshot
            unchanged = result.match is snapshot.match and result.player is acting
            new_state = snapshot if unchanged else result.applied_to(snapshot)
            return ActionResult.failure(result.error or "", result.error_code, state=new_state)
        new_state = result.applied_to(snapshot)
        return ActionResult.success_with_state(
            new_state,
            changes=[result.match.log[-1].message],
        )

    def _handle_end_turn(self, snapshot: MatchSnapshot, action: Action) -> ActionResult:
        if action.side is not snapshot.match.active_player:
            return ActionResult.failure(
                f"Not {action.side.value}'s turn",
                error_code=ErrorCode.NOT_YOUR_TURN,
                state=snapshot,
            )
        new_state = end_turn(snapshot.match, snapshot.player, snapshot.opponent)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Turn ended. Next player: {new_state.match.active_player.label}"],
        )

    def _handle_concede(self, snapshot: MatchSnapshot, action: Action) -> ActionResult:
        new_state = concede(snapshot, action.side)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"{action.side.label} conceded"],
        )


def apply_action(
    catalog: CardCatalog, snapshot: MatchSnapshot, action: Action
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(catalog=catalog)
    return reducer.apply(snapshot, action)
