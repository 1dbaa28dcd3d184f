"""
Match State - Card definitions and the mutable-per-match state records.

Design principles:
- Immutable-friendly: engine operations return new state, inputs are untouched
- Serializable: every record converts to and from plain JSON-compatible dicts
- Cards are reference data; the engine never mutates a Card
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any
from enum import Enum


class CardType(Enum):
    """Card categories."""
    EVENT = "event"
    CHAMPION = "champion"
    TACTIC = "tactic"
    SKILL = "skill"

    @classmethod
    def parse(cls, value: str) -> CardType:
        """Accept both singular and plural forms ("events" -> EVENT)."""
        value = value.lower()
        if value.endswith("s") and value[:-1] in {t.value for t in cls}:
            value = value[:-1]
        return cls(value)


class Rarity(Enum):
    """Card scarcity tiers."""
    COMMON = "common"
    RARE = "rare"
    UNIQUE = "unique"


class Strategy(Enum):
    AGGRESSIVE = "aggressive"
    BALANCED = "balanced"
    DEFENSIVE = "defensive"


class KeyStat(Enum):
    STRENGTH = "strength"
    INTELLIGENCE = "intelligence"
    CHARISMA = "charisma"


class Side(Enum):
    """Which side of the table a player state belongs to."""
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> Side:
        return Side.OPPONENT if self is Side.PLAYER else Side.PLAYER

    @property
    def label(self) -> str:
        """Capitalised name used in match log messages."""
        return self.value.capitalize()


class Phase(Enum):
    """
    Turn phases produced by the engine.

    The presentation layer also names battle/resolve phases; those
    are not part of this engine's state machine.
    """
    START = "start"
    MAIN = "main"
    END = "end"


class OpponentType(Enum):
    AI = "ai"
    PVP = "pvp"


class AIDifficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class CardCost:
    """
    Signed resource deltas applied when a card is played.

    A negative value is a cost paid, a positive value is a bonus.
    """
    hp: int = 0
    mp: int = 0
    fatigue: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"HP": self.hp, "MP": self.mp, "fatigue": self.fatigue}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CardCost:
        return cls(
            hp=int(data.get("HP", 0)),
            mp=int(data.get("MP", 0)),
            fatigue=int(data.get("fatigue", 0)),
        )


@dataclass(frozen=True)
class Card:
    """
    A card definition from a content collection.

    Match state refers to cards by id only; this is the definition
    those ids resolve to.
    """
    id: str
    title: str
    type: CardType
    rarity: Rarity
    collection: str
    description: str = ""
    effect: str = ""
    cost: CardCost = field(default_factory=CardCost)
    tags: tuple[str, ...] = ()
    flavor: str | None = None
    token_cost: int | None = None
    image_description: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "imageDescription": self.image_description,
            "type": self.type.value,
            "rarity": self.rarity.value,
            "effect": self.effect,
            "cost": self.cost.to_dict(),
            "tags": list(self.tags),
            "collection": self.collection,
        }
        if self.flavor is not None:
            data["flavor"] = self.flavor
        if self.token_cost is not None:
            data["tokenCost"] = self.token_cost
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], collection: str | None = None) -> Card:
        """Build a card from a content record. Raises KeyError/ValueError if malformed."""
        return cls(
            id=data["id"],
            title=data["title"],
            type=CardType.parse(data["type"]),
            rarity=Rarity(data["rarity"]),
            collection=data.get("collection") or collection or "",
            description=data.get("description", ""),
            effect=data.get("effect", ""),
            cost=CardCost.from_dict(data.get("cost", {})),
            tags=tuple(data.get("tags", [])),
            flavor=data.get("flavor"),
            token_cost=data.get("tokenCost"),
            image_description=data.get("imageDescription", ""),
        )


@dataclass
class Collection:
    """A named themed set of cards."""
    id: str
    name: str
    description: str = ""
    cards: list[Card] = field(default_factory=list)

    def get_card(self, card_id: str) -> Card | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None


@dataclass
class Deck:
    """A named ordered list of card ids drawn from one collection."""
    name: str
    cards: list[str] = field(default_factory=list)
    collection: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "collection": self.collection, "cards": list(self.cards)}


@dataclass
class Profile:
    """A player's persistent identity."""
    display_name: str
    strategy: Strategy
    key_stat: KeyStat
    hp: int
    mp: int
    tokens: int = 0
    unlocked_cards: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "display_name": self.display_name,
            "strategy": self.strategy.value,
            "key_stat": self.key_stat.value,
            "hp": self.hp,
            "mp": self.mp,
            "tokens": self.tokens,
            "unlocked_cards": list(self.unlocked_cards),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Profile:
        return cls(
            display_name=data["display_name"],
            strategy=Strategy(data["strategy"]),
            key_stat=KeyStat(data["key_stat"]),
            hp=data["hp"],
            mp=data["mp"],
            tokens=data.get("tokens", 0),
            unlocked_cards=list(data.get("unlocked_cards", [])),
        )


CHAMPION_DEFAULT_HP = 10


@dataclass
class ChampionSlot:
    """
    A champion in play.

    Damage aimed at the side hits its champion before the side's own HP.
    """
    slot: int
    card_id: str
    attached_skills: list[str] = field(default_factory=list)
    status: list[str] = field(default_factory=list)
    current_hp: int = CHAMPION_DEFAULT_HP
    max_hp: int = CHAMPION_DEFAULT_HP

    def _copy_with(self, **kwargs) -> ChampionSlot:
        return replace(self, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "slot": self.slot,
            "card_id": self.card_id,
            "attached_skills": list(self.attached_skills),
            "status": list(self.status),
            "current_hp": self.current_hp,
            "max_hp": self.max_hp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChampionSlot:
        return cls(
            slot=data["slot"],
            card_id=data["card_id"],
            attached_skills=list(data.get("attached_skills", [])),
            status=list(data.get("status", [])),
            current_hp=data.get("current_hp", CHAMPION_DEFAULT_HP),
            max_hp=data.get("max_hp", CHAMPION_DEFAULT_HP),
        )


@dataclass
class PlayerState:
    """
    State for one side of a match.

    The deck is ordered with its top at the end of the list.
    """
    side: Side
    hp: int
    mp: int
    fatigue: int = 0
    hand: list[str] = field(default_factory=list)
    deck: list[str] = field(default_factory=list)
    discard: list[str] = field(default_factory=list)
    champions: list[ChampionSlot] = field(default_factory=list)
    extra_plays_remaining: int = 1
    flags: list[str] = field(default_factory=list)
    mp_regen: int = 3

    def _copy_with(self, **kwargs) -> PlayerState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "side": self.side.value,
            "hp": self.hp,
            "mp": self.mp,
            "fatigue": self.fatigue,
            "hand": list(self.hand),
            "deck": list(self.deck),
            "discard": list(self.discard),
            "champions": [c.to_dict() for c in self.champions],
            "extra_plays_remaining": self.extra_plays_remaining,
            "flags": list(self.flags),
            "mp_regen": self.mp_regen,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlayerState:
        return cls(
            side=Side(data["side"]),
            hp=data["hp"],
            mp=data["mp"],
            fatigue=data.get("fatigue", 0),
            hand=list(data.get("hand", [])),
            deck=list(data.get("deck", [])),
            discard=list(data.get("discard", [])),
            champions=[ChampionSlot.from_dict(c) for c in data.get("champions", [])],
            extra_plays_remaining=data.get("extra_plays_remaining", 1),
            flags=list(data.get("flags", [])),
            mp_regen=data.get("mp_regen", 3),
        )


@dataclass(frozen=True)
class MatchRules:
    """Rule set in force for a match."""
    hand_limit: int = 7
    champion_slots: int = 3
    play_limit_per_turn: int = 1
    upkeep_mp_regen: int = 3
    mp_ceiling: int = 10
    # Opt-in: use the per-strategy regen recorded on PlayerState at upkeep
    strategy_regen: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "hand_limit": self.hand_limit,
            "champion_slots": self.champion_slots,
            "play_limit_per_turn": self.play_limit_per_turn,
            "upkeep_mp_regen": self.upkeep_mp_regen,
            "mp_ceiling": self.mp_ceiling,
            "strategy_regen": self.strategy_regen,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchRules:
        defaults = cls()
        return cls(**{k: data.get(k, getattr(defaults, k)) for k in defaults.to_dict()})


@dataclass(frozen=True)
class LogEntry:
    """One line of the append-only match log."""
    message: str
    turn: int

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "turn": self.turn}


@dataclass
class MatchState:
    """
    Match-wide progress shared by both sides.

    All state changes go through the reducer functions.
    """
    turn: int = 0
    phase: Phase = Phase.START
    active_player: Side = Side.PLAYER
    log: list[LogEntry] = field(default_factory=list)
    rules: MatchRules = field(default_factory=MatchRules)
    rng_seed: str = ""

    # Options chosen when the match was created
    opponent_type: OpponentType = OpponentType.AI
    ai_difficulty: AIDifficulty = AIDifficulty.MEDIUM
    timed_match: bool = True
    mulligan_enabled: bool = True

    def with_log(self, message: str) -> MatchState:
        """Return new state with a log entry appended for the current turn."""
        return self._copy_with(log=[*self.log, LogEntry(message=message, turn=self.turn)])

    def _copy_with(self, **kwargs) -> MatchState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "turn": self.turn,
            "phase": self.phase.value,
            "active_player": self.active_player.value,
            "log": [entry.to_dict() for entry in self.log],
            "rules": self.rules.to_dict(),
            "rng_seed": self.rng_seed,
            "opponent_type": self.opponent_type.value,
            "ai_difficulty": self.ai_difficulty.value,
            "timed_match": self.timed_match,
            "mulligan_enabled": self.mulligan_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchState:
        return cls(
            turn=data["turn"],
            phase=Phase(data["phase"]),
            active_player=Side(data["active_player"]),
            log=[LogEntry(**entry) for entry in data.get("log", [])],
            rules=MatchRules.from_dict(data.get("rules", {})),
            rng_seed=data.get("rng_seed", ""),
            opponent_type=OpponentType(data.get("opponent_type", "ai")),
            ai_difficulty=AIDifficulty(data.get("ai_difficulty", "medium")),
            timed_match=data.get("timed_match", True),
            mulligan_enabled=data.get("mulligan_enabled", True),
        )


@dataclass
class MatchSnapshot:
    """The match state together with both player states."""
    match: MatchState
    player: PlayerState
    opponent: PlayerState

    def get_side(self, side: Side) -> PlayerState:
        return self.player if side is Side.PLAYER else self.opponent

    @property
    def active(self) -> PlayerState:
        return self.get_side(self.match.active_player)

    def with_side(self, state: PlayerState) -> MatchSnapshot:
        """Return new snapshot with one side's state replaced."""
        if state.side is Side.PLAYER:
            return MatchSnapshot(match=self.match, player=state, opponent=self.opponent)
        return MatchSnapshot(match=self.match, player=self.player, opponent=state)

    def with_match(self, match: MatchState) -> MatchSnapshot:
        return MatchSnapshot(match=match, player=self.player, opponent=self.opponent)

    def to_dict(self) -> dict[str, Any]:
        return {
            "match": self.match.to_dict(),
            "player": self.player.to_dict(),
            "opponent": self.opponent.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchSnapshot:
        return cls(
            match=MatchState.from_dict(data["match"]),
            player=PlayerState.from_dict(data["player"]),
            opponent=PlayerState.from_dict(data["opponent"]),
        )
