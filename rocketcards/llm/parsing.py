"""
Strategy Response Parsing

Models often wrap JSON in markdown fences or surround it with prose.
Parsing is permissive: fenced block, then whole text, then the first
{...} span, then a safe default that plays nothing and ends the turn.
"""

from __future__ import annotations
import json
import logging
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class PlannedPlay(BaseModel):
    """One card the model wants to play."""
    model_config = ConfigDict(populate_by_name=True)

    card_id: str = Field(alias="cardId", description="ID of card to play")
    reason: str = Field("", description="Brief explanation of the choice")


class OpponentStrategy(BaseModel):
    """Expected response shape: {plays: [{cardId, reason}], endTurn}."""
    model_config = ConfigDict(populate_by_name=True)

    plays: list[PlannedPlay] = Field(default_factory=list)
    end_turn: bool = Field(True, alias="endTurn")

    @classmethod
    def default(cls) -> OpponentStrategy:
        return cls(plays=[], end_turn=True)


def strip_fences(content: str) -> str:
    content = content.strip()
    if content.startswith("```"):
        content = _FENCE_OPEN.sub("", content)
        content = _FENCE_CLOSE.sub("", content)
    return content.strip()


def extract_json(content: str) -> dict[str, Any] | None:
    """Best-effort JSON object extraction; None if nothing parses."""
    text = strip_fences(content)
    try:
        data = json.loads(text)
        if isinstance(data, dict):
            return data
    except json.JSONDecodeError:
        pass

    match = _JSON_OBJECT.search(content)
    if match:
        try:
            data = json.loads(match.group())
            if isinstance(data, dict):
                return data
        except json.JSONDecodeError:
            pass
    return None


def parse_strategy_response(content: str) -> OpponentStrategy:
    """Parse model output into an OpponentStrategy, defaulting on any failure."""
    data = extract_json(content)
    if data is None:
        logger.warning("Could not extract JSON from LLM response: %.200s", content)
        return OpponentStrategy.default()

    try:
        return OpponentStrategy.model_validate(data)
    except ValidationError as e:
        logger.warning("LLM response did not match strategy shape: %s", e)
        return OpponentStrategy.default()
