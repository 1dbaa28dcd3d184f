"""
LLM Subsystem

Prompting a completion endpoint for opponent turn strategy.
Supports a local Ollama server or any OpenAI-style completion endpoint.
"""

from .config import LLMConfig
from .provider import HTTPCompletionProvider, LLMProvider, LLMResponse, extract_content
from .prompts import build_strategy_prompt, game_state_to_json
from .parsing import OpponentStrategy, PlannedPlay, extract_json, parse_strategy_response

__all__ = [
    "LLMConfig",
    "HTTPCompletionProvider",
    "LLMProvider",
    "LLMResponse",
    "extract_content",
    "build_strategy_prompt",
    "game_state_to_json",
    "OpponentStrategy",
    "PlannedPlay",
    "extract_json",
    "parse_strategy_response",
]
