"""
LLM Configuration

Endpoint, model and generation settings for the LLM opponent, read
from ROCKETCARDS_LLM_* environment variables.
"""

from __future__ import annotations
import os
from dataclasses import dataclass

DEFAULT_SYSTEM_PROMPT = (
    "You are the RocketCards engine. Resolve effects deterministically based on "
    "the game state and card effects. Return a JSON patch with resource deltas "
    "and board changes."
)

OLLAMA_HOSTS = ("localhost:11434", "127.0.0.1:11434")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() == "true"


@dataclass
class LLMConfig:
    """Configuration for the completion endpoint."""

    api_endpoint: str = "http://localhost:11434"
    api_key: str = "ollama"
    model_name: str = "gpt-oss:20b"
    max_tokens: int = 2048
    temperature: float = 0.7
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    enable_turn_resolver: bool = False
    timeout: float = 30.0

    @property
    def is_ollama(self) -> bool:
        """Whether the endpoint points at a local Ollama server."""
        return any(host in self.api_endpoint for host in OLLAMA_HOSTS)

    @property
    def headers(self) -> dict[str, str]:
        if self.is_ollama:
            return {"Content-Type": "application/json"}
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    @classmethod
    def from_env(cls) -> LLMConfig:
        """Build a config from ROCKETCARDS_LLM_* variables, falling back to defaults."""
        return cls(
            api_endpoint=os.environ.get("ROCKETCARDS_LLM_API_ENDPOINT", cls.api_endpoint),
            api_key=os.environ.get("ROCKETCARDS_LLM_API_KEY", cls.api_key),
            model_name=os.environ.get("ROCKETCARDS_LLM_MODEL_NAME", cls.model_name),
            max_tokens=int(os.environ.get("ROCKETCARDS_LLM_MAX_TOKENS", cls.max_tokens)),
            temperature=float(os.environ.get("ROCKETCARDS_LLM_TEMPERATURE", cls.temperature)),
            system_prompt=os.environ.get("ROCKETCARDS_LLM_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
            enable_turn_resolver=_env_bool("ROCKETCARDS_LLM_ENABLE_TURN_RESOLVER"),
            timeout=float(os.environ.get("ROCKETCARDS_LLM_TIMEOUT", cls.timeout)),
        )
