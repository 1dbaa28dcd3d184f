"""
LLM Provider

Async completion client for the opponent strategy prompt.

Two wire formats, picked from the configured endpoint:
- Ollama:  POST {host}/api/generate {model, prompt, stream, options}
- OpenAI-style completion: POST {endpoint} {model, prompt, max_tokens, temperature, stop}
"""

from __future__ import annotations
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from .config import LLMConfig

logger = logging.getLogger(__name__)

STOP_SEQUENCES = ["\n\n"]


@dataclass
class LLMResponse:
    """Response from an LLM completion."""
    content: str
    model: str
    raw_response: Optional[Any] = None


class LLMProvider(ABC):
    """Abstract base class for completion providers."""

    @abstractmethod
    async def complete(self, prompt: str) -> LLMResponse:
        """Generate a completion for the given prompt."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier."""
        pass


def extract_content(data: Any) -> str:
    """
    Pull the generated text out of a provider response.

    Checks, in order: choices[0].text, response, message.content, a bare
    string. Anything else is returned re-serialized.
    """
    if isinstance(data, str):
        return data
    if isinstance(data, dict):
        choices = data.get("choices")
        if choices and isinstance(choices[0], dict) and choices[0].get("text"):
            return choices[0]["text"]
        if data.get("response"):
            return data["response"]
        message = data.get("message")
        if isinstance(message, dict) and message.get("content"):
            return message["content"]
    return json.dumps(data)


class HTTPCompletionProvider(LLMProvider):
    """
    Completion provider over HTTP using aiohttp.

    Usage:
        provider = HTTPCompletionProvider(LLMConfig.from_env())
        response = await provider.complete(prompt)
    """

    def __init__(self, config: LLMConfig | None = None):
        self.config = config or LLMConfig.from_env()

    @property
    def model_name(self) -> str:
        return self.config.model_name

    @property
    def url(self) -> str:
        if self.config.is_ollama:
            return f"{self.config.api_endpoint.rstrip('/')}/api/generate"
        return self.config.api_endpoint

    def build_payload(self, prompt: str) -> dict[str, Any]:
        config = self.config
        if config.is_ollama:
            return {
                "model": config.model_name,
                "prompt": prompt,
                "stream": False,
                "options": {
                    "num_predict": config.max_tokens,
                    "temperature": config.temperature,
                    "stop": STOP_SEQUENCES,
                },
            }
        return {
            "model": config.model_name,
            "prompt": prompt,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "stop": STOP_SEQUENCES,
        }

    async def complete(self, prompt: str) -> LLMResponse:
        """
        POST the prompt and return the extracted text.

        Raises RuntimeError on a non-200 status; aiohttp errors propagate.
        """
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        payload = self.build_payload(prompt)
        logger.debug("LLM request to %s (ollama=%s)", self.url, self.config.is_ollama)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.url, json=payload, headers=self.config.headers) as resp:
                if resp.status != 200:
                    error_text = await resp.text()
                    raise RuntimeError(f"LLM API error {resp.status}: {error_text}")
                data = await resp.json(content_type=None)

        content = extract_content(data)
        logger.debug("LLM response content: %s", content)
        return LLMResponse(content=content, model=self.model_name, raw_response=data)
