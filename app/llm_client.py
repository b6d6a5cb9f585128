"""
LLM client abstraction layer to support multiple providers.

This module provides a unified interface for different LLM providers,
making it easy to switch between OpenAI API and a local Ollama server while
keeping the same interface for the AI service.

Images are passed as ``(base64_data, mime_type)`` pairs and attached to the
last user message.
"""

from __future__ import annotations
from typing import List, Dict, Tuple, Optional
from abc import ABC, abstractmethod

import config

try:
    from ollama import Client as OllamaHTTPClient
except ImportError:
    OllamaHTTPClient = None

try:
    from openai import OpenAI
except ImportError:
    OpenAI = None


Image = Tuple[str, str]


class LLMResponse:
    """Unified response object for LLM responses."""

    def __init__(self, content: str):
        self.message = MessageContent(content)


class MessageContent:
    """Message content wrapper."""

    def __init__(self, content: str):
        self.content = content


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    def chat(
        self,
        model: str,
        messages: List[Dict[str, str]],
        *,
        temperature: Optional[float] = None,
        json_mode: bool = False,
        images: Optional[List[Image]] = None,
    ) -> LLMResponse:
        """Send a chat request to the LLM provider."""
        pass


class OllamaClient(LLMClient):
    """Ollama client implementation."""

    def __init__(self, host: str | None = None):
        if OllamaHTTPClient is None:
            raise ImportError("ollama package is required for OllamaClient")
        self.client = OllamaHTTPClient(
            host=host or config.OLLAMA_BASE_URL, timeout=config.LLM_TIMEOUT
        )

    def chat(self, model, messages, *, temperature=None, json_mode=False, images=None):
        """Send a chat request to Ollama."""
        messages = [dict(m) for m in messages]
        if images:
            messages[-1]["images"] = [data for data, _ in images]

        options = {}
        if temperature is not None:
            options["temperature"] = temperature

        response = self.client.chat(
            model=model,
            messages=messages,
            format="json" if json_mode else None,
            options=options,
        )
        return LLMResponse(response.message.content)


class OpenAIClient(LLMClient):
    """OpenAI client implementation."""

    def __init__(self, api_key: str | None = None):
        if OpenAI is None:
            raise ImportError("openai package is required for OpenAIClient")

        # Use provided API key or the configured one
        api_key = api_key or config.OPENAI_API_KEY
        if not api_key:
            raise ValueError("OpenAI API key is required. Set OPENAI_API_KEY environment variable or pass api_key parameter.")

        self.client = OpenAI(api_key=api_key, timeout=config.LLM_TIMEOUT)

    def chat(self, model, messages, *, temperature=None, json_mode=False, images=None):
        """Send a chat request to OpenAI."""
        messages = [dict(m) for m in messages]
        if images:
            parts = [{"type": "text", "text": messages[-1]["content"]}]
            for data, mime_type in images:
                parts.append({
                    "type": "image_url",
                    "image_url": {"url": f"data:{mime_type};base64,{data}"},
                })
            messages[-1]["content"] = parts

        if temperature is None:
            temperature = config.OPENAI_MODEL_PARAMS.get("temperature", 0.3)
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = self.client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=config.OPENAI_MODEL_PARAMS.get("max_tokens", 4096),
            **kwargs,
        )

        return LLMResponse(response.choices[0].message.content or "")


def get_llm_client(provider: str | None = None) -> LLMClient:
    """Factory function to get the appropriate LLM client based on configuration."""
    provider = (provider or config.LLM_PROVIDER).lower()

    if provider == "openai":
        return OpenAIClient()
    elif provider == "ollama":
        return OllamaClient()
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")


# One shared client per provider, built on first use
_llm_clients: Dict[str, LLMClient] = {}

def chat(
    model: str,
    messages: List[Dict[str, str]],
    *,
    temperature: Optional[float] = None,
    json_mode: bool = False,
    images: Optional[List[Image]] = None,
    provider: str | None = None,
) -> LLMResponse:
    """
    Unified chat function that works with any supported LLM provider.

    `provider` defaults to the configured one. Callers serving several users
    pass it per request; the process-wide setting is never changed.
    """
    provider = (provider or config.LLM_PROVIDER).lower()
    client = _llm_clients.get(provider)
    if client is None:
        client = _llm_clients[provider] = get_llm_client(provider)

    return client.chat(
        model, messages, temperature=temperature, json_mode=json_mode, images=images
    )
