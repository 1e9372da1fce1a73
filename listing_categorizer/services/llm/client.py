"""LLM Client abstraction for the AI fallback classifier.

Supports multiple backends:
- OpenAI-compatible chat completions gateway (primary, accepts image input)
- Ollama (for local deployment, text only)
- Mock (for testing)

Example:
    client = OpenAICompatibleClient(LLMConfig(api_key="..."))
    result = await client.complete("Titel: Fender Twin Reverb", system_prompt=SYSTEM_PROMPT)
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, List, Dict
from enum import Enum
import structlog
import httpx

from listing_categorizer.errors import LLMError

logger = structlog.get_logger(__name__)

# Seconds added to the wait before each further attempt
RETRY_BACKOFF_SECONDS = 0.4


class LLMBackend(str, Enum):
    """Supported LLM backends."""
    OLLAMA = "ollama"
    OPENAI = "openai"
    MOCK = "mock"  # For testing


@dataclass
class LLMConfig:
    """Configuration for LLM client."""
    backend: LLMBackend = LLMBackend.OPENAI
    model: str = "google/gemini-2.5-flash"
    base_url: str = "https://ai.gateway.lovable.dev/v1"
    api_key: Optional[str] = None
    timeout: float = 30.0
    max_retries: int = 3
    temperature: float = 0.1  # Low temperature for consistent results
    max_tokens: int = 200


@dataclass
class LLMResponse:
    """Response from LLM."""
    content: str
    model: str
    usage: Dict[str, int] = field(default_factory=dict)
    raw_response: Optional[Dict[str, Any]] = None

    @property
    def tokens_used(self) -> int:
        """Total tokens used in this response."""
        return self.usage.get("total_tokens", 0)


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self._log = logger.bind(
            component="LLMClient",
            backend=self.config.backend.value,
            model=self.config.model
        )

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        image_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate a completion for the given prompt.

        Args:
            prompt: User prompt to complete
            system_prompt: Optional system prompt for context
            image_url: Optional image attached to the user message
            temperature: Override default temperature
            max_tokens: Override default max tokens

        Returns:
            LLMResponse with generated content

        Raises:
            LLMError: If the backend rejects the request or keeps failing
        """
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if the LLM backend is available."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None


class _HTTPLLMClient(LLMClient):
    """Shared HTTP plumbing: lazy client and retry loop."""

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(config)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _headers(self) -> Dict[str, str]:
        return {}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                headers=self._headers(),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _post_with_retry(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST payload, retrying 5xx and network errors with linear backoff.

        4xx responses (including 402 and 429) are raised immediately.
        """
        client = await self._get_client()
        last_error: Optional[LLMError] = None

        for attempt in range(self.config.max_retries):
            try:
                response = await client.post(path, json=payload)
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                last_error = LLMError(
                    f"LLM request failed with status {status}: {e.response.text[:200]}",
                    status_code=status,
                )
                self._log.warning(
                    "llm_request_failed",
                    attempt=attempt + 1,
                    status=status,
                )

            except (httpx.TransportError, ValueError) as e:
                last_error = LLMError(f"LLM request error: {e}")
                self._log.warning(
                    "llm_request_error",
                    attempt=attempt + 1,
                    error=str(e),
                )

            if not last_error.is_transient or attempt == self.config.max_retries - 1:
                raise last_error
            await asyncio.sleep(RETRY_BACKOFF_SECONDS * (attempt + 1))

        raise LLMError("Failed to complete after retries")


class OpenAICompatibleClient(_HTTPLLMClient):
    """Client for OpenAI-compatible chat completions gateways.

    Images are sent as `image_url` content parts, so the configured model
    must accept vision input.
    """

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def is_available(self) -> bool:
        """The gateway has no cheap health endpoint; require an API key."""
        return bool(self.config.api_key)

    def _user_content(self, prompt: str, image_url: Optional[str]) -> Any:
        if not image_url:
            return prompt
        return [
            {"type": "text", "text": prompt},
            {"type": "image_url", "image_url": {"url": image_url}},
        ]

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        image_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate completion using the chat completions API."""
        messages: List[Dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": self._user_content(prompt, image_url)})

        payload = {
            "model": self.config.model,
            "messages": messages,
            "temperature": temperature if temperature is not None else self.config.temperature,
            "max_tokens": max_tokens or self.config.max_tokens,
        }

        data = await self._post_with_retry("/chat/completions", payload)

        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or ""

        return LLMResponse(
            content=content,
            model=data.get("model", self.config.model),
            usage=data.get("usage") or {},
            raw_response=data,
        )


class OllamaClient(_HTTPLLMClient):
    """Ollama-based LLM client.

    Ollama provides a simple way to run local LLMs. This client
    communicates with the Ollama API (e.g. http://localhost:11434).
    Image URLs are not forwarded: Ollama only accepts inline base64 images.
    """

    async def is_available(self) -> bool:
        """Check if Ollama is running and model is available."""
        try:
            client = await self._get_client()
            response = await client.get("/api/tags")

            if response.status_code != 200:
                return False

            data = response.json()
            models = [m["name"] for m in data.get("models", [])]

            # Check if our model is available
            model_base = self.config.model.split(":")[0]
            available = any(
                m.startswith(model_base) for m in models
            )

            if not available:
                self._log.warning(
                    "model_not_available",
                    required_model=self.config.model,
                    available_models=models,
                )

            return available

        except httpx.HTTPError as e:
            self._log.debug("ollama_not_available", error=str(e))
            return False

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        image_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate completion using Ollama API."""
        payload: Dict[str, Any] = {
            "model": self.config.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature if temperature is not None else self.config.temperature,
                "num_predict": max_tokens or self.config.max_tokens,
            }
        }

        if system_prompt:
            payload["system"] = system_prompt

        data = await self._post_with_retry("/api/generate", payload)

        return LLMResponse(
            content=data.get("response", ""),
            model=data.get("model", self.config.model),
            usage={
                "prompt_tokens": data.get("prompt_eval_count", 0),
                "completion_tokens": data.get("eval_count", 0),
                "total_tokens": (
                    data.get("prompt_eval_count", 0) +
                    data.get("eval_count", 0)
                ),
            },
            raw_response=data,
        )


class MockLLMClient(LLMClient):
    """Mock LLM client for testing.

    `responses` maps a prompt substring to the reply content; the first key
    found in the prompt wins. `default_response` is returned otherwise.
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        responses: Optional[Dict[str, str]] = None,
        default_response: str = '{"category": "other", "confidence": "low", "reasoning": "mock"}',
    ):
        super().__init__(config or LLMConfig(backend=LLMBackend.MOCK, model="mock"))
        self.responses = responses or {}
        self.default_response = default_response
        self.calls: List[Dict[str, Any]] = []

    async def is_available(self) -> bool:
        return True

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        image_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "image_url": image_url,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })

        # Find matching response
        for key, response in self.responses.items():
            if key.lower() in prompt.lower():
                return LLMResponse(
                    content=response,
                    model="mock",
                    usage={"total_tokens": 100},
                )

        return LLMResponse(
            content=self.default_response,
            model="mock",
            usage={"total_tokens": 50},
        )


def create_llm_client(config: LLMConfig) -> LLMClient:
    """Instantiate the client class matching config.backend."""
    if config.backend == LLMBackend.OLLAMA:
        return OllamaClient(config)
    if config.backend == LLMBackend.MOCK:
        return MockLLMClient(config)
    return OpenAICompatibleClient(config)


# Global client instance
_global_client: Optional[LLMClient] = None


def get_llm_client(config: Optional[LLMConfig] = None) -> LLMClient:
    """Get or create global LLM client.

    Args:
        config: Optional configuration (uses defaults if not provided)

    Returns:
        LLMClient instance
    """
    global _global_client

    if _global_client is None or config is not None:
        _global_client = create_llm_client(config or LLMConfig())

    return _global_client


async def reset_llm_client() -> None:
    """Close and forget the global LLM client."""
    global _global_client

    if _global_client:
        await _global_client.close()
        _global_client = None
