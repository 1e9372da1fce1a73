"""LLM services for AI-assisted listing categorization.

Supports:
- OpenAI-compatible chat completions gateways (default)
- Ollama (local deployment)
- Mock client for tests

Usage:
    from listing_categorizer.services.llm import AIFallbackClassifier

    classifier = AIFallbackClassifier()
    result = await classifier.classify("Shure SM58")
"""

from .ai_classifier import AIFallbackClassifier
from .client import (
    LLMClient,
    LLMConfig,
    MockLLMClient,
    OllamaClient,
    OpenAICompatibleClient,
    get_llm_client,
    reset_llm_client,
)
from .response_parser import ParseOutcome, parse_classification_response

__all__ = [
    "AIFallbackClassifier",
    "LLMClient",
    "LLMConfig",
    "MockLLMClient",
    "OllamaClient",
    "OpenAICompatibleClient",
    "get_llm_client",
    "reset_llm_client",
    "ParseOutcome",
    "parse_classification_response",
]
