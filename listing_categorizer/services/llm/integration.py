"""Wiring of LLM services from application settings.

Example:
    from listing_categorizer.services.llm.integration import create_ai_classifier

    classifier = create_ai_classifier()
    result = await classifier.classify("Boss DS-1")
"""

from typing import Optional
import structlog

from listing_categorizer.config import llm_settings, LLMBackendType, LLMSettings
from .ai_classifier import AIFallbackClassifier
from .client import LLMBackend, LLMClient, LLMConfig, MockLLMClient, create_llm_client

logger = structlog.get_logger(__name__)


def build_llm_config(settings: Optional[LLMSettings] = None) -> LLMConfig:
    """Translate LLMSettings into an LLMConfig."""
    cfg = settings or llm_settings

    # Map settings backend to LLMBackend enum
    backend_map = {
        LLMBackendType.OPENAI: LLMBackend.OPENAI,
        LLMBackendType.OLLAMA: LLMBackend.OLLAMA,
        LLMBackendType.MOCK: LLMBackend.MOCK,
    }

    return LLMConfig(
        backend=backend_map.get(cfg.backend, LLMBackend.OPENAI),
        model=cfg.model,
        base_url=cfg.base_url,
        api_key=cfg.api_key,
        timeout=cfg.timeout,
        max_retries=cfg.max_retries,
        temperature=cfg.temperature,
        max_tokens=cfg.max_tokens,
    )


def get_configured_llm_client(settings: Optional[LLMSettings] = None) -> LLMClient:
    """Get LLM client configured from settings.

    Returns:
        Configured LLMClient instance (mock when AI categorization is disabled)
    """
    cfg = settings or llm_settings
    if not cfg.enabled:
        logger.info("llm_disabled_using_mock")
        return MockLLMClient()

    config = build_llm_config(cfg)
    if config.backend == LLMBackend.OPENAI and not config.api_key:
        logger.warning("llm_api_key_missing", base_url=config.base_url)

    return create_llm_client(config)


def create_ai_classifier(client: Optional[LLMClient] = None) -> AIFallbackClassifier:
    """AI classifier bound to the given client or the configured one."""
    return AIFallbackClassifier(client=client or get_configured_llm_client())
