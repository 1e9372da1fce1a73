"""Configuration management using pydantic-settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from enum import Enum
import structlog


class LLMBackendType(str, Enum):
    """Supported LLM backends."""
    OPENAI = "openai"
    OLLAMA = "ollama"
    MOCK = "mock"


class LLMSettings(BaseSettings):
    """LLM configuration for the AI fallback classifier.

    All settings prefixed with LLM_ (e.g., LLM_MODEL=google/gemini-2.5-flash)

    Supported backends:
    - openai: OpenAI-compatible chat completions gateway (default)
    - ollama: Local Ollama server
    - mock: Mock client for testing
    """

    # Backend Configuration
    backend: LLMBackendType = Field(
        default=LLMBackendType.OPENAI,
        description="LLM backend to use (openai, ollama, mock)"
    )

    # Model Configuration
    model: str = Field(
        default="google/gemini-2.5-flash",
        description="Model to use. Must accept image input for photo-assisted categorization"
    )

    # Endpoint Configuration
    base_url: str = Field(
        default="https://ai.gateway.lovable.dev/v1",
        description="Base URL of the chat completions API (or Ollama server URL)"
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Bearer token for the gateway (not used by ollama)"
    )

    # Request Configuration
    timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Request timeout in seconds"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts for transient (5xx) gateway failures"
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="Model temperature (lower = more deterministic)"
    )
    max_tokens: int = Field(
        default=200,
        ge=50,
        le=4096,
        description="Maximum tokens in response"
    )

    # Feature Flags
    enabled: bool = Field(
        default=True,
        description="Enable/disable AI categorization globally"
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class ReclassifySettings(BaseSettings):
    """Batch reclassification configuration loaded from environment variables.

    All settings prefixed with RECLASSIFY_ (e.g., RECLASSIFY_BATCH_SIZE=50)
    """

    batch_size: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Number of listings fetched per page"
    )
    time_budget_seconds: float = Field(
        default=50.0,
        ge=1.0,
        le=3600.0,
        description="Wall-clock budget per invocation before pausing with a cursor"
    )
    call_delay_ms: int = Field(
        default=500,
        ge=0,
        le=10000,
        description="Fixed delay between AI classifier calls"
    )
    max_records: Optional[int] = Field(
        default=None,
        ge=1,
        description="Optional cap on listings processed per invocation"
    )

    # Scheduled cleanup of the "other" bucket
    cleanup_limit: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Listings processed by each scheduled cleanup run"
    )
    cleanup_interval_minutes: int = Field(
        default=30,
        ge=1,
        le=60,
        description="Minutes between scheduled cleanup runs"
    )

    model_config = SettingsConfigDict(
        env_prefix="RECLASSIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class IngestSettings(BaseSettings):
    """Scrape quality gate applied before a scrape is stored.

    All settings prefixed with INGEST_ (e.g., INGEST_MIN_ADS=5)
    """

    min_ads: int = Field(
        default=1,
        ge=1,
        description="Fewest valid listings a scrape must yield to be stored"
    )
    max_invalid_ratio: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Largest share of invalid listings tolerated in a scrape"
    )
    invalid_ratio_min_total: int = Field(
        default=10,
        ge=1,
        description="Scrape size from which the invalid ratio is enforced"
    )

    model_config = SettingsConfigDict(
        env_prefix="INGEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    database_url: str

    # Redis Configuration
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_url: Optional[str] = None

    # Queue Configuration
    queue_name: str = "listing-categorizer-queue"

    # Worker Configuration
    max_workers: int = 1
    job_timeout: int = 600
    log_level: str = "INFO"
    environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        """Initialize settings and build derived values."""
        super().__init__(**kwargs)
        # Build Redis URL if not provided
        if not self.redis_url:
            auth = f":{self.redis_password}@" if self.redis_password else ""
            self.redis_url = f"redis://{auth}{self.redis_host}:{self.redis_port}/0"


# Global settings instances
settings = Settings()
reclassify_settings = ReclassifySettings()
ingest_settings = IngestSettings()
llm_settings = LLMSettings()


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structlog for JSON logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


configure_logging(settings.log_level)
