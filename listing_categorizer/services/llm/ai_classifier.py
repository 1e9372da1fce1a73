"""AI fallback classifier for listings the keyword rules cannot place.

Sends title, optional description and optional photo to a vision-capable
chat model and maps the reply onto the internal taxonomy.

Example:
    classifier = AIFallbackClassifier()
    result = await classifier.classify("Fender Twin Reverb")
    # result.category = "amplifiers", result.confidence = Confidence.HIGH
"""

from typing import Optional, Sequence
import structlog

from listing_categorizer.errors import LLMError
from listing_categorizer.models.classification import ClassificationResult, unknown_result
from .client import LLMClient, LLMConfig, get_llm_client
from .prompts import CLASSIFICATION_SYSTEM_PROMPT, build_user_prompt
from .response_parser import parse_classification_response

logger = structlog.get_logger(__name__)

# Image hosts known to serve real listing photos
TRUSTED_IMAGE_HOST_MARKERS: Sequence[str] = ("musikborsen.se", "cdn.", "images.")


def is_usable_image_url(image_url: Optional[str]) -> bool:
    """Only forward http(s) images from known hosts, never placeholder URLs."""
    if not image_url or not image_url.startswith("http"):
        return False
    if "example" in image_url:
        return False
    return any(marker in image_url for marker in TRUSTED_IMAGE_HOST_MARKERS)


class AIFallbackClassifier:
    """Classify a listing with an LLM.

    Every failure (gateway error, rate limit, unparseable reply) collapses
    to a low-confidence "other" result; `classify` never raises.
    """

    def __init__(
        self,
        client: Optional[LLMClient] = None,
        config: Optional[LLMConfig] = None,
    ):
        """Initialize classifier.

        Args:
            client: LLM client (creates default if not provided)
            config: LLM configuration
        """
        self._client = client
        self._config = config
        self._log = logger.bind(component="AIFallbackClassifier")

    @property
    def client(self) -> LLMClient:
        """Get LLM client (lazy initialization)."""
        if self._client is None:
            self._client = get_llm_client(self._config)
        return self._client

    async def classify(
        self,
        title: str,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> ClassificationResult:
        """Classify one listing.

        Args:
            title: Listing title
            description: Optional listing description
            image_url: Optional photo URL (dropped unless from a trusted host)

        Returns:
            ClassificationResult with method AI, or the fallback result
        """
        if not title or not title.strip():
            return unknown_result("Empty title")

        prompt = build_user_prompt(title.strip(), description)
        image = image_url if is_usable_image_url(image_url) else None

        try:
            response = await self.client.complete(
                prompt=prompt,
                system_prompt=CLASSIFICATION_SYSTEM_PROMPT,
                image_url=image,
            )
        except LLMError as e:
            self._log.warning(
                "ai_classification_request_failed",
                title=title[:50],
                status=e.status_code,
                error=e.message,
            )
            return unknown_result(f"AI request failed: {e.message}")
        except Exception as e:
            self._log.error("ai_classification_failed", title=title[:50], error=str(e))
            return unknown_result(f"AI request failed: {e}")

        outcome = parse_classification_response(response.content)
        if not outcome.ok:
            self._log.warning(
                "ai_response_unparseable",
                title=title[:50],
                reason=outcome.error,
                content=response.content[:200],
            )
            return unknown_result()

        self._log.info(
            "listing_ai_classified",
            title=title[:50],
            category=outcome.result.category,
            confidence=outcome.result.confidence.value,
            with_image=image is not None,
        )
        return outcome.result
