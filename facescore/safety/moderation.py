"""Moderation for free-text user content (comments, captions, chat)"""
import logging
from typing import Optional

from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from facescore.config import MODERATION_MODEL, OPENAI_API_KEY
from facescore.resilience.metrics import record_api_call, record_api_failure
from facescore.safety.content_filter import ContentFilter, content_filter

logger = logging.getLogger(__name__)

BLOCKED_TERMINOLOGY_LABEL = "blocked terminology"

# OpenAI moderation category -> label shown to reviewers
MODERATION_CATEGORY_LABELS: dict[str, str] = {
    "harassment": "harassment",
    "hate": "hate speech",
    "sexual/minors": "sexual/minors",
    "violence": "violence",
}


class ModerationResult(BaseModel):
    flagged: bool
    categories: list[str] = Field(default_factory=list)
    scores: dict[str, float] = Field(default_factory=dict)
    external_checked: bool = True


async def moderate_content(
    content: str,
    client: Optional[AsyncOpenAI] = None,
    local_filter: ContentFilter = content_filter
) -> ModerationResult:
    """
    Moderate text with the OpenAI classifier plus the local banned-term list

    The local list is checked on every path, including when the external
    call fails, so an outage never lets unchecked content through.

    Args:
        content: Text to moderate
        client: Optional preconfigured OpenAI client
        local_filter: Banned-term filter used as the deterministic backstop

    Returns:
        ModerationResult
    """
    local_scan = local_filter.scan(content)
    local_categories = [BLOCKED_TERMINOLOGY_LABEL] if local_scan.flagged else []
    if local_scan.flagged:
        logger.info(f"[MODERATION] Local list matched: {local_scan.matched_terms}")

    try:
        client = client or AsyncOpenAI(api_key=OPENAI_API_KEY)
        response = await client.moderations.create(model=MODERATION_MODEL, input=content)
        record_api_call("openai_moderation", success=True)
    except Exception as e:
        logger.error(f"[MODERATION] External moderation failed, using local list only: {e}", exc_info=True)
        record_api_failure("openai_moderation", type(e).__name__)
        return ModerationResult(
            flagged=local_scan.flagged,
            categories=local_categories,
            scores={},
            external_checked=False,
        )

    result = response.results[0]
    raw_categories = result.categories.model_dump(by_alias=True)
    raw_scores = result.category_scores.model_dump(by_alias=True)

    categories = [
        label for category, label in MODERATION_CATEGORY_LABELS.items()
        if raw_categories.get(category)
    ]
    categories.extend(local_categories)

    return ModerationResult(
        flagged=bool(result.flagged) or local_scan.flagged,
        categories=categories,
        scores={key: float(value) for key, value in raw_scores.items() if value is not None},
    )
