"""Vision AI integration for facial analysis"""
import logging
import json
import time
from typing import Any, Optional

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from facescore.config import (
    VISION_MODEL,
    OPENAI_API_KEY,
    ANTHROPIC_API_KEY,
    VISION_TEMPERATURE,
    VISION_MAX_TOKENS,
    VISION_TIMEOUT_SECONDS,
)
from facescore.exceptions import (
    AnthropicAPIError,
    ConfigurationError,
    FaceScoreError,
    OpenAIAPIError,
    TransientInfraError,
    VisionAnalysisError,
)
from facescore.models.analysis import AnalysisResult, FaceMetrics
from facescore.resilience.metrics import record_api_call, record_api_failure
from facescore.resilience.transient import is_transient_error
from facescore.safety.content_filter import ContentFilter, content_filter
from facescore.validators import parse_analysis_result
from facescore.vision.prompts import ANALYSIS_PROMPT, SYSTEM_PROMPT

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "anthropic")


def resolve_vision_model(vision_model: str = VISION_MODEL) -> tuple[str, str]:
    """
    Split "provider:model" config into its parts

    Raises:
        ConfigurationError: for an unknown provider
    """
    provider, _, model_name = vision_model.partition(":")
    if provider not in SUPPORTED_PROVIDERS or not model_name:
        raise ConfigurationError(f"Unknown vision model: {vision_model}", config_key="VISION_MODEL")
    return provider, model_name


def extract_json(content: str) -> Any:
    """Parse model output, tolerating markdown code fences"""
    if "```json" in content:
        json_str = content.split("```json")[1].split("```")[0].strip()
    elif "```" in content:
        json_str = content.split("```")[1].split("```")[0].strip()
    else:
        json_str = content.strip()

    try:
        return json.loads(json_str)
    except json.JSONDecodeError as e:
        raise VisionAnalysisError(
            f"Failed to parse vision response as JSON: {e}. Preview: {content[:500]}",
            operation="analyze_face",
            cause=e
        ) from e


def _anthropic_image_source(image_ref: str) -> dict:
    """Data URIs go inline as base64, anything else by URL"""
    if image_ref.startswith("data:"):
        header, _, data = image_ref.partition(",")
        media_type = header[len("data:"):].split(";")[0] or "image/jpeg"
        return {"type": "base64", "media_type": media_type, "data": data}
    return {"type": "url", "url": image_ref}


async def analyze_with_openai(
    image_ref: str,
    model_name: str,
    client: Optional[AsyncOpenAI] = None
) -> str:
    """Use OpenAI Vision (chat completions with JSON mode)"""
    client = client or AsyncOpenAI(
        api_key=OPENAI_API_KEY,
        timeout=VISION_TIMEOUT_SECONDS,
        max_retries=0,
    )

    response = await client.chat.completions.create(
        model=model_name,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": ANALYSIS_PROMPT},
                    {"type": "image_url", "image_url": {"url": image_ref}},
                ],
            },
        ],
        response_format={"type": "json_object"},
        temperature=VISION_TEMPERATURE,
        max_tokens=VISION_MAX_TOKENS,
    )

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise VisionAnalysisError("OpenAI returned empty response", operation="analyze_face")
    return content


async def analyze_with_anthropic(
    image_ref: str,
    model_name: str,
    client: Optional[AsyncAnthropic] = None
) -> str:
    """Use Anthropic Claude Vision"""
    client = client or AsyncAnthropic(
        api_key=ANTHROPIC_API_KEY,
        timeout=VISION_TIMEOUT_SECONDS,
        max_retries=0,
    )

    response = await client.messages.create(
        model=model_name,
        system=SYSTEM_PROMPT,
        max_tokens=VISION_MAX_TOKENS,
        temperature=VISION_TEMPERATURE,
        messages=[
            {
                "role": "user",
                "content": [
                    {"type": "image", "source": _anthropic_image_source(image_ref)},
                    {"type": "text", "text": ANALYSIS_PROMPT},
                ],
            }
        ],
    )

    content = response.content[0].text if response.content else None
    if not content:
        raise VisionAnalysisError("Anthropic returned empty response", operation="analyze_face")
    return content


async def analyze_face(
    image_ref: str,
    face_metrics: Optional[FaceMetrics] = None,
    client: Any = None,
    safety_filter: ContentFilter = content_filter
) -> AnalysisResult:
    """
    Analyze a face photo with the configured vision model

    One external call, no retries. The parsed response is validated and
    passed through the content filter before it is returned.

    Args:
        image_ref: http(s) URL or data: URI of the photo
        face_metrics: Accepted for interface parity; only the fallback scorer uses it
        client: Optional preconfigured SDK client for the configured provider
        safety_filter: Banned-terminology filter applied to the result

    Returns:
        Validated, content-safe AnalysisResult

    Raises:
        TransientInfraError: model unreachable - caller should fall back
        ValidationError: response broke the result contract
        ContentPolicyError: response contains banned terminology
        VisionAnalysisError: empty or non-JSON response
    """
    provider, model_name = resolve_vision_model(VISION_MODEL)
    api = f"{provider}_vision"
    if face_metrics is not None:
        logger.debug("[VISION] Face metrics supplied; not forwarded to the model")

    logger.info(f"[VISION] Analyzing face with {provider}:{model_name}")
    started = time.monotonic()
    try:
        if provider == "openai":
            content = await analyze_with_openai(image_ref, model_name, client)
        else:
            content = await analyze_with_anthropic(image_ref, model_name, client)
    except Exception as e:
        record_api_call(api, success=False, duration=time.monotonic() - started)
        record_api_failure(api, type(e).__name__)

        if is_transient_error(e):
            raise TransientInfraError(
                f"Vision model unavailable: {type(e).__name__}: {e}",
                service=provider,
                operation="analyze_face",
                cause=e
            ) from e
        if isinstance(e, FaceScoreError):
            raise
        error_class = OpenAIAPIError if provider == "openai" else AnthropicAPIError
        raise error_class(f"Vision request failed: {type(e).__name__}: {e}", operation="analyze_face", cause=e) from e

    record_api_call(api, success=True, duration=time.monotonic() - started)
    logger.info(f"[VISION] Response received ({len(content)} chars)")
    logger.debug(f"[VISION] Response preview: {content[:500]}")

    data = extract_json(content)
    result = parse_analysis_result(data)
    safety_filter.check_analysis_result(result)

    logger.info(f"[VISION] Analysis passed validation and content filter, score={result.score}")
    return result
