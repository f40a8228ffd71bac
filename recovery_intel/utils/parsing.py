"""
Structured decoding of provider responses.

Providers are asked for JSON but frequently wrap it in markdown fences or
prose. These helpers locate the JSON object and validate it into the
common analysis models, raising ParseError when that is not possible so
the caller can fall back to free-text extraction.
"""

import json
import re
from typing import Any, Optional

from pydantic import ValidationError

from recovery_intel.errors import ParseError
from recovery_intel.models.analysis import ImageAnalysis, StructuredAnalysis, TextAnalysis
from recovery_intel.models.enums import Modality

_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)```", re.DOTALL)

# Keys that mark a top-level payload as an image assessment
_IMAGE_KEYS = ("woundHealing", "wound_healing", "infectionSigns", "infection_signs")


def extract_json_object(content: str) -> dict:
    """
    Extract the first JSON object from provider content.

    Tries, in order: the whole content, a fenced code block, and the span
    from the first ``{`` to the last ``}``.

    Args:
        content: Raw provider text

    Returns:
        Decoded JSON object

    Raises:
        ParseError: if no JSON object can be decoded
    """
    if not content or not content.strip():
        raise ParseError("Empty provider content")

    candidates = [content.strip()]

    fence = _FENCE_PATTERN.search(content)
    if fence:
        candidates.append(fence.group(1).strip())

    start = content.find("{")
    end = content.rfind("}")
    if start != -1 and end > start:
        candidates.append(content[start:end + 1])

    for candidate in candidates:
        try:
            decoded = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(decoded, dict):
            return decoded

    raise ParseError("No JSON object found in provider content")


def decode_provider_payload(
    content: str,
    modality: Modality,
) -> tuple[StructuredAnalysis, Optional[ImageAnalysis], Optional[TextAnalysis]]:
    """
    Decode provider content into the common analysis models.

    Args:
        content: Raw provider text
        modality: Modality of the request (image payloads may put the
            wound assessment at the top level)

    Returns:
        Tuple of (StructuredAnalysis, ImageAnalysis or None, TextAnalysis or None)

    Raises:
        ParseError: if the content is not a valid structured analysis
    """
    payload = extract_json_object(content)

    try:
        analysis = StructuredAnalysis.model_validate(payload)
        image_analysis = _decode_image_analysis(payload, modality)
        text_analysis = _decode_optional(payload.get("textAnalysis"), TextAnalysis)
    except ValidationError as e:
        raise ParseError(f"Payload does not match analysis schema: {e.error_count()} errors") from e

    return analysis, image_analysis, text_analysis


def _decode_image_analysis(payload: dict, modality: Modality) -> Optional[ImageAnalysis]:
    nested = payload.get("imageAnalysis")
    if isinstance(nested, dict):
        return ImageAnalysis.model_validate(nested)
    if modality != Modality.TEXT and any(key in payload for key in _IMAGE_KEYS):
        return ImageAnalysis.model_validate(payload)
    return None


def _decode_optional(value: Any, model):
    if isinstance(value, dict):
        return model.model_validate(value)
    return None


def contains_any(content: str, keywords) -> bool:
    """Case-insensitive check for any keyword in content."""
    content_lower = content.lower()
    return any(keyword in content_lower for keyword in keywords)
