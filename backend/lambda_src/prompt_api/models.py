from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from videoprompter.concepts.engine import ConceptRequest
from videoprompter.constraints.validator import validate_concept_request, validate_prompt_request
from videoprompter.video_prompt.engine import PromptRequest
from videoprompter.video_prompt.prompts import AUTO_SHOT_COUNT


class ValidationError(ValueError):
    """Raised when the request payload cannot be processed."""


def concept_request_from_payload(payload: Mapping[str, Any]) -> ConceptRequest:
    creative_direction = payload.get("creativeDirection")
    decision = validate_concept_request(creative_direction)
    if not decision.accepted:
        raise ValidationError(decision.reason)

    target_duration = payload.get("targetDuration")
    if target_duration is not None and (
        isinstance(target_duration, bool)
        or not isinstance(target_duration, (int, float))
        or target_duration <= 0
    ):
        raise ValidationError("targetDuration must be a positive number")

    return ConceptRequest(
        creative_direction=creative_direction,
        image_analysis=_optional_text(payload, "imageAnalysis"),
        target_duration=target_duration,
    )


def prompt_request_from_payload(payload: Mapping[str, Any]) -> PromptRequest:
    required = ("model", "concept", "duration", "aspectRatio")
    missing = [field for field in required if not payload.get(field)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    concept = payload["concept"]
    if not isinstance(concept, str):
        raise ValidationError("concept must be a string")

    decision = validate_prompt_request(payload["model"], payload["duration"], payload["aspectRatio"])
    if not decision.accepted:
        raise ValidationError(decision.reason)

    shot_count = payload.get("shotCount")
    return PromptRequest(
        model=payload["model"],
        concept=concept,
        duration=payload["duration"],
        aspect_ratio=payload["aspectRatio"],
        shot_count=str(shot_count) if shot_count else AUTO_SHOT_COUNT,
        prompt_model=_optional_text(payload, "promptModel"),
        image_analysis=_optional_text(payload, "imageAnalysis"),
        image_url=_optional_text(payload, "imageUrl"),
    )


@dataclass(frozen=True)
class ReferenceRequest:
    image_base64: str
    media_type: Optional[str] = None
    creative_direction: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ReferenceRequest":
        image = payload.get("imageBase64")
        if not image or not isinstance(image, str):
            raise ValidationError("Valid imageBase64 is required")
        return cls(
            image_base64=image,
            media_type=_optional_text(payload, "imageMediaType"),
            creative_direction=_optional_text(payload, "creativeDirection"),
        )


def _optional_text(payload: Mapping[str, Any], field: str) -> Optional[str]:
    value = payload.get(field)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string or null")
    return value
