from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .registry import SUPPORTED_ASPECT_RATIOS, get_constraint, supported_models

MAX_CREATIVE_DIRECTION_LENGTH = 5000


class RequestRejectedError(ValueError):
    """Raised when a request falls outside the supported technical envelope."""


@dataclass(frozen=True)
class RequestDecision:
    accepted: bool
    reason: Optional[str] = None

    @classmethod
    def accept(cls) -> "RequestDecision":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: str) -> "RequestDecision":
        return cls(accepted=False, reason=reason)

    def raise_for_rejection(self) -> None:
        if not self.accepted:
            raise RequestRejectedError(self.reason or "Request rejected")


def validate_creative_direction(creative_direction: Any) -> RequestDecision:
    if (
        not creative_direction
        or not isinstance(creative_direction, str)
        or not creative_direction.strip()
    ):
        return RequestDecision.reject("Valid creativeDirection is required and cannot be empty")
    if len(creative_direction) > MAX_CREATIVE_DIRECTION_LENGTH:
        return RequestDecision.reject(
            f"creativeDirection exceeds maximum length of {MAX_CREATIVE_DIRECTION_LENGTH} characters"
        )
    return RequestDecision.accept()


def validate_aspect_ratio(aspect_ratio: Any) -> RequestDecision:
    if not isinstance(aspect_ratio, str) or aspect_ratio not in SUPPORTED_ASPECT_RATIOS:
        return RequestDecision.reject("Aspect ratio must be 16:9 or 9:16")
    return RequestDecision.accept()


def validate_duration(model_id: Any, duration: Any) -> RequestDecision:
    constraint = get_constraint(model_id) if isinstance(model_id, str) else None
    if constraint is None:
        return RequestDecision.reject(
            f"Unsupported model '{model_id}'. Supported models: {', '.join(supported_models())}"
        )
    # bool is an int subclass; True must not pass as a duration
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        return RequestDecision.reject("duration must be a number")
    if not constraint.allows_duration(duration):
        return RequestDecision.reject(
            f"{constraint.label} only supports {constraint.describe_durations()} second durations"
        )
    return RequestDecision.accept()


def validate_concept_request(creative_direction: Any) -> RequestDecision:
    return validate_creative_direction(creative_direction)


def validate_prompt_request(model_id: Any, duration: Any, aspect_ratio: Any) -> RequestDecision:
    """Gate a prompt request before any generation call is made.

    Aspect ratio is checked before duration; the first failing rule wins.
    """
    for decision in (
        validate_aspect_ratio(aspect_ratio),
        validate_duration(model_id, duration),
    ):
        if not decision.accepted:
            return decision
    return RequestDecision.accept()
