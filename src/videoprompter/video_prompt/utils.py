from __future__ import annotations

import json
import logging
import re
from typing import Any

from json_repair import repair_json
from pydantic import ValidationError

from .model import VideoPrompt

_FENCE_OPEN = re.compile(r"^```[\w-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?[ \t]*```$")

logger = logging.getLogger(__name__)


class MalformedPromptError(ValueError):
    """Raised when generated text cannot be turned into a video prompt."""


def extract_json_block(text: str) -> str:
    """Return the payload of a model response with any code fence removed.

    Handles ```json fenced, bare-fenced, and unfenced responses. The closing
    fence is only removed when an opening fence was present.
    """
    candidate = text.strip()
    if candidate.startswith("```"):
        candidate = _FENCE_OPEN.sub("", candidate, count=1)
        candidate = _FENCE_CLOSE.sub("", candidate, count=1)
    return candidate.strip()


def load_prompt_json(raw: str, *, repair: bool = False) -> dict[str, Any]:
    """Parse a generated prompt into a JSON object.

    With ``repair`` enabled a failed parse is retried through json_repair
    before MalformedPromptError is raised.
    """
    cleaned = extract_json_block(raw or "")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        if not repair:
            raise MalformedPromptError(f"Generated prompt is not valid JSON: {exc}") from exc
        logger.warning("Primary JSON parse failed, attempting repair: %s", exc)
        try:
            payload = json.loads(repair_json(cleaned))
        except Exception as repair_exc:
            logger.error("JSON repair failed: %s", repair_exc)
            raise MalformedPromptError(f"Generated prompt is not valid JSON: {exc}") from repair_exc

    if not isinstance(payload, dict):
        raise MalformedPromptError(
            f"Generated prompt must be a JSON object, got {type(payload).__name__}"
        )
    return payload


def parse_video_prompt(raw: str, *, repair: bool = False) -> VideoPrompt:
    payload = load_prompt_json(raw, repair=repair)
    try:
        return VideoPrompt.model_validate(payload)
    except ValidationError as exc:
        logger.error("Video prompt is missing duration fields: %s", exc)
        raise MalformedPromptError(f"Generated prompt lacks usable shot durations: {exc}") from exc
