from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from videoprompter.constraints.validator import validate_prompt_request
from videoprompter.generation.llm import EchoLLM, LLMClient

from .model import PromptResult
from .prompts import AUTO_SHOT_COUNT, VIDEO_SYSTEM_PROMPT, render_prompt_request
from .utils import parse_video_prompt
from .validation import check_shot_order, validate_durations

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptRequest:
    model: str
    concept: str
    duration: float
    aspect_ratio: str
    shot_count: str = AUTO_SHOT_COUNT
    prompt_model: Optional[str] = None
    image_analysis: Optional[str] = None
    image_url: Optional[str] = None


class PromptEngine:
    """Turns a chosen concept into a validated video prompt."""

    def __init__(
        self,
        llm: LLMClient | None = None,
        default_prompt_model: str | None = None,
        allowed_prompt_models: tuple[str, ...] = (),
        max_tokens: int | None = None,
        repair_malformed_json: bool = False,
    ) -> None:
        self.llm = llm or EchoLLM()
        self.default_prompt_model = default_prompt_model
        self.allowed_prompt_models = allowed_prompt_models
        self.max_tokens = max_tokens
        self.repair_malformed_json = repair_malformed_json

    def select_prompt_model(self, requested: Optional[str]) -> Optional[str]:
        if not requested:
            return self.default_prompt_model
        if self.allowed_prompt_models and requested not in self.allowed_prompt_models:
            logger.warning(
                "Invalid promptModel '%s' provided, using default: %s",
                requested,
                self.default_prompt_model,
            )
            return self.default_prompt_model
        return requested

    def generate(self, request: PromptRequest) -> PromptResult:
        validate_prompt_request(request.model, request.duration, request.aspect_ratio).raise_for_rejection()

        message = render_prompt_request(
            model=request.model,
            duration=request.duration,
            aspect_ratio=request.aspect_ratio,
            concept=request.concept,
            shot_count=request.shot_count,
            image_analysis=request.image_analysis,
            image_url=request.image_url,
        )
        raw = self.llm.generate_text(
            VIDEO_SYSTEM_PROMPT,
            message,
            model=self.select_prompt_model(request.prompt_model),
            max_tokens=self.max_tokens,
        )
        logger.debug("LLM raw prompt response: %s", raw)

        prompt = parse_video_prompt(raw, repair=self.repair_malformed_json)
        check_shot_order(prompt)
        report = validate_durations(prompt)
        return PromptResult(data=prompt, validation=report)
