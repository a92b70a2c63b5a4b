from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from videoprompter.constraints.validator import validate_concept_request
from videoprompter.generation.llm import EchoLLM, LLMClient

from .model import ConceptResult
from .parser import parse_concepts_from_markdown
from .prompts import STORYBOARD_SYSTEM_PROMPT, render_concepts_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConceptRequest:
    creative_direction: str
    image_analysis: Optional[str] = None
    target_duration: Optional[float] = None


class ConceptEngine:
    """Generates three storyboard concepts and parses them into records."""

    def __init__(
        self,
        llm: LLMClient | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> None:
        self.llm = llm or EchoLLM()
        self.model = model
        self.max_tokens = max_tokens

    def generate(self, request: ConceptRequest) -> ConceptResult:
        validate_concept_request(request.creative_direction).raise_for_rejection()

        message = render_concepts_request(
            request.creative_direction,
            target_duration=request.target_duration,
            image_analysis=request.image_analysis,
        )
        raw = self.llm.generate_text(
            STORYBOARD_SYSTEM_PROMPT,
            message,
            model=self.model,
            max_tokens=self.max_tokens,
        )
        logger.debug("LLM raw concepts response: %s", raw)

        concepts = parse_concepts_from_markdown(raw)
        if not concepts:
            logger.warning("No concept sections found in %d characters of generated markdown", len(raw))
        else:
            logger.info(
                "Parsed %d concepts (%s scenes)",
                len(concepts),
                ", ".join(str(len(concept.scenes)) for concept in concepts),
            )
        return ConceptResult(concepts_markdown=raw, concepts=concepts)
