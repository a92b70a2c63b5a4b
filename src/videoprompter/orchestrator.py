from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from videoprompter.concepts.engine import ConceptEngine, ConceptRequest
from videoprompter.concepts.model import ConceptResult
from videoprompter.config import ServiceConfig
from videoprompter.generation.llm import LLMClient
from videoprompter.reference.analyzer import ReferenceAnalyzer
from videoprompter.video_prompt.engine import PromptEngine, PromptRequest
from videoprompter.video_prompt.model import PromptResult

logger = logging.getLogger(__name__)


class PromptStudio:
    """Wires the concept, prompt and reference stages around one generation capability."""

    def __init__(self, config: ServiceConfig, llm: LLMClient) -> None:
        self.config = config
        self.llm = llm
        self.concepts = ConceptEngine(
            llm=llm,
            model=config.concept_model,
            max_tokens=config.concept_max_tokens,
        )
        self.prompts = PromptEngine(
            llm=llm,
            default_prompt_model=config.prompt_model,
            allowed_prompt_models=tuple(config.allowed_prompt_models),
            max_tokens=config.prompt_max_tokens,
            repair_malformed_json=config.repair_malformed_json,
        )
        self.reference = ReferenceAnalyzer(llm=llm, model=config.image_model)

    @classmethod
    def from_config(cls, config: ServiceConfig, llm: Optional[LLMClient] = None) -> "PromptStudio":
        return cls(config=config, llm=llm or config.build_llm())

    @classmethod
    def from_file(cls, path: Path) -> "PromptStudio":
        return cls.from_config(ServiceConfig.from_file(path))

    @classmethod
    def default(cls) -> "PromptStudio":
        return cls.from_config(ServiceConfig())

    def generate_concepts(self, request: ConceptRequest) -> ConceptResult:
        logger.info("Generating concepts (%d chars of creative direction)", len(request.creative_direction or ""))
        return self.concepts.generate(request)

    def generate_prompt(self, request: PromptRequest) -> PromptResult:
        logger.info(
            "Generating %s prompt: %ss at %s", request.model, request.duration, request.aspect_ratio
        )
        return self.prompts.generate(request)

    def analyze_reference(
        self,
        image_base64: str,
        media_type: Optional[str] = None,
        creative_direction: Optional[str] = None,
    ) -> str:
        return self.reference.analyze(
            image_base64,
            media_type=media_type,
            creative_direction=creative_direction,
        )

    def describe_image(self, image_base64: str, media_type: Optional[str] = None) -> str:
        return self.reference.describe_for_generation(image_base64, media_type=media_type)
