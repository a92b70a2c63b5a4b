from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Scene(BaseModel):
    """Single storyboard beat inside a concept."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    description: str = Field(default="", description="Whitespace-normalized scene text")


class Concept(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(ge=1, description="1-based position within a single parse")
    title: str
    mood: str = ""
    scenes: List[Scene] = Field(default_factory=list)
    raw_markdown: str = Field(default="", alias="rawMarkdown")


class ConceptResult(BaseModel):
    concepts_markdown: str
    concepts: List[Concept]

    def to_payload(self) -> dict:
        return {
            "success": True,
            "conceptsMarkdown": self.concepts_markdown,
            "concepts": [concept.model_dump(mode="json", by_alias=True) for concept in self.concepts],
        }
