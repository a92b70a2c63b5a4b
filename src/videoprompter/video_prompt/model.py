from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SharedElements(BaseModel):
    model_config = ConfigDict(extra="allow")

    product: Any = None
    lighting: Any = None
    color_palette: Any = None


class Shot(BaseModel):
    """One camera take inside a video prompt.

    Only ``duration_seconds`` is required; every other field is kept as the
    model wrote it, including keys this class does not name.
    """

    model_config = ConfigDict(extra="allow")

    shot_number: Any = None
    duration_seconds: float
    scene_description: Any = None
    action: Any = None
    camera_angle: Any = None
    movement: Any = None
    lenses: Any = None
    lighting: Any = None
    audio: Any = Field(default=None, description="Dialogue, SFX and music cues")
    dialogue_block: Any = Field(default=None, description="Speaker-labelled lines")


class VideoPrompt(BaseModel):
    model_config = ConfigDict(extra="allow")

    project_title: Any = None
    resolution: Any = None
    duration_total_seconds: float
    visual_style: Any = None
    product_reference_image_link: Any = None
    product_consistency_rule: Any = None
    shared_elements: Optional[SharedElements] = None
    shots: List[Shot]

    @property
    def shot_duration_sum(self) -> float:
        return sum(shot.duration_seconds for shot in self.shots)

    def as_generated(self) -> dict:
        """Dump the prompt with only the keys the model actually produced."""
        return self.model_dump(mode="json", exclude_unset=True)


class DurationReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    duration_match: bool = Field(alias="durationMatch")
    total_duration: float = Field(alias="totalDuration")
    expected_duration: float = Field(alias="expectedDuration")


class PromptResult(BaseModel):
    data: VideoPrompt
    validation: DurationReport

    def to_payload(self) -> dict:
        return {
            "success": True,
            "data": self.data.as_generated(),
            "validation": self.validation.model_dump(mode="json", by_alias=True),
        }
