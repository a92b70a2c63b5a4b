from __future__ import annotations

from textwrap import dedent
from typing import Optional

from videoprompter.constraints.registry import MODEL_CONSTRAINTS

AUTO_SHOT_COUNT = "auto"


def _model_specs() -> str:
    lines = []
    for constraint in MODEL_CONSTRAINTS.values():
        ratios = " or ".join(sorted(constraint.allowed_aspect_ratios))
        lines.append(
            f"- {constraint.label}: durations {constraint.describe_durations()} seconds ONLY; "
            f"aspect ratios {ratios}"
        )
    return "\n".join(lines)


VIDEO_SYSTEM_PROMPT = dedent(
    """
    # VIDEO PROMPT GENERATION SYSTEM

    You are an expert video prompt engineer. Translate the user's video concept into a detailed,
    cinematographically precise JSON specification for the video generation model they selected.

    ## Technical specifications
    {model_specs}

    ## Shot structure
    Each shot describes the scene, the action in timed beats, one camera angle, one camera movement,
    the lens, the lighting, and the audio. For VEO 3 put all audio in the "audio" field and write dialogue
    as: Character says: "Exact words" (no subtitles). For Sora 2 put dialogue in "dialogue_block" with
    consistent speaker labels and keep ambient sound and music in "audio".

    ## Shot count
    Use 1-2 shots for 4 seconds, 2-3 for 6 or 8 seconds, and 3-5 for 12 seconds unless the user asks for
    a specific number of shots.

    ## Reference images
    When image analysis is provided, use it as the visual foundation of every shot: keep its colors,
    lighting and subject appearance, describe the product exactly in "product_consistency_rule", and put
    the image URL in "product_reference_image_link".

    ## JSON schema
    {{
      "project_title": "string",
      "resolution": "16:9 or 9:16",
      "duration_total_seconds": number,
      "visual_style": "string",
      "product_reference_image_link": "string or null",
      "product_consistency_rule": "string or null",
      "shared_elements": {{
        "product": "string or null",
        "lighting": "string",
        "color_palette": "string"
      }},
      "shots": [
        {{
          "shot_number": number,
          "duration_seconds": number,
          "scene_description": "string",
          "action": "string",
          "camera_angle": "string",
          "movement": "string",
          "lenses": "string",
          "lighting": "string",
          "audio": "string or null",
          "dialogue_block": "string or null"
        }}
      ]
    }}

    ## Validation rules
    - The sum of all shot durations MUST exactly equal duration_total_seconds.
    - Use decimal precision for shot durations (1.0, 1.5, 2.0, ...).
    - shot_number starts at 1 and increases by one per shot.
    - resolution is 16:9 or 9:16 only.

    Respond with ONLY the JSON object. No explanation before or after it.
    """
).strip().format(model_specs=_model_specs())


def render_prompt_request(
    model: str,
    duration: float,
    aspect_ratio: str,
    concept: str,
    shot_count: str = AUTO_SHOT_COUNT,
    image_analysis: Optional[str] = None,
    image_url: Optional[str] = None,
) -> str:
    label = model.upper()
    shots = "Auto (determine optimal)" if str(shot_count).lower() == AUTO_SHOT_COUNT else str(shot_count)
    parts = [
        f"Generate a video prompt for {label} with the following specifications:",
        "",
        f"**Model**: {label}",
        f"**Duration**: {duration:g} seconds",
        f"**Aspect Ratio**: {aspect_ratio}",
        f"**Shot Count**: {shots}",
        "",
        "**Video Concept**:",
        concept,
    ]
    if image_analysis:
        parts += [
            "",
            "**Reference Image Analysis**:",
            image_analysis,
            "",
            f"**Image URL**: {image_url or 'Not provided'}",
        ]
    parts += [
        "",
        "Generate the complete JSON prompt following the schema exactly. "
        "Respond with ONLY the JSON object, no other text.",
    ]
    return "\n".join(parts)
