from __future__ import annotations

from textwrap import dedent
from typing import Optional

DEFAULT_TARGET_DURATION_SEC = 6
SCENES_PER_CONCEPT = 6


STORYBOARD_SYSTEM_PROMPT = dedent(
    """
    You are an expert storyboard director for cinematic short-form ads. Your only output is a
    structured storyboard foundation; you never write image or video generation prompts.

    Work from the user's brief: product, character or archetype, intended vibe, and any reference
    image analysis. When asked for concepts, propose THREE distinct storyboard concepts. Each concept has
    a catchy title, a one or two line mood/tone, and six scenes. Every scene has a short title and two to
    three sentences covering the action, the camera angle or movement, and the mood or lighting.

    Creative guidelines:
    - Open with a hook in the first second and close on a clear product or brand moment.
    - Feature the product prominently in at least three of the six scenes.
    - Mix wide establishing shots, close-ups and at most two or three dynamic camera moves.
    - Match camera energy to the brand tone; pace the story as hook, showcase, then call to action.
    - Make the three concepts genuinely different in narrative approach, pacing and visual style.

    Output rules:
    - Use markdown headings exactly as requested by the user; concept headings are level-2 headings of
      the form "## Concept N: Title".
    - Scene lines are numbered and start with the bolded scene title followed by a colon.
    - Do not add commentary before the first concept heading or after the last scene.
    """
).strip()


CONCEPTS_REQUEST_TEMPLATE = dedent(
    """
    I need to create a video storyboard with the following details:

    **Creative Direction:**
    {creative_direction}

    **Target Duration:** {target_duration} seconds
    **Required:** {scene_count} scenes that sum to target duration
    {image_section}
    Please generate THREE distinct storyboard concepts. Each concept should:
    1. Have a catchy, descriptive title (3-6 words)
    2. Include mood/tone (1-2 sentences describing overall vibe)
    3. Provide {scene_count} DETAILED scene descriptions (2-3 sentences each with action, camera work, and mood)

    Make each concept unique and creative. Consider different narrative approaches, pacing, and visual styles.

    Format your response EXACTLY as:

    # THREE STORYBOARD CONCEPTS

    ## Concept 1: [Title]
    **Mood/Tone:** [Description]

    **{scene_count}-Scene Storyboard:**

    {scene_lines}

    ## Concept 2: [Title]
    [Same detailed structure]

    ## Concept 3: [Title]
    [Same detailed structure]
    """
).strip()

_SCENE_LINE = (
    "{number}. **[Scene Title]:** [2-3 sentences describing the scene in detail - include action, "
    "camera work, and mood.]"
)


def render_concepts_request(
    creative_direction: str,
    target_duration: Optional[float] = None,
    image_analysis: Optional[str] = None,
) -> str:
    image_section = ""
    if image_analysis:
        image_section = f"\n**Reference Image Analysis:**\n{image_analysis}\n"
    scene_lines = "\n\n".join(
        _SCENE_LINE.format(number=number) for number in range(1, SCENES_PER_CONCEPT + 1)
    )
    return CONCEPTS_REQUEST_TEMPLATE.format(
        creative_direction=creative_direction,
        target_duration=_format_seconds(target_duration or DEFAULT_TARGET_DURATION_SEC),
        scene_count=SCENES_PER_CONCEPT,
        image_section=image_section,
        scene_lines=scene_lines,
    )


def _format_seconds(value: float) -> str:
    return f"{value:g}"
