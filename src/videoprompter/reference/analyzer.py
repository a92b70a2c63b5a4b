from __future__ import annotations

import logging
from textwrap import dedent
from typing import Optional

from videoprompter.generation.llm import EchoLLM, LLMClient, ensure_supported_media_type

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "image/jpeg"
_DATA_URL_MARKER = "base64,"

ANALYSIS_PROMPT = dedent(
    """
    Analyze this image in detail for video storyboarding purposes.

    Identify:
    1. **Product/Subject:** What is the main subject or product?
    2. **Visual Style:** Colors, lighting, composition, aesthetic
    3. **Setting/Environment:** Location, background, context
    4. **Mood/Tone:** Overall feeling and atmosphere
    5. **Brand Elements:** Logos, text, brand colors visible
    6. **Key Details:** Important features, textures, materials
    """
).strip()

DIRECTION_SECTION = dedent(
    """
    **Creative Direction from User:**
    {creative_direction}

    Please consider this direction when analyzing the image and suggest how the visual elements could
    support this creative vision.
    """
).strip()

SUMMARY_FORMAT = dedent(
    """
    Provide a concise summary in this format:

    **Product/Subject:** [description]
    **Visual Style:** [description]
    **Setting:** [description]
    **Mood/Tone:** [description]
    **Brand Elements:** [description]
    **Key Details:** [description]
    **Storyboard Recommendations:** [2-3 suggestions for video concept based on image]
    """
).strip()


GENERATION_ANALYSIS_PROMPT = dedent(
    """
    Analyze this image in detail for use in video generation. Extract:

    1. **Colors**: Exact color palette (primary, secondary, accent colors)
    2. **Lighting**: Direction, quality (soft/hard), color temperature, shadows
    3. **Composition**: Framing, rule of thirds, balance, focal points
    4. **Style**: Photographic style, artistic approach, mood, tone
    5. **Subjects**: People, products, objects with detailed descriptions
    6. **Textures & Materials**: Surface qualities, finishes, patterns
    7. **Setting/Environment**: Location, background elements, context
    8. **Brand Elements**: Logos, text, design elements (if product image)

    Provide a structured analysis that can be used to maintain visual consistency in video generation.
    """
).strip()


def strip_data_url(image_base64: str) -> str:
    """Drop a ``data:<type>;base64,`` prefix if the client sent a data URL."""
    if _DATA_URL_MARKER in image_base64:
        return image_base64.split(_DATA_URL_MARKER, 1)[1]
    return image_base64


def render_analysis_prompt(creative_direction: Optional[str] = None) -> str:
    sections = [ANALYSIS_PROMPT]
    if creative_direction:
        sections.append(DIRECTION_SECTION.format(creative_direction=creative_direction))
    sections.append(SUMMARY_FORMAT)
    return "\n\n".join(sections)


class ReferenceAnalyzer:
    """Describes a reference image so concepts and prompts can stay consistent with it."""

    def __init__(self, llm: LLMClient | None = None, model: str | None = None) -> None:
        self.llm = llm or EchoLLM()
        self.model = model

    def analyze(
        self,
        image_base64: str,
        media_type: Optional[str] = None,
        creative_direction: Optional[str] = None,
    ) -> str:
        media_type = media_type or DEFAULT_MEDIA_TYPE
        ensure_supported_media_type(media_type)
        data = strip_data_url(image_base64)
        logger.info("Analyzing reference image (%s, %d base64 chars)", media_type, len(data))
        return self.llm.analyze_image(
            data,
            media_type,
            render_analysis_prompt(creative_direction),
            model=self.model,
        )

    def describe_for_generation(self, image_base64: str, media_type: Optional[str] = None) -> str:
        """Extract the palette, lighting and subject detail a video prompt should reproduce."""
        media_type = media_type or DEFAULT_MEDIA_TYPE
        ensure_supported_media_type(media_type)
        data = strip_data_url(image_base64)
        logger.info("Describing image for generation (%s, %d base64 chars)", media_type, len(data))
        return self.llm.analyze_image(data, media_type, GENERATION_ANALYSIS_PROMPT, model=self.model)
