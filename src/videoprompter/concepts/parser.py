"""Parse storyboard concept markdown into structured records.

Generated markdown varies in blank lines, wrapping and spacing, so the parser
walks lines forward with explicit stop conditions instead of matching one
multi-line pattern. Every field has a fallback and no input makes it raise.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from .model import Concept, Scene

logger = logging.getLogger(__name__)

CONCEPT_HEADING = re.compile(r"^[ \t]*##[ \t]+Concept[ \t]+\d+:", re.MULTILINE)
MOOD_LINE = re.compile(r"\*\*Mood/Tone(?::\*\*|\*\*:)(.*)$")
# Bold span holds no asterisks, so matching stays linear.
SCENE_HEADER = re.compile(r"^\d+\.\s*\*\*([^*]+)\*\*(.*)$")
SCENE_BOUNDARY = re.compile(r"^\d+\.\s*\*\*")
BOLD_LABEL = re.compile(r"^\*\*[^*]+:\*\*")
WHITESPACE_RUN = re.compile(r"\s+")


def parse_concepts_from_markdown(markdown: str) -> List[Concept]:
    if not markdown or not isinstance(markdown, str):
        return []

    sections = CONCEPT_HEADING.split(markdown)
    concepts: List[Concept] = []
    # sections[0] is whatever preceded the first heading
    for index, section in enumerate(sections[1:], start=1):
        lines = [line.strip() for line in section.splitlines()]
        concepts.append(
            Concept(
                id=index,
                title=_extract_title(lines) or f"Concept {index}",
                mood=_extract_mood(lines),
                scenes=_extract_scenes(lines),
                raw_markdown=f"## Concept {index}: {section.lstrip(' ')}",
            )
        )
    logger.debug("Parsed %d concepts from %d characters of markdown", len(concepts), len(markdown))
    return concepts


def _extract_title(lines: List[str]) -> Optional[str]:
    for line in lines:
        if not line:
            continue
        # A heading with no title runs straight into the section body.
        if BOLD_LABEL.match(line) or MOOD_LINE.search(line) or _match_scene_header(line):
            return None
        return line
    return None


def _extract_mood(lines: List[str]) -> str:
    for line in lines:
        match = MOOD_LINE.search(line)
        if match:
            return match.group(1).strip()
    return ""


def _extract_scenes(lines: List[str]) -> List[Scene]:
    scenes: List[Scene] = []
    position = 0
    total = len(lines)
    while position < total:
        header = _match_scene_header(lines[position])
        if header is None:
            position += 1
            continue

        title, fragments = header[0], [header[1]]
        position += 1
        while position < total and not _is_boundary(lines[position]):
            if lines[position]:
                fragments.append(lines[position])
            position += 1
        # position now sits on the stop line, which may be the next header

        description = WHITESPACE_RUN.sub(" ", " ".join(fragments)).strip()
        scenes.append(Scene(title=title, description=description))
    return scenes


def _match_scene_header(line: str) -> Optional[Tuple[str, str]]:
    """Return (title, trailing text) for ``1. **Title**: text`` or ``1. **Title:** text``."""
    match = SCENE_HEADER.match(line)
    if not match:
        return None
    bold, rest = match.group(1).strip(), match.group(2)
    if bold.endswith(":"):
        title = bold[:-1].strip()
    elif rest.startswith(":"):
        title, rest = bold, rest[1:]
    else:
        return None
    if not title:
        return None
    return title, rest.strip()


def _is_boundary(line: str) -> bool:
    return line.startswith("##") or bool(SCENE_BOUNDARY.match(line))
