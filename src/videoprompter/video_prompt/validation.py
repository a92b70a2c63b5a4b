from __future__ import annotations

import logging
from typing import List

from .model import DurationReport, VideoPrompt

DURATION_TOLERANCE_SEC = 0.1

logger = logging.getLogger(__name__)


def validate_durations(prompt: VideoPrompt, tolerance: float = DURATION_TOLERANCE_SEC) -> DurationReport:
    """Compare the summed shot durations with the declared total.

    The result is advisory: a mismatch is logged and reported, never raised,
    so callers decide whether to regenerate or accept it.
    """
    total = prompt.shot_duration_sum
    expected = prompt.duration_total_seconds
    difference = abs(total - expected)
    if difference >= tolerance:
        logger.warning("Duration mismatch: %s vs %s", total, expected)
    return DurationReport(
        duration_match=difference < tolerance,
        total_duration=total,
        expected_duration=expected,
    )


def check_shot_order(prompt: VideoPrompt) -> List[str]:
    """Return notes for shot numbers that are missing, non-integer or out of order.

    Like the duration check this never rejects the prompt.
    """
    notes: List[str] = []
    previous = 0
    for position, shot in enumerate(prompt.shots, start=1):
        number = shot.shot_number
        if isinstance(number, bool) or not isinstance(number, int):
            notes.append(f"shot {position} has no integer shot_number")
            continue
        if number <= previous:
            notes.append(f"shot_number {number} follows {previous}")
        previous = number
    for note in notes:
        logger.warning("Shot order: %s", note)
    return notes
