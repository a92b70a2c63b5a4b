from __future__ import annotations

import logging

import pytest

from videoprompter.video_prompt.model import SharedElements, Shot, VideoPrompt
from videoprompter.video_prompt.validation import validate_durations


def _prompt(durations, total):
    return VideoPrompt(
        project_title="Demo",
        resolution="9:16",
        duration_total_seconds=total,
        visual_style="Clean studio",
        shared_elements=SharedElements(product=None, lighting="Soft", color_palette="Neutral"),
        shots=[
            Shot(
                shot_number=index,
                duration_seconds=duration,
                scene_description="Studio",
                action="Product rotates",
                camera_angle="Close-up",
                movement="Static",
                lenses="85mm",
                lighting="Softbox",
            )
            for index, duration in enumerate(durations, start=1)
        ],
    )


def test_matching_durations_are_reported_as_match():
    report = validate_durations(_prompt([2.0, 2.0, 2.0], 6))

    assert report.duration_match is True
    assert report.total_duration == 6
    assert report.expected_duration == 6


def test_mismatch_is_reported_not_raised(caplog):
    with caplog.at_level(logging.WARNING):
        report = validate_durations(_prompt([2.0, 2.0, 2.5], 6))

    assert report.duration_match is False
    assert report.total_duration == 6.5
    assert "Duration mismatch" in caplog.text


@pytest.mark.parametrize(
    "durations,total,expected",
    [
        ([1.0, 1.5, 1.5], 4, True),
        ([3.95, 4.0], 8, True),
        ([3.85, 4.0], 8, False),
        ([1.33, 1.33, 1.34], 4, True),
    ],
)
def test_tolerance_boundary(durations, total, expected):
    assert validate_durations(_prompt(durations, total)).duration_match is expected


def test_report_serializes_with_camel_case_keys():
    report = validate_durations(_prompt([4.0], 4))

    assert report.model_dump(by_alias=True) == {
        "durationMatch": True,
        "totalDuration": 4.0,
        "expectedDuration": 4.0,
    }
