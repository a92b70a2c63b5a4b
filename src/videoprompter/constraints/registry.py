from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

SUPPORTED_ASPECT_RATIOS = frozenset({"16:9", "9:16"})


@dataclass(frozen=True)
class ModelConstraint:
    """Technical envelope accepted by one video generation model."""

    model_id: str
    label: str
    allowed_durations: frozenset[int]
    allowed_aspect_ratios: frozenset[str] = SUPPORTED_ASPECT_RATIOS

    def allows_duration(self, duration: float) -> bool:
        return duration in self.allowed_durations

    def allows_aspect_ratio(self, aspect_ratio: str) -> bool:
        return aspect_ratio in self.allowed_aspect_ratios

    def describe_durations(self) -> str:
        values = sorted(self.allowed_durations)
        if len(values) == 1:
            return str(values[0])
        head = ", ".join(str(value) for value in values[:-1])
        return f"{head}, or {values[-1]}"


MODEL_CONSTRAINTS: Mapping[str, ModelConstraint] = MappingProxyType(
    {
        "veo3": ModelConstraint(
            model_id="veo3",
            label="VEO 3",
            allowed_durations=frozenset({4, 6, 8}),
        ),
        "sora2": ModelConstraint(
            model_id="sora2",
            label="Sora 2",
            allowed_durations=frozenset({4, 8, 12}),
        ),
    }
)


def get_constraint(model_id: str) -> ModelConstraint | None:
    return MODEL_CONSTRAINTS.get(model_id)


def supported_models() -> list[str]:
    return sorted(MODEL_CONSTRAINTS)
