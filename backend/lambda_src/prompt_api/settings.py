from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ApiSettings:
    config_path: Path | None = None

    @classmethod
    def from_env(cls) -> "ApiSettings":
        return cls(
            config_path=Path(os.environ["PROMPT_API_CONFIG_PATH"])
            if "PROMPT_API_CONFIG_PATH" in os.environ
            else None,
        )
