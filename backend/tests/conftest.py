from __future__ import annotations

import sys
from pathlib import Path


def pytest_configure(config) -> None:  # pragma: no cover - pytest hook
    root = Path(__file__).resolve().parents[2]
    src_path = root / "src"
    if src_path.exists() and str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))

    lambda_path = root / "backend" / "lambda_src"
    if str(lambda_path) not in sys.path:
        sys.path.insert(0, str(lambda_path))
