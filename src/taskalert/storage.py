from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def ensure_run_dir(base_dir: Path, timestamp: str) -> Path:
    """Create a new run directory; same-second runs get a numeric suffix instead of sharing one."""
    runs = base_dir / "runs"
    runs.mkdir(parents=True, exist_ok=True)
    path = runs / timestamp
    suffix = 1
    while True:
        try:
            path.mkdir()
            return path
        except FileExistsError:
            suffix += 1
            path = runs / f"{timestamp}-{suffix}"


def write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))
