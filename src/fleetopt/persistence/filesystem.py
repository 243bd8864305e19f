"""Run-output storage under ``settings.data_root``.

Each persisted solve gets its own directory below ``<data_root>/outputs``
holding ``summary.json`` (the full result) and ``assignments.csv`` (one row
per waypoint).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import settings
from ..services.outputs.routing_formatter import routing_result_to_csv, routing_result_to_json
from ..services.routing.models import RouteOptimizationResult

SUMMARY_FILENAME = "summary.json"
ASSIGNMENTS_FILENAME = "assignments.csv"


@dataclass(slots=True, frozen=True)
class RunOutputs:
    directory: Path
    summary: Path
    assignments: Path


class FileStorage:
    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.output_root = self.root / "outputs"
        self.output_root.mkdir(parents=True, exist_ok=True)

    def make_run_directory(self, prefix: str = "solve") -> Path:
        # microseconds keep back-to-back runs apart
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        run_dir = self.output_root / f"{prefix}_{stamp}"
        run_dir.mkdir(parents=True, exist_ok=False)
        return run_dir

    def write_json(self, path: Path, data: Any, *, indent: int = 2) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, ensure_ascii=False, indent=indent, default=str), encoding="utf-8")

    def write_csv(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)

    def write_result(self, run_dir: Path, result: RouteOptimizationResult) -> RunOutputs:
        """Write the summary and per-waypoint assignments of one solve into ``run_dir``."""
        outputs = RunOutputs(
            directory=run_dir,
            summary=run_dir / SUMMARY_FILENAME,
            assignments=run_dir / ASSIGNMENTS_FILENAME,
        )
        self.write_json(outputs.summary, routing_result_to_json(result))
        self.write_csv(outputs.assignments, routing_result_to_csv(result))
        return outputs

    def list_runs(self, prefix: str | None = None) -> list[Path]:
        """Run directories, oldest first."""
        runs = [path for path in self.output_root.iterdir() if path.is_dir()]
        if prefix is not None:
            runs = [path for path in runs if path.name.startswith(f"{prefix}_")]
        return sorted(runs, key=lambda path: path.name)
