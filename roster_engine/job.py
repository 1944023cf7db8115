from __future__ import annotations

import shutil
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .utils import append_jsonl, ensure_dir, utc_now_iso, write_json


@dataclass
class JobPaths:
    job_dir: Path
    input_dir: Path
    crops_dir: Path
    result_json: Path
    metrics_json: Path
    errors_jsonl: Path


def create_job_dirs(workspace: str | Path, job_id: str) -> JobPaths:
    """Create the directory tree for one ingestion run under ``workspace/jobs``."""
    job_dir = Path(workspace) / "jobs" / job_id

    input_dir = job_dir / "input"
    crops_dir = job_dir / "pages" / "crops"
    for p in (input_dir, crops_dir):
        ensure_dir(p)

    return JobPaths(
        job_dir=job_dir,
        input_dir=input_dir,
        crops_dir=crops_dir,
        result_json=job_dir / "result.json",
        metrics_json=job_dir / "metrics.json",
        errors_jsonl=job_dir / "errors.jsonl",
    )


def new_job_id() -> str:
    """``YYYY-MM-DD/HH-MM-SS__<shortid>`` so jobs sort by time on disk."""
    now = datetime.now(timezone.utc)
    return f"{now.strftime('%Y-%m-%d')}/{now.strftime('%H-%M-%S')}__{uuid.uuid4().hex[:8]}"


def record_error(paths: JobPaths, page_id: str, stage: str, message: str) -> None:
    append_jsonl(paths.errors_jsonl, {"page_id": page_id, "stage": stage, "message": message})


def init_job_outputs(paths: JobPaths) -> None:
    # Always create output files, even if the run fails early.
    write_json(paths.result_json, {"job": {}, "cards": []})
    write_json(
        paths.metrics_json,
        {
            "created_at": utc_now_iso(),
            "finished": False,
            "completed_at": None,
            "pages_total": 0,
            "pages_without_names": 0,
            "names_found": 0,
            "names_dropped": 0,
            "blank_photos": 0,
            "cards_total": 0,
            "pages": [],
        },
    )
    paths.errors_jsonl.parent.mkdir(parents=True, exist_ok=True)
    paths.errors_jsonl.touch(exist_ok=True)


def snapshot_input(paths: JobPaths, input_path: str | Path) -> None:
    src = Path(input_path)
    if src.is_file():
        shutil.copy2(src, paths.input_dir / src.name)
