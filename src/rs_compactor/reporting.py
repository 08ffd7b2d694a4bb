"""Operator-facing summaries of planned and scheduled tasks."""
from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List

import pandas as pd

from .models import Task

TASK_COLUMNS = ["quantity", "label", "name", "damage", "slots_saved"]


def tasks_frame(tasks: Iterable[Task]) -> pd.DataFrame:
    rows = [task.to_dict() for task in tasks]
    return pd.DataFrame(rows, columns=TASK_COLUMNS)


def total_slots_saved(tasks: Iterable[Task]) -> int:
    return int(sum(task.slots_saved for task in tasks))


def format_plan(tasks: List[Task]) -> List[str]:
    lines = ["Will schedule the following crafting tasks:"]
    for task in tasks:
        lines.append(f" * {task.quantity} of {task.pattern.label} ({task.pattern.name})")
    lines.append(f"This will free {total_slots_saved(tasks)} slots in storage.")
    return lines


def write_summary(path: Path, tasks: List[Task]) -> None:
    """Write the task table as CSV or JSON, chosen by file suffix."""
    df = tasks_frame(tasks)
    suffix = path.suffix.lower()
    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix in {".json", ".jsonl"}:
        df.to_json(path, orient="records", indent=2)
        return
    if suffix == ".csv":
        df.to_csv(path, index=False)
        return
    raise ValueError(f"Unsupported output format for '{path}'. Use .csv or .json.")


def write_run_log(log_dir: str | Path, payload: Dict[str, Any]) -> str:
    """
    Write a compact JSON log of one run. Returns the file path.

    Log files are named with UTC timestamp: run_YYYYMMDDTHHMMSSZ.json
    """
    os.makedirs(log_dir, exist_ok=True)
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    fpath = os.path.join(str(log_dir), f"run_{ts}.json")
    with open(fpath, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    return fpath
