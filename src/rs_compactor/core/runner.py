"""Core runner: one invocation of the compactor, start to finish.

Each entrypoint locates a storage service among the candidate handles,
checks it is connected, and runs one pipeline:

    auto_craft      catalog -> classifier -> planner -> scheduler
    generate_config catalog -> classifier -> config generator
    craft_item      single-pattern planner -> scheduler

Failures are caught here and returned as a tagged ``RunOutcome``; the CLI
decides what they mean for the process exit code.
"""
from __future__ import annotations

import logging
import time
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from ..clients import HttpStorageClient, SnapshotStorage
from ..config_load import load_whitelist_config
from ..errors import (
    ConfigError,
    ServiceDisconnected,
    ServiceError,
    ServiceNotFound,
    ScheduleError,
)
from ..models import PatternInfo, Task, WhitelistConfig
from ..service import StorageService, describe, find_service
from ..settings import Settings
from .catalog import list_candidates
from .config_gen import generate
from .planner import plan, plan_item
from .scheduler import execute

logger = logging.getLogger(__name__)

Confirm = Callable[[List[Task]], bool]

# statuses that end the process cleanly
CLEAN_STATUSES = {"ok", "nothing", "aborted", "disconnected"}


@dataclass
class RunOutcome:
    status: str
    message: str = ""
    tasks: List[Task] = field(default_factory=list)
    submitted: int = 0
    slots_saved: int = 0
    whitelist: Optional[WhitelistConfig] = None

    @property
    def ok(self) -> bool:
        return self.status in CLEAN_STATUSES


# -----------------------------
# Service discovery
# -----------------------------

def open_candidates(settings: Settings) -> List[Any]:
    """Build candidate handles: the snapshot if given, else one client per endpoint."""
    if settings.snapshot is not None:
        return [SnapshotStorage.from_yaml(settings.snapshot)]
    return [HttpStorageClient(url, timeout=settings.timeout) for url in settings.endpoints]


def _enter_all(stack: ExitStack, handles: List[Any]) -> List[Any]:
    """Register owned HTTP clients on ``stack`` so they close with the run."""
    for handle in handles:
        if isinstance(handle, HttpStorageClient):
            stack.enter_context(handle)
    return handles


def connect(candidates: Sequence[Any]) -> StorageService:
    service = find_service(candidates)
    if not service.is_connected():
        raise ServiceDisconnected(describe(service))
    return service


def _run(settings: Settings, candidates: Optional[Sequence[Any]], body) -> RunOutcome:
    try:
        with ExitStack() as stack:
            if candidates is None:
                candidates = _enter_all(stack, open_candidates(settings))
            return body(candidates)
    except ServiceNotFound as exc:
        logger.error("%s", exc)
        return RunOutcome("service_not_found", str(exc))
    except ServiceDisconnected as exc:
        logger.warning("%s", exc)
        return RunOutcome("disconnected", str(exc))
    except ConfigError as exc:
        logger.error("%s", exc)
        return RunOutcome("config_error", str(exc))
    except ServiceError as exc:
        logger.error("%s", exc)
        return RunOutcome("service_error", str(exc))


def _schedule(service: StorageService, tasks: List[Task], confirm: Optional[Confirm]) -> RunOutcome:
    if not tasks:
        return RunOutcome("nothing", "Nothing to craft.")
    if confirm is not None and not confirm(tasks):
        logger.info("Scheduling declined by operator")
        return RunOutcome("aborted", "Aborted.", tasks=tasks)
    try:
        saved = execute(service, tasks)
    except ScheduleError as exc:
        logger.error("%s", exc)
        return RunOutcome(
            "schedule_failed",
            str(exc),
            tasks=tasks,
            submitted=exc.submitted,
            slots_saved=exc.slots_saved,
        )
    return RunOutcome("ok", f"Scheduled {len(tasks)} crafting tasks.", tasks=tasks,
                      submitted=len(tasks), slots_saved=saved)


# -----------------------------
# Entrypoints
# -----------------------------

def auto_craft(
    settings: Settings,
    confirm: Optional[Confirm] = None,
    candidates: Optional[Sequence[Any]] = None,
) -> RunOutcome:
    """Plan compaction tasks from stock and schedule them.

    ``confirm`` sees the planned tasks before anything is scheduled; a falsy
    answer aborts the run.
    """
    def body(handles):
        config = load_whitelist_config(settings.config_path, explicit=settings.config_explicit)
        service = connect(handles)
        patterns = list_candidates(service, config.whitelist)
        tasks = plan(service, patterns)
        logger.info("%d compaction patterns, %d craftable", len(patterns), len(tasks))
        return _schedule(service, tasks, confirm)

    return _run(settings, candidates, body)


def generate_config(
    settings: Settings,
    candidates: Optional[Sequence[Any]] = None,
) -> RunOutcome:
    """Scan the whole catalog and build a whitelist of its compaction patterns."""
    def body(handles):
        service = connect(handles)
        config = generate(list_candidates(service, None))
        return RunOutcome("ok", f"Found {len(config.whitelist)} compaction patterns.", whitelist=config)

    return _run(settings, candidates, body)


def craft_item(
    settings: Settings,
    info: PatternInfo,
    confirm: Optional[Confirm] = None,
    candidates: Optional[Sequence[Any]] = None,
) -> RunOutcome:
    """Craft as many of one pattern as stored inputs allow."""
    def body(handles):
        service = connect(handles)
        task = plan_item(service, info)
        return _schedule(service, [task] if task else [], confirm)

    return _run(settings, candidates, body)


# statuses that stop the periodic loop; retrying cannot fix them
FATAL_STATUSES = {"service_not_found", "config_error"}


def watch(
    settings: Settings,
    interval: float = 60.0,
    max_runs: Optional[int] = None,
    confirm: Optional[Confirm] = None,
    candidates: Optional[Sequence[Any]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunOutcome:
    """Run ``auto_craft`` every ``interval`` seconds, one run at a time.

    Returns the last outcome. The loop ends after ``max_runs`` runs or on a
    fatal outcome.
    """
    runs = 0
    outcome = RunOutcome("nothing")
    while max_runs is None or runs < max_runs:
        outcome = auto_craft(settings, confirm=confirm, candidates=candidates)
        runs += 1
        logger.info("Run %d finished: %s %s", runs, outcome.status, outcome.message)
        if outcome.status in FATAL_STATUSES:
            break
        if max_runs is not None and runs >= max_runs:
            break
        sleep(interval)
    return outcome
