"""Task scheduler: submit planned tasks to the network, fail-fast."""
from __future__ import annotations

import logging
from typing import Iterable

from ..errors import ScheduleError
from ..models import Task
from ..service import StorageService

logger = logging.getLogger(__name__)


def execute(service: StorageService, tasks: Iterable[Task]) -> int:
    """
    Schedule every task in order and return the storage slots they free.

    The first failed submission raises ScheduleError and the remaining tasks
    are not attempted. Tasks already accepted by the network stay scheduled.
    """
    submitted = 0
    slots_saved = 0
    for task in tasks:
        label = f"{task.quantity} of {task.pattern.label} ({task.pattern.name})"
        try:
            accepted = service.schedule_task(task.pattern, task.quantity)
        except Exception as exc:
            raise ScheduleError(f"Failed to schedule {label}: {exc}", submitted, slots_saved) from exc
        if accepted is False:
            raise ScheduleError(f"Network refused to schedule {label}", submitted, slots_saved)
        logger.info("Scheduled %s", label)
        submitted += 1
        slots_saved += task.slots_saved
    return slots_saved
