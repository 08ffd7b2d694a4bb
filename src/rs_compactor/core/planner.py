"""Quantity planner.

Turns compaction patterns into crafting tasks sized by what is in storage
right now. Only stored items are counted: nothing is crafted recursively, and
patterns competing for the same input are each sized independently.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from ..models import CompactionPattern, ItemStack, PatternInfo, Task
from ..service import StorageService

logger = logging.getLogger(__name__)


def stock_of(service: StorageService, item: ItemStack) -> int:
    """Stored quantity of ``item``'s type; absent items count as zero."""
    found = service.get_item(item.ref())
    if found is None:
        logger.debug("No %s (%s) in storage", item.label or item.name, item.type_key())
        return 0
    logger.debug("Found %d of %s", found.size, item.label or found.label or item.name)
    return max(found.size, 0)


def _distinct_stacks(slot: Iterable[ItemStack]) -> List[ItemStack]:
    seen: Dict[str, ItemStack] = {}
    for item in slot:
        seen.setdefault(item.key(), item)
    return list(seen.values())


def plan_pattern(service: StorageService, pattern: CompactionPattern) -> Optional[Task]:
    logger.debug("Trying to craft %s...", pattern.info.label)
    # A representative slot normally holds one stack; every distinct
    # name@damage@size entry is queried and summed.
    total_inputs = sum(stock_of(service, item) for item in _distinct_stacks(pattern.inputs))
    can_craft = total_inputs // pattern.inputs_per_output
    logger.debug("Can craft %d %s", can_craft, pattern.info.label)
    if can_craft <= 0:
        return None
    return Task(
        pattern=pattern.info,
        quantity=can_craft,
        slots_saved=can_craft * (pattern.inputs_per_output - 1),
    )


def plan(service: StorageService, patterns: Iterable[CompactionPattern]) -> List[Task]:
    """One task per pattern with a positive affordable quantity, in order."""
    tasks: List[Task] = []
    for pattern in patterns:
        task = plan_pattern(service, pattern)
        if task is not None:
            tasks.append(task)
    return tasks


# -----------------------------
# Single-item autocraft
# -----------------------------

def plan_item(service: StorageService, info: PatternInfo) -> Optional[Task]:
    """Size a task for one arbitrary pattern from stored inputs.

    Each slot contributes its first option; requirements are totalled per
    item type across slots, and the affordable quantity is the minimum of
    ``stock // required`` over all input types.
    """
    definition = service.get_pattern(info)
    if definition is None:
        logger.warning("No pattern for %s (%s)", info.label, info.name)
        return None

    required: Dict[str, int] = defaultdict(int)
    refs: Dict[str, ItemStack] = {}
    for slot in definition.inputs:
        if not slot:
            continue
        item = slot[0]
        required[item.type_key()] += max(item.size, 1)
        refs.setdefault(item.type_key(), item)
    if not required:
        logger.warning("Pattern %s has no inputs", info.label)
        return None
    logger.debug("Found pattern for %s with inputs: %s", info.label, dict(required))

    max_qty: Optional[int] = None
    for key, qty in required.items():
        present = stock_of(service, refs[key])
        enough_for = present // qty
        logger.debug("Input %s is present in quantity of %d, enough for %d", key, present, enough_for)
        if max_qty is None or enough_for < max_qty:
            max_qty = enough_for

    if not max_qty:
        logger.info("Not enough inputs in storage to craft even one %s", info.label)
        return None
    slots_used = sum(required.values())
    return Task(pattern=info, quantity=max_qty, slots_saved=max_qty * max(slots_used - 1, 0))
