"""Compaction classifier.

A pattern counts as a compaction when it has nine input slots and every slot
offers exactly the same stacks as the first one ("consumes 9 of the same
item"). The heuristic misses compactions whose slots are spelled differently
but has no known false positives.
"""
from __future__ import annotations

from collections import Counter
from typing import Optional

from ..models import COMPACTION_SLOTS, CompactionPattern, InputSlot, PatternDefinition, PatternInfo


def slots_equal(slot1: InputSlot, slot2: InputSlot) -> bool:
    """Multiset equality over ``name@damage@size`` keys.

    Quantity is part of the key: two slots match only when they offer the
    same stacks in the same sizes.
    """
    remaining = Counter(item.key() for item in slot1)
    for item in slot2:
        key = item.key()
        if remaining[key] <= 0:
            # slot 2 has something slot 1 does not (or has it more often)
            return False
        remaining[key] -= 1
    # anything left over was in slot 1 but not in slot 2
    return not any(remaining.values())


def is_compaction_pattern(definition: PatternDefinition) -> bool:
    if definition.slot_count != COMPACTION_SLOTS:
        return False
    first = definition.inputs[0]
    return all(slots_equal(first, slot) for slot in definition.inputs[1:])


def classify(definition: PatternDefinition, info: PatternInfo) -> Optional[CompactionPattern]:
    """Return the compaction view of ``definition``, or None when it is not one."""
    if not is_compaction_pattern(definition):
        return None
    return CompactionPattern(
        info=info,
        inputs=definition.inputs[0],
        inputs_per_output=COMPACTION_SLOTS,
    )
