"""Whitelist generation from discovered compaction patterns."""
from __future__ import annotations

from typing import Iterable

from ..models import CompactionPattern, PatternInfo, WhitelistConfig


def generate(patterns: Iterable[CompactionPattern]) -> WhitelistConfig:
    return WhitelistConfig(
        whitelist=tuple(
            PatternInfo(label=p.info.label, name=p.info.name, damage=p.info.damage)
            for p in patterns
        )
    )
