"""
Offline storage backend loaded from a YAML snapshot of a network.

Snapshot layout::

    connected: true            # optional, default true
    address: snapshot-1        # optional
    patterns:
      - name: minecraft:iron_block
        label: Block of Iron
        damage: 0
        inputs:                # one entry per slot; a slot lists its options
          - [{name: minecraft:iron_ingot, damage: 0, size: 1}]
          - ...
    items:
      - {name: minecraft:iron_ingot, damage: 0, size: 27}

Scheduling never touches storage; accepted requests are recorded in
``scheduled`` so dry runs and tests can inspect them.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from ..errors import ServiceError
from ..models import ItemStack, PatternDefinition, PatternInfo

logger = logging.getLogger(__name__)


class SnapshotStorage:
    """StorageService backed by in-memory patterns and item counts."""

    def __init__(
        self,
        patterns: Optional[List[Tuple[PatternInfo, PatternDefinition]]] = None,
        items: Optional[List[ItemStack]] = None,
        connected: bool = True,
        address: str = "snapshot",
    ):
        self.address = address
        self.connected = connected
        self._patterns: Dict[Tuple[str, int], Tuple[PatternInfo, PatternDefinition]] = {}
        for info, definition in patterns or []:
            self._patterns[(info.name, info.damage)] = (info, definition)
        self._items: Dict[Tuple[str, int], ItemStack] = {}
        for item in items or []:
            key = (item.name, item.damage)
            prev = self._items.get(key)
            size = item.size + (prev.size if prev else 0)
            self._items[key] = ItemStack(item.name, item.damage, size, item.label)
        self.scheduled: List[Tuple[PatternInfo, int]] = []

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], address: str = "snapshot") -> "SnapshotStorage":
        patterns = []
        for entry in data.get("patterns") or []:
            patterns.append((PatternInfo.from_mapping(entry), PatternDefinition.from_mapping(entry)))
        items = [ItemStack.from_mapping(i) for i in data.get("items") or []]
        return cls(
            patterns=patterns,
            items=items,
            connected=bool(data.get("connected", True)),
            address=str(data.get("address") or address),
        )

    @classmethod
    def from_yaml(cls, filepath: str | Path) -> "SnapshotStorage":
        p = Path(filepath).expanduser()
        try:
            with p.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ServiceError(f"Could not load snapshot {p}: {e}") from e
        if not isinstance(data, dict):
            raise ServiceError(f"Snapshot {p} must contain a mapping, got {type(data).__name__}")
        try:
            storage = cls.from_mapping(data, address=str(p))
        except (AttributeError, TypeError, ValueError) as e:
            raise ServiceError(f"Malformed snapshot {p}: {e}") from e
        logger.debug("Loaded snapshot %s: %d patterns, %d item types",
                     p, len(storage._patterns), len(storage._items))
        return storage

    # -----------------------------
    # StorageService
    # -----------------------------

    def is_connected(self) -> bool:
        return self.connected

    def list_pattern_identifiers(self) -> List[PatternInfo]:
        return [info for info, _ in self._patterns.values()]

    def get_pattern(self, info: PatternInfo) -> Optional[PatternDefinition]:
        entry = self._patterns.get((info.name, info.damage))
        return entry[1] if entry else None

    def get_item(self, ref: Mapping[str, Any]) -> Optional[ItemStack]:
        return self._items.get((ref["name"], int(ref.get("damage", 0))))

    def schedule_task(self, info: PatternInfo, quantity: int) -> bool:
        if (info.name, info.damage) not in self._patterns:
            return False
        self.scheduled.append((info, quantity))
        return True
