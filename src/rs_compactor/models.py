"""Shared domain models for rs-compactor.

Items, pattern identifiers and pattern definitions come from the storage
network as loosely shaped mappings; the ``from_mapping`` helpers normalise
them into frozen dataclasses so the core never touches raw payloads.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

COMPACTION_SLOTS = 9


def _as_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ===================================================================
#                           Data Models
# ===================================================================
@dataclass(frozen=True)
class ItemStack:
    """An item type (name + damage) and a quantity."""

    name: str
    damage: int = 0
    size: int = 1
    label: Optional[str] = None

    def key(self) -> str:
        """Composite identity including the quantity (``name@damage@size``)."""
        return f"{self.name}@{self.damage}@{self.size}"

    def type_key(self) -> str:
        return f"{self.name}@{self.damage}"

    def ref(self) -> Dict[str, Any]:
        return {"name": self.name, "damage": self.damage}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ItemStack":
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError(f"Item stack is missing 'name': {dict(data)!r}")
        size = data.get("size")
        if size is None:
            size = data.get("count", 1)
        return cls(
            name=name,
            damage=_as_int(data.get("damage")),
            size=_as_int(size, 1),
            label=data.get("label"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "damage": self.damage, "size": self.size}
        if self.label is not None:
            out["label"] = self.label
        return out


InputSlot = Tuple[ItemStack, ...]


@dataclass(frozen=True)
class PatternInfo:
    """Lightweight handle used to re-request or schedule a pattern."""

    name: str
    label: str = ""
    damage: int = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PatternInfo":
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError(f"Pattern identifier is missing 'name': {dict(data)!r}")
        return cls(
            name=name,
            label=str(data.get("label") or name),
            damage=_as_int(data.get("damage")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "name": self.name, "damage": self.damage}


@dataclass(frozen=True)
class PatternDefinition:
    """Full recipe: ordered input slots, each an unordered set of options."""

    inputs: Tuple[InputSlot, ...]

    @property
    def slot_count(self) -> int:
        return len(self.inputs)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PatternDefinition":
        slots: List[InputSlot] = []
        for raw_slot in data.get("inputs") or []:
            # a bare stack is accepted as a single-option slot
            if isinstance(raw_slot, Mapping):
                raw_slot = [raw_slot]
            slots.append(tuple(ItemStack.from_mapping(s) for s in raw_slot or []))
        return cls(inputs=tuple(slots))


@dataclass(frozen=True)
class CompactionPattern:
    """A pattern whose nine slots all equal ``inputs``."""

    info: PatternInfo
    inputs: InputSlot
    inputs_per_output: int = COMPACTION_SLOTS


@dataclass(frozen=True)
class Task:
    pattern: PatternInfo
    quantity: int
    slots_saved: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.pattern.label,
            "name": self.pattern.name,
            "damage": self.pattern.damage,
            "quantity": self.quantity,
            "slots_saved": self.slots_saved,
        }


@dataclass(frozen=True)
class WhitelistConfig:
    """Persisted restriction of the patterns to consider.

    ``whitelist is None`` means no restriction (scan the whole catalog); an
    empty tuple restricts the catalog to nothing.
    """

    whitelist: Optional[Tuple[PatternInfo, ...]] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "WhitelistConfig":
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError(f"Config must be a mapping, got {type(data).__name__}")
        raw = data.get("whitelist")
        if raw is None:
            return cls()
        if not isinstance(raw, list):
            raise ValueError("'whitelist' must be a list of pattern identifiers.")
        if not all(isinstance(e, Mapping) for e in raw):
            raise ValueError("Whitelist entries must be mappings with 'name' (and optional 'label', 'damage').")
        return cls(whitelist=tuple(PatternInfo.from_mapping(e) for e in raw))

    def to_dict(self) -> Dict[str, Any]:
        entries = [] if self.whitelist is None else [info.to_dict() for info in self.whitelist]
        return {"whitelist": entries}

