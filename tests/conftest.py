from pathlib import Path
import sys
import pytest
import yaml

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if SRC_DIR.exists() and str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from rs_compactor.models import ItemStack, PatternDefinition, PatternInfo


class FakeStorage:
    """In-memory StorageService that records every call it receives."""

    def __init__(self, patterns=None, items=None, connected=True, refuse=(), fail_on=()):
        # patterns: {PatternInfo: PatternDefinition}; items: {(name, damage): size}
        # patterns are looked up by (name, damage) like the real backends
        self.patterns = {(i.name, i.damage): (i, d) for i, d in (patterns or {}).items()}
        self.items = dict(items or {})
        self.connected = connected
        self.refuse = set(refuse)
        self.fail_on = set(fail_on)
        self.address = "fake-rs"
        self.calls = []
        self.scheduled = []

    def list_pattern_identifiers(self):
        self.calls.append(("list_pattern_identifiers",))
        return [i for i, _ in self.patterns.values()]

    def get_pattern(self, info):
        self.calls.append(("get_pattern", info.name))
        entry = self.patterns.get((info.name, info.damage))
        return entry[1] if entry else None

    def get_item(self, ref):
        self.calls.append(("get_item", ref["name"], ref["damage"]))
        size = self.items.get((ref["name"], ref["damage"]))
        if size is None:
            return None
        return ItemStack(ref["name"], ref["damage"], size)

    def schedule_task(self, info, quantity):
        self.calls.append(("schedule_task", info.name, quantity))
        if info.name in self.fail_on:
            raise RuntimeError(f"controller rejected {info.name}")
        if info.name in self.refuse:
            return False
        self.scheduled.append((info, quantity))
        return True

    def is_connected(self):
        return self.connected

    def count(self, method):
        return sum(1 for c in self.calls if c[0] == method)


def uniform(item, size=1, slots=9, damage=0):
    """Pattern whose every slot offers the same single stack."""
    return PatternDefinition(inputs=tuple((ItemStack(item, damage, size),) for _ in range(slots)))


def info(name, label=None, damage=0):
    return PatternInfo(name=name, label=label or name, damage=damage)


@pytest.fixture
def fake_storage():
    return FakeStorage


@pytest.fixture
def uniform_pattern():
    return uniform


@pytest.fixture
def pattern_info():
    return info


@pytest.fixture
def mixed_network():
    """Catalog with compaction and non-compaction patterns plus some stock."""
    patterns = {
        info("minecraft:iron_block", "Block of Iron"): uniform("minecraft:iron_ingot"),
        info("minecraft:gold_block", "Block of Gold"): uniform("minecraft:gold_ingot"),
        # only eight slots
        info("minecraft:chest", "Chest"): uniform("minecraft:planks", slots=8),
        # one slot differs by quantity
        info("weird:block", "Weird Block"): PatternDefinition(
            inputs=tuple((ItemStack("minecraft:stone", 0, 64),) for _ in range(8))
            + ((ItemStack("minecraft:stone", 0, 63),),)
        ),
        info("minecraft:redstone_block", "Block of Redstone"): uniform("minecraft:redstone"),
    }
    items = {
        ("minecraft:iron_ingot", 0): 27,
        ("minecraft:gold_ingot", 0): 8,
        ("minecraft:planks", 0): 640,
        ("minecraft:stone", 0): 1000,
    }
    return FakeStorage(patterns=patterns, items=items)


@pytest.fixture(scope="session")
def yload():
    def _load(p: Path):
        with p.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    return _load


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    def slot(name, size=1):
        return [{"name": name, "damage": 0, "size": size}]

    data = {
        "address": "test-network",
        "patterns": [
            {
                "name": "minecraft:iron_block",
                "label": "Block of Iron",
                "damage": 0,
                "inputs": [slot("minecraft:iron_ingot") for _ in range(9)],
            },
            {
                "name": "minecraft:coal_block",
                "label": "Block of Coal",
                "damage": 0,
                "inputs": [slot("minecraft:coal") for _ in range(9)],
            },
            {
                "name": "minecraft:torch",
                "label": "Torch",
                "damage": 0,
                "inputs": [slot("minecraft:coal"), slot("minecraft:stick")],
            },
        ],
        "items": [
            {"name": "minecraft:iron_ingot", "damage": 0, "size": 27},
            {"name": "minecraft:coal", "damage": 0, "size": 5},
            {"name": "minecraft:stick", "damage": 0, "size": 3},
        ],
    }
    path = tmp_path / "network.yml"
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path
