"""
Storage service protocol.

Defines the capability set the core needs from a storage network handle and
the probing logic that picks a conforming handle out of several candidates.
Backends live in ``rs_compactor.clients`` (HTTP bridge, YAML snapshot); any
object with the five methods below works, including test doubles.

``get_pattern`` and ``get_item`` return ``None`` for unknown recipes and
absent items. Callers treat that as "does not exist" / "zero stock", never
as an error.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Protocol, runtime_checkable

from .errors import ServiceError, ServiceNotFound
from .models import ItemStack, PatternDefinition, PatternInfo

logger = logging.getLogger(__name__)

# list of methods we look for on candidate handles
REQUIRED_METHODS = (
    "list_pattern_identifiers",
    "get_pattern",
    "get_item",
    "schedule_task",
    "is_connected",
)


@runtime_checkable
class StorageService(Protocol):
    """Crafting/inventory network as seen by the compactor."""

    def list_pattern_identifiers(self) -> List[PatternInfo]:
        """Every pattern the network knows about."""
        ...

    def get_pattern(self, info: PatternInfo) -> Optional[PatternDefinition]:
        """Full definition, or None when the pattern is unknown/deleted."""
        ...

    def get_item(self, ref: Mapping[str, Any]) -> Optional[ItemStack]:
        """Stored stack for ``{name, damage}``, or None when absent."""
        ...

    def schedule_task(self, info: PatternInfo, quantity: int) -> bool:
        ...

    def is_connected(self) -> bool:
        ...


def describe(candidate: Any) -> str:
    address = getattr(candidate, "address", None)
    return str(address) if address else type(candidate).__name__


def supports(candidate: Any) -> bool:
    """
    True when ``candidate`` can serve as a StorageService.

    Every required name must be a callable attribute. Handles that proxy a
    remote component also advertise what the remote side implements through
    ``available_methods()``; in that case each required name must be listed.
    """
    for method in REQUIRED_METHODS:
        if not callable(getattr(candidate, method, None)):
            logger.debug("%s lacks method %s", describe(candidate), method)
            return False
    advertise = getattr(candidate, "available_methods", None)
    if callable(advertise):
        try:
            advertised = set(advertise() or ())
        except ServiceError as exc:
            logger.warning("Could not probe %s: %s", describe(candidate), exc)
            return False
        missing = [m for m in REQUIRED_METHODS if m not in advertised]
        if missing:
            logger.debug("%s does not advertise %s", describe(candidate), ", ".join(missing))
            return False
    return True


def find_service(candidates: Iterable[Any]) -> StorageService:
    """Return the first conforming handle, or raise ServiceNotFound."""
    for candidate in candidates:
        if supports(candidate):
            logger.debug("Using storage component %s", describe(candidate))
            return candidate
    raise ServiceNotFound("couldn't find any attached Refined Storage components")
