"""Exception types raised inside rs-compactor.

They never leave ``rs_compactor.core.runner``: the runner turns them into a
tagged ``RunOutcome`` and the CLI decides the exit code.
"""
from __future__ import annotations

from typing import Optional


class CompactorError(Exception):
    """Base class for all rs-compactor failures."""


class ServiceNotFound(CompactorError):
    """No candidate handle exposes the full set of required methods."""


class ServiceDisconnected(CompactorError):
    """A handle was found but it is not connected to a storage controller."""

    def __init__(self, address: Optional[str] = None):
        self.address = address
        where = f"Component {address!r}" if address else "Storage component"
        super().__init__(f"{where} is not connected to storage controller")


class ServiceError(CompactorError):
    """Transport or protocol failure while talking to the storage network."""


class ConfigError(CompactorError):
    """The whitelist config could not be read or parsed."""


class ScheduleError(CompactorError):
    """The storage network refused or failed a crafting task submission."""

    def __init__(self, message: str, submitted: int = 0, slots_saved: int = 0):
        super().__init__(message)
        self.submitted = submitted
        self.slots_saved = slots_saved
