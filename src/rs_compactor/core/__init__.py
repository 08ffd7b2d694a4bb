"""
Core package façade.

Submodules:
  - classifier: compaction heuristic (nine multiset-equal slots)
  - catalog: identifier enumeration/whitelist and pattern resolution
  - planner: stock queries and affordable quantities
  - scheduler: fail-fast task submission
  - config_gen: whitelist generation
  - runner: one invocation end to end, returning a RunOutcome
"""

from . import classifier, catalog, planner, scheduler, config_gen, runner

__all__ = [
    "classifier",
    "catalog",
    "planner",
    "scheduler",
    "config_gen",
    "runner",
]
