"""Pattern catalog: enumerate identifiers, resolve them and keep compactions."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..models import CompactionPattern, PatternInfo
from ..service import StorageService
from .classifier import classify

logger = logging.getLogger(__name__)


def fetch_compaction_patterns(
    service: StorageService,
    identifiers: Iterable[PatternInfo],
) -> List[CompactionPattern]:
    """Resolve each identifier in order and keep the compaction patterns.

    Identifiers the network no longer knows about are skipped.
    """
    patterns: List[CompactionPattern] = []
    for info in identifiers:
        definition = service.get_pattern(info)
        if definition is None:
            logger.debug("Pattern %s (%s) is not known to the network, skipping", info.label, info.name)
            continue
        pattern = classify(definition, info)
        if pattern is not None:
            logger.debug("Found compaction pattern: %s (%s)", info.label, info.name)
            patterns.append(pattern)
    return patterns


def list_candidates(
    service: StorageService,
    whitelist: Optional[Iterable[PatternInfo]] = None,
) -> List[CompactionPattern]:
    """
    Compaction patterns to consider this run.

    Without a whitelist the full identifier set is requested from the
    network; with one, the whitelist itself is the identifier set.
    """
    if whitelist is None:
        identifiers = service.list_pattern_identifiers()
        logger.info("Network reports %d patterns", len(identifiers))
    else:
        identifiers = list(whitelist)
        logger.info("Restricting scan to %d whitelisted patterns", len(identifiers))
    return fetch_compaction_patterns(service, identifiers)
