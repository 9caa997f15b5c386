"""
Explanation cache - full analysis responses keyed by signature:DRUG:mode.

One instance is built per application and handed to the pipeline. Responses
whose explanation failed to generate are never stored, and a stored failure is
never reported as a hit. Concurrent misses for the same key may both generate;
the last set() wins.
"""

import logging
from collections import OrderedDict
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Every fallback explanation contains this text
FAILURE_MARKER = "temporarily unavailable"


def build_cache_key(signature: str, drug: str, mode: str) -> str:
    return f"{signature}:{drug.upper()}:{mode}"


def is_failed_explanation(summary: Optional[str]) -> bool:
    """True when the summary is missing or carries the failure marker."""
    return not summary or FAILURE_MARKER in summary


class ExplanationCache:
    """
    In-memory key → response map.

    max_entries=0 keeps every entry for the process lifetime; a positive bound
    evicts the least recently used entry.
    """

    def __init__(self, max_entries: int = 0):
        if max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, Any]" = OrderedDict()

    def get(self, key: str) -> Optional[Any]:
        value = self._entries.get(key)
        if value is not None and self.max_entries:
            self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: Any, summary: Optional[str] = None) -> bool:
        """
        Store value under key. When the explanation summary is passed and it
        indicates a failed generation, nothing is stored.

        Returns:
            True if the value was stored.
        """
        if summary is not None and is_failed_explanation(summary):
            logger.warning("Refusing to cache failed explanation for %s", key)
            return False

        self._entries[key] = value
        self._entries.move_to_end(key)

        if self.max_entries and len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry %s", evicted)
        return True

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
