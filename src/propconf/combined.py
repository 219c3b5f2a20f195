"""Lookups across multiple property sources in priority order."""

from typing import List, Optional, Tuple

from .lookup import PropertyGetter


class Combined:
    """Property source that consults several sources in priority order.

    The first source that has a property provides its value.
    """

    def __init__(self, sources: Optional[List[PropertyGetter]] = None):
        self.sources: List[PropertyGetter] = list(sources) if sources else []

    def get(self, name: str) -> Tuple[str, bool]:
        for source in self.sources:
            value, found = source.get(name)
            if found:
                return value, True
        return "", False

    def get_default(self, name: str, default: str) -> str:
        value, found = self.get(name)
        return value if found else default

    def names(self) -> List[str]:
        """Return the union of all source names."""
        result = set()
        for source in self.sources:
            result.update(source.names())
        return list(result)
