"""Property reference expansion engine."""

import logging
from typing import List, Set, Tuple

from .lookup import PropertyGetter

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "${"
DEFAULT_SUFFIX = "}"


class Expander:
    """Lookup source that expands references to other properties in values.

    For example, given the properties::

        color.alert = red
        color.text = black
        css.alert = border: 1px solid ${color.alert}; color: ${color.text};

    ``get("css.alert")`` returns ``"border: 1px solid red; color: black;"``.

    References may be nested (``${one${two}}``) and values produced by a
    substitution are expanded again. A reference to a missing property is left
    unchanged. Cycles stop expansion and return the text as it stood.
    """

    def __init__(
        self,
        source: PropertyGetter,
        prefix: str = DEFAULT_PREFIX,
        suffix: str = DEFAULT_SUFFIX,
        limit: int = 0,
    ):
        """Initialize expander.

        Args:
            source: Properties used both for the values and for resolving references
            prefix: Marker for the start of a reference
            suffix: Marker for the end of a reference
            limit: Maximum number of whole-string rewrite rounds per lookup  # (<= 0 means unlimited)
        """
        self.source = source
        self.prefix = prefix
        self.suffix = suffix
        self.limit = limit

    def get(self, name: str) -> Tuple[str, bool]:
        """Return the expanded value of a property and whether it exists."""
        value, found = self.source.get(name)
        return self._expand(value, set()), found

    def get_default(self, name: str, default: str) -> str:
        """Return the expanded value of a property, or the expanded default."""
        return self._expand(self.source.get_default(name, default), set())

    def names(self) -> List[str]:
        """Return the names known to the wrapped source."""
        return self.source.names()

    def expand(self, value: str) -> str:
        """Expand all references in an arbitrary string."""
        return self._expand(value, set())

    def _expand(self, value: str, seen: Set[str]) -> str:
        """Expand references in ``value``.

        Rewrite rounds repeat until nothing changes. Expansion stops at the
        text as it stood on a repeated state or at the round limit. A round
        whose result still contains one of its earlier rounds also stops it.

        Args:
            value: Text to expand
            seen: Whole-string states already produced during this lookup  # (cycle guard)

        Returns:
            Expanded text  # (unchanged when a cycle or the limit is hit)
        """
        rounds = []
        while True:
            if not value or self.prefix not in value or self.suffix not in value:
                return value

            if value in seen:
                logger.debug("Expansion cycle detected at %r", value)
                return value

            if self.limit > 0 and len(seen) >= self.limit:
                logger.debug("Expansion limit %d reached at %r", self.limit, value)
                return value

            seen.add(value)
            rounds.append(value)
            result = self._rewrite(value, seen)

            if result == value:
                return result
            if any(state in result for state in rounds):
                # Self-reference that grows on every round
                logger.debug("Expansion of %r does not converge", value)
                return value
            value = result

    def _rewrite(self, value: str, seen: Set[str]) -> str:
        """Replace every complete reference in ``value`` once."""
        out = []
        start = 0
        while True:
            begin = value.find(self.prefix, start)
            if begin < 0:
                break
            end = self._find_suffix(value, begin + len(self.prefix))
            if end < 0:
                # Unterminated reference, keep the rest as it is
                break

            out.append(value[start:begin])
            name = self._expand(value[begin + len(self.prefix) : end], seen)
            replacement, found = self.source.get(name)
            if found:
                out.append(replacement)
            else:
                out.append(self.prefix + name + self.suffix)
            start = end + len(self.suffix)

        out.append(value[start:])
        return "".join(out)

    def _find_suffix(self, value: str, index: int) -> int:
        """Find the suffix closing a reference whose name starts at ``index``.

        Returns:
            Position of the closing suffix, or -1 if there is none
        """
        nest = 0
        while index < len(value):
            if value.startswith(self.suffix, index):
                if nest == 0:
                    return index
                nest -= 1
                index += len(self.suffix)
            elif value.startswith(self.prefix, index):
                nest += 1
                index += len(self.prefix)
            else:
                index += 1
        return -1
