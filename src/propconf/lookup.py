"""The lookup capability shared by every property source."""

from typing import List, Protocol, Tuple, runtime_checkable


@runtime_checkable
class PropertyGetter(Protocol):
    """Anything that can answer property lookups.

    Stores, environment and argument readers, the combined reader, the
    expander and the configuration all satisfy this protocol structurally.
    """

    def get(self, name: str) -> Tuple[str, bool]:
        """Return the value for ``name`` and whether it was found."""
        ...

    def get_default(self, name: str, default: str) -> str:
        """Return the value for ``name`` or ``default`` when absent."""
        ...

    def names(self) -> List[str]:
        """Return the unique names known to this source, in no particular order."""
        ...
