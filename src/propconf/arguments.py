"""Property source backed by command line arguments."""

import sys
from typing import List, Optional, Tuple

DEFAULT_PREFIX = "--"


class Arguments:
    """Reads properties from command line arguments.

    Property arguments share a common prefix and use ``key=value`` form; all
    other arguments are ignored. With the prefix ``--prop.`` the command::

        cmd -a -1 -z --prop.1=a --prop.2=b --prop.3 --log=debug

    provides the properties ``1=a``, ``2=b`` and ``3=`` (empty).
    """

    def __init__(self, prefix: str = DEFAULT_PREFIX, argv: Optional[List[str]] = None):
        """Initialize argument reader.

        Args:
            prefix: Common prefix of property arguments  # (empty means "--")
            argv: Arguments to read  # (defaults to sys.argv[1:] at lookup time)
        """
        self.prefix = prefix or DEFAULT_PREFIX
        self.argv = argv

    def _arguments(self) -> List[str]:
        return self.argv if self.argv is not None else sys.argv[1:]

    def get(self, name: str) -> Tuple[str, bool]:
        option = self.prefix + name
        for arg in self._arguments():
            if arg == option:
                return "", True
            if arg.startswith(option + "="):
                return arg[len(option) + 1 :], True
        return "", False

    def get_default(self, name: str, default: str) -> str:
        value, found = self.get(name)
        return value if found else default

    def names(self) -> List[str]:
        """Return the property names given on the command line, prefix removed."""
        result = []
        for arg in self._arguments():
            if not arg.startswith(self.prefix):
                continue
            name = arg[len(self.prefix) :].split("=", 1)[0]
            if name and name not in result:
                result.append(name)
        return result
