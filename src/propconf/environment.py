"""Property source backed by OS environment variables."""

import os
from typing import List, Tuple


def normalize_env_name(name: str) -> str:
    """Convert a property name to a POSIX-style environment variable name.

    ASCII letters are uppercased, digits are kept and every other character
    becomes ``_``. For example ``foo.bar.baz`` becomes ``FOO_BAR_BAZ`` and
    ``$my-test#val_1`` becomes ``_MY_TEST_VAL_1``.
    """
    chars = []
    for char in name:
        if "a" <= char <= "z":
            chars.append(char.upper())
        elif "A" <= char <= "Z" or "0" <= char <= "9":
            chars.append(char)
        else:
            chars.append("_")
    return "".join(chars)


class Environment:
    """Reads properties from the process environment at lookup time."""

    def __init__(self, normalize: bool = False):
        """Initialize environment reader.

        Args:
            normalize: Convert requested names with ``normalize_env_name`` before lookup
        """
        self.normalize = normalize

    def get(self, name: str) -> Tuple[str, bool]:
        if self.normalize:
            name = normalize_env_name(name)
        value = os.environ.get(name)
        if value is None:
            return "", False
        return value, True

    def get_default(self, name: str, default: str) -> str:
        value, found = self.get(name)
        return value if found else default

    def names(self) -> List[str]:
        """Return the names of all environment variables."""
        return list(os.environ)
