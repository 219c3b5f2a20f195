"""Application configuration built from layered property sources."""

from __future__ import annotations

import logging
import math
import os
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List, Optional, Tuple, TypeVar, Union

from .arguments import Arguments
from .combined import Combined
from .encryption import decrypt
from .environment import Environment
from .exceptions import DecryptionError, PropertyValueError
from .expander import Expander
from .lookup import PropertyGetter
from .properties import Properties

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DATE_FORMAT = "%Y-%m-%d"
MAX_BYTE_SIZE = 2**64 - 1

SIZE_PATTERN = re.compile(r"([0-9.]+)\s?([a-zA-Z]*)")
INT_PATTERN = re.compile(r"[+-]?[0-9]+")
DURATION_PART = re.compile(r"([0-9]*(?:\.[0-9]*)?)([^0-9.]+)")

BYTE_SIZE_UNITS = {
    "": 1,
    "k": 1000,
    "Ki": 1 << 10,
    "M": 1000**2,
    "Mi": 1 << 20,
    "G": 1000**3,
    "Gi": 1 << 30,
    "T": 1000**4,
    "Ti": 1 << 40,
    "P": 1000**5,
    "Pi": 1 << 50,
    "E": 1000**6,
    "Ei": 1 << 60,
}

METRIC_SIZE_UNITS = {
    "Y": 1e24,
    "Z": 1e21,
    "E": 1e18,
    "P": 1e15,
    "T": 1e12,
    "G": 1e9,
    "M": 1e6,
    "k": 1e3,
    "h": 1e2,
    "da": 1e1,
    "": 1.0,
    "d": 1e-1,
    "c": 1e-2,
    "m": 1e-3,
    "u": 1e-6,
    "n": 1e-9,
    "p": 1e-12,
    "f": 1e-15,
    "a": 1e-18,
    "z": 1e-21,
    "y": 1e-24,
}

# Duration units in nanoseconds
DURATION_UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

TRUE_VALUES = ("true", "t", "yes", "y", "1", "on")
FALSE_VALUES = ("false", "f", "no", "n", "0", "off")


class Configuration:
    """Typed access to application configuration properties.

    Every ``parse_*`` accessor follows the same contract:

    - property missing: the default is returned
    - property valid: the parsed value is returned
    - property invalid: ``PropertyValueError`` is raised; its ``default``
      attribute holds the default, which is the value to use
    """

    def __init__(
        self,
        props: PropertyGetter,
        date_format: str = DEFAULT_DATE_FORMAT,
        strict_bool: bool = False,
    ):
        """Initialize configuration.

        Args:
            props: Source of the raw property values
            date_format: ``strptime`` format used by ``parse_date``
            strict_bool: Accept only ``true`` and ``false`` in ``parse_bool``
        """
        self.props = props
        self.date_format = date_format
        self.strict_bool = strict_bool

    def get(self, name: str) -> Tuple[str, bool]:
        return self.props.get(name)

    def get_default(self, name: str, default: str) -> str:
        return self.props.get_default(name, default)

    def names(self) -> List[str]:
        return self.props.names()

    def _parse(self, name: str, default: T, parser: Callable[[str], T]) -> T:
        """Look up ``name`` and convert it with ``parser``.

        Args:
            name: Property name
            default: Value returned when the property is missing
            parser: Conversion raising ValueError on bad input

        Raises:
            PropertyValueError: If the value cannot be converted
        """
        value, found = self.props.get(name)
        if not found:
            return default
        try:
            return parser(value)
        except ValueError as e:
            raise PropertyValueError(name, value, default, str(e)) from e

    def parse_int(self, name: str, default: int) -> int:
        return self._parse(name, default, _parse_int)

    def parse_float(self, name: str, default: float) -> float:
        return self._parse(name, default, _parse_float)

    def parse_bool(self, name: str, default: bool) -> bool:
        """Convert a property to a bool.

        In strict mode only ``true`` and ``false`` are accepted. Otherwise the
        comparison ignores case and also accepts::

            true, t, yes, y, 1, on  -> True
            false, f, no, n, 0, off -> False
        """
        return self._parse(name, default, self._parse_bool)

    def _parse_bool(self, value: str) -> bool:
        if self.strict_bool:
            if value == "true":
                return True
            if value == "false":
                return False
            raise ValueError("expected true or false")

        lowered = value.lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
        raise ValueError("not a boolean")

    def parse_duration(self, name: str, default: timedelta) -> timedelta:
        """Convert a property such as ``300ms`` or ``2h45m`` to a timedelta.

        Units are ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and ``h``.
        Precision is limited to microseconds.
        """
        return self._parse(name, default, parse_duration)

    def parse_date(self, name: str, default: datetime) -> datetime:
        """Convert a property to a datetime using ``date_format``.

        Values without timezone information are taken as UTC.
        """
        return self._parse(name, default, self._parse_date)

    def _parse_date(self, value: str) -> datetime:
        result = datetime.strptime(value, self.date_format or DEFAULT_DATE_FORMAT)
        if result.tzinfo is None:
            result = result.replace(tzinfo=timezone.utc)
        return result

    def parse_byte_size(self, name: str, default: int) -> int:
        """Convert a property in byte size format to an int.

        The format is ``<num> <suffix>``, both the space and the suffix being
        optional. ``k M G T P E`` are powers of 1000 and ``Ki Mi Gi Ti Pi Ei``
        powers of 1024. Decimal values are rounded to the nearest byte.
        """
        return self._parse(name, default, parse_byte_size)

    def parse_size(self, name: str, default: float) -> float:
        """Convert a property with a metric suffix (``1.5k``, ``20 m``) to a float.

        Suffixes run from ``y`` (1e-24) to ``Y`` (1e24), including ``da``
        (deca) and ``h`` (hecto).
        """
        return self._parse(name, default, parse_size)

    def decrypt(self, password: str, name: str, default: str) -> str:
        """Return the plaintext of an encrypted property.

        Raises:
            PropertyValueError: If the value cannot be decrypted
        """
        value, found = self.props.get(name)
        if not found:
            return default
        try:
            return decrypt(password, value)
        except DecryptionError as e:
            raise PropertyValueError(name, value, default, f"invalid encrypted value [{e}]") from e


def _parse_int(value: str) -> int:
    if not INT_PATTERN.fullmatch(value):
        raise ValueError(f"invalid int {value!r}")
    return int(value)


def _parse_float(value: str) -> float:
    if value != value.strip() or "_" in value:
        raise ValueError(f"invalid float {value!r}")
    return float(value)


def _match_size(value: str) -> Tuple[str, str]:
    match = SIZE_PATTERN.fullmatch(value)
    if match is None:
        raise ValueError("invalid size value")
    return match.group(1), match.group(2)


def parse_byte_size(value: str) -> int:
    """Parse a byte size string such as ``720 Ki`` or ``1.44M``."""
    number, suffix = _match_size(value)
    if suffix not in BYTE_SIZE_UNITS:
        raise ValueError("unknown suffix")
    multiplier = BYTE_SIZE_UNITS[suffix]

    if "." in number:
        scaled = float(number) * multiplier
        if math.isinf(scaled):
            raise ValueError("value out of range")
        # Round half away from zero
        result = int(math.floor(scaled + 0.5))
    else:
        result = int(number) * multiplier

    if result > MAX_BYTE_SIZE:
        raise ValueError("value out of range")
    return result


def parse_size(value: str) -> float:
    """Parse a metric size string such as ``1.23 k`` or ``15m``."""
    number, suffix = _match_size(value)
    if suffix not in METRIC_SIZE_UNITS:
        raise ValueError("unknown suffix")
    return float(number) * METRIC_SIZE_UNITS[suffix]


def parse_duration(value: str) -> timedelta:
    """Parse a duration string made of signed decimal numbers with units.

    Examples are ``300ms``, ``-1.5h`` and ``2h45m``. A bare ``0`` is allowed.
    """
    text = value
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {value!r}")

    total = 0.0  # (nanoseconds)
    index = 0
    while index < len(text):
        match = DURATION_PART.match(text, index)
        if match is None:
            raise ValueError(f"invalid duration {value!r}")
        number, unit = match.groups()
        if number in ("", "."):
            raise ValueError(f"invalid duration {value!r}")
        if unit not in DURATION_UNITS:
            raise ValueError(f"unknown unit {unit!r} in duration {value!r}")
        total += float(number) * DURATION_UNITS[unit]
        index = match.end()

    try:
        return timedelta(microseconds=sign * total / 1000)
    except OverflowError as e:
        raise ValueError(f"duration out of range {value!r}") from e


def new_configuration(
    prefix: str,
    *profiles: str,
    directory: Union[str, os.PathLike] = ".",
    argv: Optional[List[str]] = None,
) -> Configuration:
    """Create a configuration using common conventions.

    Property values are looked up in this priority order:

    1. Command line arguments (``--name=value``)
    2. Environment variables (names normalized, ``app.port`` -> ``APP_PORT``)
    3. ``<prefix>-<profile>.properties`` for each profile, in the given order
    4. ``<prefix>.properties``

    Values are expanded with an ``Expander`` over all sources combined.

    Args:
        prefix: Base name of the property files
        *profiles: Profile names, highest priority first
        directory: Directory containing the property files
        argv: Arguments to read instead of ``sys.argv[1:]``

    Returns:
        Configuration over the combined sources

    Raises:
        PropertiesReadError: If an existing property file cannot be read
    """
    base = Path(directory)
    combined = Combined([Arguments(argv=argv), Environment(normalize=True)])

    filenames = [f"{prefix}-{profile}.properties" for profile in profiles]
    filenames.append(f"{prefix}.properties")

    for filename in filenames:
        path = base / filename
        if not path.is_file():
            logger.debug("Skipping missing property file %s", path)
            continue
        props = Properties()
        props.load_path(path)
        combined.sources.append(props)
        logger.debug("Loaded property file %s", path)

    return Configuration(Expander(combined))
