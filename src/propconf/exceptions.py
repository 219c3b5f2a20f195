"""Custom exceptions for propconf."""

from typing import Any


class PropConfError(Exception):
    """Base exception for propconf errors."""

    pass


class PropertiesReadError(PropConfError, OSError):
    """Raised when the underlying stream fails while loading properties."""

    def __init__(self, source: str, cause: BaseException):
        self.source = source
        self.cause = cause
        super().__init__(f"Unable to read properties from {source}: {cause}")


class PropertiesWriteError(PropConfError, OSError):
    """Raised when the underlying sink rejects a write."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Unable to write properties: {cause}")


class PropertyValueError(PropConfError, ValueError):
    """Raised when a typed accessor cannot parse a property value.

    The ``default`` attribute holds the caller-supplied default, which is the
    value to use whenever this error is raised.
    """

    def __init__(self, name: str, value: str, default: Any, reason: str = ""):
        self.name = name
        self.value = value
        self.default = default
        self.reason = reason
        message = f"invalid value {name}={value}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class EncryptionError(PropConfError):
    """Raised when a value cannot be encrypted."""

    pass


class DecryptionError(PropConfError):
    """Raised when an encrypted value cannot be decrypted."""

    pass


class CommandError(PropConfError):
    """Raised by command line handlers; carries the process exit code."""

    def __init__(self, message: str, exit_code: int, show_usage: bool = False):
        self.exit_code = exit_code
        self.show_usage = show_usage
        super().__init__(message)
