"""propconf - Java properties files for application configuration.

Reads and writes the Java properties text format, expands ``${name}``
references between values, layers files, environment variables and command
line arguments, and parses values into typed results.
"""
# ruff: noqa: F401

from .arguments import Arguments
from .combined import Combined
from .configuration import Configuration, new_configuration
from .encryption import ENCRYPT_AES_GCM, ENCRYPT_DEFAULT, ENCRYPT_NONE, decrypt, encrypt
from .environment import Environment
from .exceptions import (
    DecryptionError,
    EncryptionError,
    PropConfError,
    PropertiesReadError,
    PropertiesWriteError,
    PropertyValueError,
)
from .expander import Expander
from .lookup import PropertyGetter
from .properties import Properties, read, read_path

__version__ = "0.1.0"
