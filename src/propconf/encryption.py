"""Encryption of individual property values.

Encrypted values carry a short algorithm tag followed by the payload, e.g.
``[enc:1]qzp-F5Cw...``. ``[enc:0]`` marks a plaintext value that is waiting to
be encrypted (see the ``encryptFile`` command).
"""

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .exceptions import DecryptionError, EncryptionError

ENCRYPT_NONE = "[enc:0]"
ENCRYPT_AES_GCM = "[enc:1]"
ENCRYPT_DEFAULT = ENCRYPT_AES_GCM

NONCE_SIZE = 12
AES_KEY_SIZES = (16, 24, 32)


def _aes_key(password: str) -> bytes:
    key = password.encode("utf-8")
    if len(key) not in AES_KEY_SIZES:
        raise ValueError(f"invalid key size {len(key)}, must be 16, 24, or 32 bytes")
    return key


def encrypt(alg: str, password: str, value: str) -> str:
    """Encrypt a value with the given algorithm.

    Args:
        alg: Algorithm tag  # (ENCRYPT_NONE or ENCRYPT_AES_GCM)
        password: Key for AES-GCM  # (16, 24 or 32 bytes once UTF-8 encoded)
        value: Plaintext value

    Returns:
        Tagged value with URL-safe base64 payload

    Raises:
        EncryptionError: If the algorithm is unknown or the key is unusable
    """
    if alg == ENCRYPT_NONE:
        return ENCRYPT_NONE + value
    if alg != ENCRYPT_AES_GCM:
        raise EncryptionError(f"unknown algorithm {alg}")

    try:
        gcm = AESGCM(_aes_key(password))
    except ValueError as e:
        raise EncryptionError(f"unable to init aes encryption [{e}]") from e

    nonce = os.urandom(NONCE_SIZE)
    sealed = nonce + gcm.encrypt(nonce, value.encode("utf-8"), None)
    return ENCRYPT_AES_GCM + base64.urlsafe_b64encode(sealed).decode("ascii")


def decrypt(password: str, value: str) -> str:
    """Return the plaintext of a value produced by ``encrypt``.

    Raises:
        DecryptionError: If the value is not tagged, the tag is unknown, the
            payload is malformed or authentication fails
    """
    if "]" not in value:
        raise DecryptionError("missing algorithm")
    alg = value[: value.index("]") + 1]
    payload = value[len(alg) :]
    if alg == ENCRYPT_NONE:
        return payload

    try:
        data = base64.b64decode(payload, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptionError(f"invalid base64 payload [{e}]") from e

    if alg != ENCRYPT_AES_GCM:
        raise DecryptionError("unknown algorithm")

    try:
        gcm = AESGCM(_aes_key(password))
    except ValueError as e:
        raise DecryptionError(f"unable to init aes decryption [{e}]") from e

    if len(data) < NONCE_SIZE + 1:
        raise DecryptionError("encrypted value too small")

    nonce, sealed = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        plain = gcm.decrypt(nonce, sealed, None)
    except InvalidTag as e:
        raise DecryptionError("message authentication failed") from e

    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError("decrypted value is not valid UTF-8") from e
