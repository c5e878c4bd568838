"""
Vault Crypto Core — Envelope encryption of a single secret under a data key.

Every store produces two ciphertext layers under the same data key:
- Authenticated layer: AES-256-GCM, random 96-bit nonce, AAD = metadata JSON
  → [ciphertext][tag 16B]
- Legacy layer: AES-256-CTR with a fixed counter block → [ciphertext]

The legacy layer keeps secrets readable by clients that predate the
authenticated format. Reusing the fixed counter block is only sound because
every store asks KMS for a fresh data key.

Security Note:
    Never log plaintext, data keys or ciphertext values.
"""
import os
import base64
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

import orjson
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import IntegrityError

logger = logging.getLogger("s3_vault")

NONCE_SIZE = 12  # 96-bit GCM nonce
TAG_SIZE = 16  # GCM authentication tag
KEY_LENGTH = 32  # AES-256

AUTH_ALGORITHM = "AESGCM"
KMS_KEY_SPEC = "AES_256"

# Big-endian 128-bit 1337, the counter block of every legacy ciphertext.
LEGACY_NONCE = (1337).to_bytes(16, "big")


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EncryptedBundle:
    """Object bodies produced by a single store."""

    legacy_ciphertext: bytes = field(repr=False)
    auth_ciphertext: bytes = field(repr=False)
    auth_tag: bytes = field(repr=False)
    metadata: bytes


@dataclass(frozen=True)
class Authenticated:
    """AES-GCM format: nonce and AAD recovered from the metadata object.

    ``nonce`` is None when the metadata nonce is not valid base64.
    """

    nonce: Optional[bytes]
    aad: bytes


@dataclass(frozen=True)
class Legacy:
    """AES-CTR format with the fixed counter block, no integrity check."""


Format = Union[Authenticated, Legacy]


def validate_data_key(data_key: bytes) -> None:
    """Ensure a data key is raw AES-256 key material.

    Raises:
        ValueError: If the key is not exactly 32 bytes.
    """
    if not isinstance(data_key, (bytes, bytearray)) or len(data_key) != KEY_LENGTH:
        raise ValueError(f"Data key must be exactly {KEY_LENGTH} bytes")


def build_metadata(nonce: bytes) -> bytes:
    """Serialize the metadata document for an authenticated ciphertext.

    The returned bytes are stored as-is and double as the GCM AAD, so they
    must never be re-serialized before decryption.
    """
    return orjson.dumps({
        "alg": AUTH_ALGORITHM,
        "nonce": base64.b64encode(nonce).decode("ascii"),
    })


def _legacy_cipher(data_key: bytes) -> Cipher:
    return Cipher(algorithms.AES(data_key), modes.CTR(LEGACY_NONCE))


# ---------------------------------------------------------------------------
# Encryption
# ---------------------------------------------------------------------------

def encrypt(plaintext: Union[str, bytes], data_key: bytes) -> EncryptedBundle:
    """Encrypt a secret value under both formats.

    Args:
        plaintext: Secret value; ``str`` values are UTF-8 encoded.
        data_key: Raw 32-byte data key from KMS.

    Returns:
        EncryptedBundle with the four object bodies of one secret version
        (the wrapped key body is owned by the key wrapper).
    """
    validate_data_key(data_key)
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")

    nonce = os.urandom(NONCE_SIZE)
    metadata = build_metadata(nonce)
    sealed = AESGCM(data_key).encrypt(nonce, plaintext, metadata)

    encryptor = _legacy_cipher(data_key).encryptor()
    legacy = encryptor.update(plaintext) + encryptor.finalize()

    return EncryptedBundle(
        legacy_ciphertext=legacy,
        auth_ciphertext=sealed,
        auth_tag=sealed[-TAG_SIZE:],
        metadata=metadata,
    )


# ---------------------------------------------------------------------------
# Decryption
# ---------------------------------------------------------------------------

def decrypt(body: bytes, data_key: bytes, fmt: Format) -> bytes:
    """Decrypt a stored ciphertext body in the given format.

    Args:
        body: Content of the ciphertext object that matches ``fmt``.
        data_key: Raw 32-byte data key unwrapped by KMS.
        fmt: Authenticated(nonce, aad) or Legacy().

    Returns:
        Plaintext bytes.

    Raises:
        IntegrityError: Authenticated body failed tag verification, or
            the metadata nonce is malformed.
    """
    validate_data_key(data_key)
    if isinstance(fmt, Authenticated):
        return _decrypt_authenticated(body, data_key, fmt)
    return _decrypt_legacy(body, data_key)


def _decrypt_authenticated(body: bytes, data_key: bytes, fmt: Authenticated) -> bytes:
    if fmt.nonce is None or len(fmt.nonce) != NONCE_SIZE:
        raise IntegrityError("Metadata nonce is malformed")
    if len(body) < TAG_SIZE:
        raise IntegrityError(
            f"Authenticated ciphertext too short: {len(body)} bytes "
            f"(minimum {TAG_SIZE})"
        )
    ciphertext, tag = body[:-TAG_SIZE], body[-TAG_SIZE:]
    try:
        return AESGCM(data_key).decrypt(fmt.nonce, ciphertext + tag, fmt.aad)
    except InvalidTag as err:
        raise IntegrityError("Authentication tag verification failed") from err


def _decrypt_legacy(body: bytes, data_key: bytes) -> bytes:
    decryptor = _legacy_cipher(data_key).decryptor()
    return decryptor.update(body) + decryptor.finalize()
