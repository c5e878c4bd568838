"""
Key Wrapper — per-secret data keys from KMS.

A data key is requested for every store. Its plaintext form is only held in
memory for the duration of one operation; the wrapped form is persisted as
the ``{name}.key`` object. Errors from KMS propagate unchanged.
"""
import logging
from dataclasses import dataclass, field

from .crypto import KMS_KEY_SPEC
from .interfaces import KeyManagementService

logger = logging.getLogger("s3_vault")


@dataclass(frozen=True)
class DataKey:
    plaintext: bytes = field(repr=False)
    wrapped: bytes = field(repr=False)


class KeyWrapper:
    """Generates and unwraps data keys under one KMS key."""

    def __init__(self, kms: KeyManagementService, key_id: str):
        self._kms = kms
        self._key_id = key_id

    @property
    def key_id(self) -> str:
        return self._key_id

    async def wrap_new_key(self) -> DataKey:
        """Request a fresh AES-256 data key.

        Returns:
            DataKey holding raw key material and its KMS ciphertext blob.
        """
        plaintext, wrapped = await self._kms.generate_data_key(
            self._key_id, KMS_KEY_SPEC,
        )
        logger.debug("Generated data key under %s", self._key_id)
        return DataKey(plaintext=plaintext, wrapped=wrapped)

    async def unwrap(self, wrapped: bytes) -> bytes:
        """Decrypt a wrapped data key blob via KMS."""
        return await self._kms.decrypt(wrapped)
