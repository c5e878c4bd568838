"""
Dual-Format Reader — decide how a stored secret is decrypted.

A secret is in the authenticated format if and only if its metadata object
exists and parses; a missing metadata object is the normal signature of a
secret written before AES-GCM support and is not an error.
"""
import asyncio
import base64
import binascii
import logging
from typing import Optional

import orjson

from ..exceptions import ObjectNotFound
from .crypto import Authenticated, Format, Legacy
from .interfaces import ObjectStore
from .layout import ObjectRole, SecretLayout

logger = logging.getLogger("s3_vault")


def select_format(metadata: Optional[bytes]) -> Format:
    """Derive the ciphertext format from the metadata object body.

    Args:
        metadata: Raw metadata object bytes, or None if the object is absent.

    Returns:
        Authenticated(nonce, aad) when the metadata is a JSON object with a
        ``nonce`` field, Legacy() otherwise. A nonce that does not decode is
        kept as None so decryption fails instead of downgrading.
    """
    if metadata is None:
        return Legacy()
    try:
        doc = orjson.loads(metadata)
    except orjson.JSONDecodeError:
        return Legacy()
    if not isinstance(doc, dict) or "nonce" not in doc:
        return Legacy()
    return Authenticated(nonce=_decode_nonce(doc["nonce"]), aad=bytes(metadata))


def _decode_nonce(value: object) -> Optional[bytes]:
    if not isinstance(value, str):
        return None
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error:
        return None


class DualFormatReader:
    """Fetches the ciphertext and metadata objects of a secret."""

    def __init__(self, store: ObjectStore, layout: SecretLayout):
        self._store = store
        self._layout = layout

    async def fetch_ciphertext(self, name: str) -> tuple[ObjectRole, bytes]:
        """Fetch the authenticated ciphertext, falling back to the legacy one."""
        try:
            body = await self._store.get(
                self._layout.object_name(name, ObjectRole.AUTHENTICATED)
            )
            return ObjectRole.AUTHENTICATED, body
        except ObjectNotFound:
            return ObjectRole.LEGACY, await self._fetch_legacy(name)

    async def fetch_metadata(self, name: str) -> Optional[bytes]:
        try:
            return await self._store.get(
                self._layout.object_name(name, ObjectRole.METADATA)
            )
        except ObjectNotFound:
            return None

    async def read(self, name: str) -> tuple[Format, bytes]:
        """Return the format of a secret and the ciphertext body matching it.

        Raises:
            ObjectNotFound: Neither ciphertext object exists.
        """
        (role, body), metadata = await asyncio.gather(
            self.fetch_ciphertext(name),
            self.fetch_metadata(name),
        )
        fmt = select_format(metadata)
        if isinstance(fmt, Legacy) and role is ObjectRole.AUTHENTICATED:
            # GCM body without usable metadata cannot be decrypted.
            body = await self._fetch_legacy(name)
        elif isinstance(fmt, Authenticated) and role is ObjectRole.LEGACY:
            logger.warning(
                "Secret %s has metadata but no authenticated ciphertext, "
                "reading legacy ciphertext", name,
            )
            fmt = Legacy()
        return fmt, body

    async def _fetch_legacy(self, name: str) -> bytes:
        return await self._store.get(
            self._layout.object_name(name, ObjectRole.LEGACY)
        )
