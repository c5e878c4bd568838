"""
VaultClient — named secrets in S3 with KMS envelope encryption.

Provides the public API of the vault:
- ``lookup(name)`` — fetch and decrypt a secret
- ``store(name, data)`` — encrypt a secret under a fresh data key and write it
- ``delete(name)`` — remove every object of a secret
- ``exists(name)`` / ``all()`` — check and enumerate stored secrets
- ``from_config(config)`` — factory wiring the boto3 S3/KMS adapters

Each operation issues its object reads, writes or deletes concurrently and
waits for all of them. The four objects of a secret are not written
atomically: a failed store leaves whatever writes succeeded in place, and
concurrent stores of the same name may interleave.

Security Note:
    Never log plaintext, data keys or ciphertext values. Only log secret
    names and object keys.
"""
import asyncio
import logging
from collections.abc import Awaitable, Iterable
from typing import Any, Union

from ..exceptions import ObjectNotFound, VaultError
from .aws import KMSKeyService, S3ObjectStore
from .config import VaultConfig
from .credentials import CredentialResolver, build_session
from .crypto import decrypt, encrypt
from .interfaces import CredentialProvider, KeyManagementService, ObjectStore
from .keys import KeyWrapper
from .layout import DELETE_POLICY, ObjectRole, SecretLayout, validate_name
from .reader import DualFormatReader

logger = logging.getLogger("s3_vault")


async def _join(calls: Iterable[Awaitable[Any]]) -> list[Any]:
    """Await every call, then raise the first failure in call order."""
    results = await asyncio.gather(*calls, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class VaultClient:
    """Encrypted secret vault backed by one S3 bucket and one KMS key.

    Every secret is stored as four objects (see ``layout``): the wrapped data
    key, a legacy AES-CTR ciphertext, an AES-GCM ciphertext and its metadata.
    Lookups prefer the AES-GCM ciphertext and fall back to the legacy one
    for secrets written before the authenticated format existed.
    """

    def __init__(
        self,
        store: ObjectStore,
        kms: KeyManagementService,
        layout: SecretLayout,
        key_id: str,
        credentials: CredentialProvider,
    ):
        self._store = store
        self._layout = layout
        self._keys = KeyWrapper(kms, key_id)
        self._reader = DualFormatReader(store, layout)
        self._credentials = credentials

    @property
    def layout(self) -> SecretLayout:
        return self._layout

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _unwrap_key(self, name: str) -> bytes:
        key_object = self._layout.object_name(name, ObjectRole.KEY)
        wrapped = await self._store.get(key_object)
        return await self._keys.unwrap(wrapped)

    async def _delete(self, name: str, role: ObjectRole) -> None:
        key = self._layout.object_name(name, role)
        try:
            await self._store.delete(key)
        except ObjectNotFound:
            if not DELETE_POLICY[role]:
                raise
            logger.debug("Vault delete: %s already absent", key)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def lookup_bytes(self, name: str) -> bytes:
        """Fetch and decrypt a secret.

        Args:
            name: Secret name.

        Returns:
            Decrypted plaintext bytes.

        Raises:
            ObjectNotFound: The key object or both ciphertext objects are missing.
            IntegrityError: The authenticated ciphertext failed verification.
        """
        validate_name(name)
        await self._credentials.ensure_resolved()
        try:
            data_key, (fmt, body) = await _join([
                self._unwrap_key(name),
                self._reader.read(name),
            ])
        except VaultError as err:
            if err.secret_name is None:
                err.secret_name = name
            raise
        logger.debug(
            "Vault lookup: secret=%s format=%s", name, type(fmt).__name__,
        )
        try:
            return decrypt(body, data_key, fmt)
        except VaultError as err:
            err.secret_name = name
            raise

    async def lookup(self, name: str) -> str:
        """Fetch and decrypt a secret as UTF-8 text."""
        return (await self.lookup_bytes(name)).decode("utf-8")

    async def store(self, name: str, data: Union[str, bytes]) -> None:
        """Encrypt a secret under a fresh data key and write all four objects.

        Overwrites any previous version of ``name``. There is no rollback:
        if any write fails, the error is raised after every write finished
        and the secret may be left partially updated.

        Args:
            name: Secret name.
            data: Secret value; ``str`` values are UTF-8 encoded.
        """
        validate_name(name)
        await self._credentials.ensure_resolved()
        data_key = await self._keys.wrap_new_key()
        bundle = encrypt(data, data_key.plaintext)
        bodies = {
            ObjectRole.KEY: data_key.wrapped,
            ObjectRole.LEGACY: bundle.legacy_ciphertext,
            ObjectRole.AUTHENTICATED: bundle.auth_ciphertext,
            ObjectRole.METADATA: bundle.metadata,
        }
        objects = self._layout.objects(name)
        try:
            await _join(
                self._store.put(objects[role], body) for role, body in bodies.items()
            )
        except VaultError as err:
            err.secret_name = name
            logger.error(
                "Vault store: secret=%s partially written: %s", name, err.message,
            )
            raise
        logger.debug("Vault store: secret=%s", name)

    async def delete(self, name: str) -> None:
        """Delete every object of a secret.

        The key and legacy ciphertext objects must exist; the authenticated
        ciphertext and metadata objects may be absent.
        """
        validate_name(name)
        await self._credentials.ensure_resolved()
        try:
            await _join(self._delete(name, role) for role in ObjectRole)
        except VaultError as err:
            err.secret_name = name
            raise
        logger.debug("Vault delete: secret=%s", name)

    async def exists(self, name: str) -> bool:
        """Check whether a secret is stored.

        The legacy ciphertext object is the presence marker. Storage
        failures count as absence.
        """
        validate_name(name)
        await self._credentials.ensure_resolved()
        try:
            return await self._store.head(
                self._layout.object_name(name, ObjectRole.LEGACY)
            )
        except VaultError as err:
            logger.debug("Vault exists: secret=%s treated as absent: %s", name, err)
            return False

    async def all(self) -> list[str]:
        """List the names of all stored secrets.

        Only the first listing page of the bucket is read.
        """
        await self._credentials.ensure_resolved()
        keys, truncated = await self._store.list()
        if truncated:
            logger.warning(
                "Bucket %s listing is truncated; secret names beyond the "
                "first page are not returned", self._layout.bucket,
            )
        names = []
        for key in keys:
            name = self._layout.secret_name(key)
            if name is not None:
                names.append(name)
        return names

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, config: VaultConfig) -> "VaultClient":
        """Build a client on boto3 S3 and KMS clients sharing one session.

        Args:
            config: Validated vault configuration.

        Returns:
            VaultClient ready for use; credentials resolve on first call.
        """
        session = build_session(
            region=config.region,
            profile=config.profile,
            metadata_timeout=config.metadata_timeout,
            metadata_attempts=config.metadata_attempts,
        )
        store = S3ObjectStore(session.client("s3"), config.bucket_name)
        kms = KMSKeyService(session.client("kms"))
        logger.info(
            "Vault client for bucket=%s region=%s", config.bucket_name, config.region,
        )
        return cls(
            store=store,
            kms=kms,
            layout=SecretLayout(config.bucket_name),
            key_id=config.key_id,
            credentials=CredentialResolver(session),
        )
