"""Collaborator protocols consumed by the vault client."""
from typing import Protocol


class ObjectStore(Protocol):
    """Async object storage scoped to a single bucket.

    ``get`` raises ObjectNotFound for an absent object, ``head`` returns
    False for one. Any other failure raises TransportError.
    """

    async def get(self, key: str) -> bytes: ...

    async def put(self, key: str, body: bytes) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def head(self, key: str) -> bool: ...

    async def list(self) -> tuple[list[str], bool]:
        """Return (object keys, truncated) from a single listing call."""
        ...


class KeyManagementService(Protocol):

    async def generate_data_key(self, key_id: str, key_spec: str) -> tuple[bytes, bytes]:
        """Return (plaintext key, wrapped key blob)."""
        ...

    async def decrypt(self, blob: bytes) -> bytes: ...


class CredentialProvider(Protocol):

    async def ensure_resolved(self) -> None: ...
