"""In-memory collaborators for vault tests."""
import os

import pytest

from s3_vault.exceptions import ObjectNotFound, TransportError
from s3_vault.vault.client import VaultClient
from s3_vault.vault.layout import SecretLayout


class InMemoryObjectStore:
    """ObjectStore over a dict; records calls and can inject failures."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail: dict[tuple[str, str], Exception] = {}
        self.truncated = False

    def _check(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        error = self.fail.get((operation, key))
        if error is not None:
            raise error

    async def get(self, key: str) -> bytes:
        self._check("get", key)
        if key not in self.objects:
            raise ObjectNotFound(obj=key)
        return self.objects[key]

    async def put(self, key: str, body: bytes) -> None:
        self._check("put", key)
        self.objects[key] = bytes(body)

    async def delete(self, key: str) -> None:
        self._check("delete", key)
        if key not in self.objects:
            raise ObjectNotFound(obj=key)
        del self.objects[key]

    async def head(self, key: str) -> bool:
        self._check("head", key)
        return key in self.objects

    async def list(self) -> tuple[list[str], bool]:
        self._check("list", "")
        return list(reversed(sorted(self.objects))), self.truncated


class FakeKMS:
    """KeyManagementService issuing random data keys."""

    def __init__(self):
        self.keys: dict[bytes, bytes] = {}
        self.generated: list[tuple[str, str]] = []

    async def generate_data_key(self, key_id: str, key_spec: str) -> tuple[bytes, bytes]:
        self.generated.append((key_id, key_spec))
        plaintext = os.urandom(32)
        wrapped = b"wrapped:" + os.urandom(16)
        self.keys[wrapped] = plaintext
        return plaintext, wrapped

    async def decrypt(self, blob: bytes) -> bytes:
        if blob not in self.keys:
            raise TransportError("KMS decrypt failed: InvalidCiphertextException")
        return self.keys[blob]


class FakeCredentials:

    def __init__(self, error: Exception | None = None):
        self.calls = 0
        self.error = error

    async def ensure_resolved(self) -> None:
        self.calls += 1
        if self.error is not None:
            raise self.error


@pytest.fixture
def store():
    return InMemoryObjectStore()


@pytest.fixture
def kms():
    return FakeKMS()


@pytest.fixture
def credentials():
    return FakeCredentials()


@pytest.fixture
def layout():
    return SecretLayout("vault-bucket")


@pytest.fixture
def client(store, kms, layout, credentials):
    return VaultClient(
        store=store,
        kms=kms,
        layout=layout,
        key_id="alias/vault",
        credentials=credentials,
    )
