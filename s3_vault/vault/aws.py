"""
AWS transport — S3 object store and KMS adapters over boto3.

boto3 clients are blocking, so every call runs in a worker thread via
``asyncio.to_thread``. botocore errors are mapped onto the vault exception
hierarchy here and nowhere else; timeouts and retries are left to the
botocore client configuration.
"""
import asyncio
import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import ObjectNotFound, TransportError

logger = logging.getLogger("s3_vault")

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def _error_code(err: ClientError) -> str:
    return str(err.response.get("Error", {}).get("Code", "Unknown"))


class S3ObjectStore:
    """ObjectStore backed by a boto3 S3 client and a single bucket."""

    def __init__(self, client: Any, bucket: str):
        self._client = client
        self.bucket = bucket

    async def _call(self, operation: str, key: str | None = None, **kwargs) -> Any:
        method = getattr(self._client, operation)
        try:
            return await asyncio.to_thread(method, Bucket=self.bucket, **kwargs)
        except ClientError as err:
            code = _error_code(err)
            if code in _NOT_FOUND_CODES and key is not None:
                raise ObjectNotFound(obj=key) from err
            raise TransportError(
                f"S3 {operation} failed: {code}", obj=key,
            ) from err
        except BotoCoreError as err:
            raise TransportError(
                f"S3 {operation} failed: {err}", obj=key,
            ) from err

    async def get(self, key: str) -> bytes:
        response = await self._call("get_object", key, Key=key)
        body = response["Body"]
        try:
            return await asyncio.to_thread(body.read)
        except BotoCoreError as err:
            raise TransportError(
                f"S3 get_object read failed: {err}", obj=key,
            ) from err
        finally:
            body.close()

    async def put(self, key: str, body: bytes) -> None:
        await self._call("put_object", key, Key=key, Body=body, ACL="private")

    async def delete(self, key: str) -> None:
        await self._call("delete_object", key, Key=key)

    async def head(self, key: str) -> bool:
        try:
            await self._call("head_object", key, Key=key)
        except ObjectNotFound:
            return False
        return True

    async def list(self) -> tuple[list[str], bool]:
        response = await self._call("list_objects_v2")
        keys = [obj["Key"] for obj in response.get("Contents", [])]
        return keys, bool(response.get("IsTruncated", False))


class KMSKeyService:
    """KeyManagementService backed by a boto3 KMS client."""

    def __init__(self, client: Any):
        self._client = client

    async def _call(self, operation: str, **kwargs) -> dict:
        method = getattr(self._client, operation)
        try:
            return await asyncio.to_thread(method, **kwargs)
        except ClientError as err:
            raise TransportError(
                f"KMS {operation} failed: {_error_code(err)}"
            ) from err
        except BotoCoreError as err:
            raise TransportError(f"KMS {operation} failed: {err}") from err

    async def generate_data_key(self, key_id: str, key_spec: str) -> tuple[bytes, bytes]:
        response = await self._call("generate_data_key", KeyId=key_id, KeySpec=key_spec)
        return response["Plaintext"], response["CiphertextBlob"]

    async def decrypt(self, blob: bytes) -> bytes:
        response = await self._call("decrypt", CiphertextBlob=blob)
        return response["Plaintext"]
