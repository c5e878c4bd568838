"""
Vault Key Rotation — Batch re-encryption of secrets under fresh data keys.

Each secret is looked up and stored again, which requests a new KMS data key
and rewrites all four objects. Secrets still in the legacy format are
upgraded to the authenticated format on the way. Batches run concurrently
within themselves and sequentially across batches.

Security Note:
    Plaintext exists in memory only during re-encryption of each secret.
    Never log plaintext or ciphertext values.
"""
import asyncio
import logging
from typing import Optional

from .client import VaultClient

logger = logging.getLogger("s3_vault")


async def _rotate_one(client: VaultClient, name: str) -> None:
    plaintext = await client.lookup_bytes(name)
    await client.store(name, plaintext)


async def rotate_data_keys(
    client: VaultClient,
    names: Optional[list[str]] = None,
    batch_size: int = 100,
) -> dict:
    """Re-encrypt secrets under fresh data keys in batches.

    Args:
        client: Vault client to rotate through.
        names: Secret names to rotate; all stored secrets when None.
        batch_size: Number of secrets re-encrypted concurrently.

    Returns:
        Stats dict with keys: total, rotated, errors.

    Raises:
        ValueError: If batch_size is not positive.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    if names is None:
        names = await client.all()

    stats = {"total": 0, "rotated": 0, "errors": 0}
    logger.info(
        "Starting data key rotation of %d secret(s) (batch_size=%d)",
        len(names), batch_size,
    )

    for offset in range(0, len(names), batch_size):
        batch = names[offset:offset + batch_size]
        logger.info(
            "Processing batch %d (%d secrets)", offset // batch_size + 1, len(batch),
        )
        results = await asyncio.gather(
            *(_rotate_one(client, name) for name in batch),
            return_exceptions=True,
        )
        for name, result in zip(batch, results):
            stats["total"] += 1
            if isinstance(result, Exception):
                logger.error(
                    "Error rotating secret %s: %s", name, result,
                )
                stats["errors"] += 1
            elif isinstance(result, BaseException):
                raise result
            else:
                stats["rotated"] += 1

    logger.info("Data key rotation complete: %s", stats)
    return stats
