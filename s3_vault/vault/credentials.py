"""
Credential resolution — resolve AWS credentials once per process.

The boto3 provider chain is walked in order: explicit profile, environment
variables, shared config files, then the instance metadata service. The
metadata service is queried with a bounded timeout and attempt count, and the
whole resolution is retried with exponential backoff on SDK errors.
Once resolved, credentials are cached for the life of the resolver.
"""
import asyncio
import logging
from typing import Optional

import boto3
import botocore.session
from botocore.credentials import Credentials
from botocore.exceptions import BotoCoreError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..exceptions import CredentialError

logger = logging.getLogger("s3_vault")


def build_session(
    region: str,
    profile: Optional[str] = None,
    metadata_timeout: float = 5,
    metadata_attempts: int = 10,
) -> boto3.Session:
    """Create a boto3 session with bounded instance-metadata lookups."""
    core = botocore.session.get_session()
    core.set_config_variable("metadata_service_timeout", metadata_timeout)
    core.set_config_variable("metadata_service_num_attempts", metadata_attempts)
    return boto3.Session(
        botocore_session=core,
        profile_name=profile,
        region_name=region,
    )


class CredentialResolver:
    """Resolve-once credential cache shared by every vault operation."""

    def __init__(self, session: boto3.Session):
        self._session = session
        self._credentials: Optional[Credentials] = None
        self._lock = asyncio.Lock()

    @property
    def resolved(self) -> bool:
        return self._credentials is not None

    async def ensure_resolved(self) -> None:
        """Resolve credentials on first call; later calls return immediately.

        Raises:
            CredentialError: No provider in the chain yielded credentials.
        """
        if self._credentials is not None:
            return
        async with self._lock:
            if self._credentials is not None:
                return
            try:
                credentials = await asyncio.to_thread(self._resolve)
            except BotoCoreError as err:
                raise CredentialError(
                    f"AWS credential resolution failed: {err}"
                ) from err
            if credentials is None:
                raise CredentialError(
                    "No AWS credentials found (profile, environment, "
                    "instance metadata)"
                )
            self._credentials = credentials
            logger.info(
                "Resolved AWS credentials via %s", credentials.method,
            )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
        retry=retry_if_exception_type(BotoCoreError),
        reraise=True,
    )
    def _resolve(self) -> Optional[Credentials]:
        credentials = self._session.get_credentials()
        if credentials is not None:
            # Forces a fetch for refreshable providers (instance metadata).
            credentials.get_frozen_credentials()
        return credentials
