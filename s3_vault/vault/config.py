"""
Vault Configuration — bucket, KMS key and region settings.

Reads settings from environment variables:
    VAULT_BUCKET = <S3 bucket holding the secrets>
    VAULT_KMS_KEY_ID = <KMS key id, ARN or alias>
    VAULT_REGION = <AWS region>, falls back to AWS_DEFAULT_REGION
    AWS_PROFILE = <optional shared-credentials profile>
"""
import os
import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger("s3_vault")


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise RuntimeError(f"{name} environment variable is not set")
    return value


class VaultConfig(BaseModel):
    """Validated vault configuration.

    ``region`` falls back to AWS_DEFAULT_REGION when not given.
    """

    bucket_name: str
    key_id: str
    region: Optional[str] = None
    profile: Optional[str] = None
    metadata_timeout: float = Field(default=5, gt=0)
    metadata_attempts: int = Field(default=10, ge=1, le=50)

    @field_validator("bucket_name", "key_id")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only values."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @model_validator(mode="after")
    def resolve_region(self) -> "VaultConfig":
        """Fill region from AWS_DEFAULT_REGION if it was not provided."""
        if not self.region:
            self.region = os.environ.get("AWS_DEFAULT_REGION") or None
        if not self.region:
            raise ValueError(
                "No AWS region configured. "
                "Pass region or set AWS_DEFAULT_REGION"
            )
        return self

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Returns:
            Populated VaultConfig instance.

        Raises:
            RuntimeError: If VAULT_BUCKET or VAULT_KMS_KEY_ID is not set.
        """
        config = cls(
            bucket_name=_require_env("VAULT_BUCKET"),
            key_id=_require_env("VAULT_KMS_KEY_ID"),
            region=os.environ.get("VAULT_REGION") or None,
            profile=os.environ.get("AWS_PROFILE") or None,
        )
        logger.debug(
            "Vault config: bucket=%s region=%s", config.bucket_name, config.region,
        )
        return config
