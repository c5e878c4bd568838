"""
Storage layout — the four S3 objects that make up one secret.

    {name}.key               KMS-wrapped data key
    {name}.encrypted         legacy AES-CTR ciphertext (presence marker)
    {name}.aesgcm.encrypted  AES-GCM ciphertext + tag
    {name}.meta              {"alg", "nonce"} JSON, GCM AAD
"""
from enum import Enum
from typing import Optional


class ObjectRole(str, Enum):
    KEY = "key"
    LEGACY = "legacy"
    AUTHENTICATED = "authenticated"
    METADATA = "metadata"


SUFFIXES: dict[ObjectRole, str] = {
    ObjectRole.KEY: ".key",
    ObjectRole.LEGACY: ".encrypted",
    ObjectRole.AUTHENTICATED: ".aesgcm.encrypted",
    ObjectRole.METADATA: ".meta",
}

# Whether deleting the object tolerates its absence. Secrets written before
# the authenticated format existed have no .aesgcm.encrypted or .meta object.
DELETE_POLICY: dict[ObjectRole, bool] = {
    ObjectRole.KEY: False,
    ObjectRole.LEGACY: False,
    ObjectRole.AUTHENTICATED: True,
    ObjectRole.METADATA: True,
}

# S3 object keys are limited to 1024 bytes.
_MAX_OBJECT_KEY = 1024
MAX_NAME_LENGTH = _MAX_OBJECT_KEY - max(len(s) for s in SUFFIXES.values())

# "{name}.aesgcm" + ".encrypted" would be the GCM object of "{name}".
_RESERVED_ENDING = SUFFIXES[ObjectRole.AUTHENTICATED][:-len(SUFFIXES[ObjectRole.LEGACY])]


def validate_name(name: str) -> None:
    """Validate a logical secret name.

    Raises:
        ValueError: If name is empty, too long for an S3 object key, or
            ends in ".aesgcm" and would collide with another secret.
    """
    if not isinstance(name, str) or not name:
        raise ValueError("Secret name cannot be empty")
    if len(name.encode("utf-8")) > MAX_NAME_LENGTH:
        raise ValueError(
            f"Secret name cannot exceed {MAX_NAME_LENGTH} bytes"
        )
    if name.endswith(_RESERVED_ENDING):
        raise ValueError(
            f"Secret name cannot end with '{_RESERVED_ENDING}'"
        )


class SecretLayout:
    """Maps logical secret names to object keys within one bucket."""

    def __init__(self, bucket: str):
        self.bucket = bucket

    def object_name(self, name: str, role: ObjectRole) -> str:
        return f"{name}{SUFFIXES[role]}"

    def objects(self, name: str) -> dict[ObjectRole, str]:
        """Return every object key of a secret, keyed by role."""
        return {role: self.object_name(name, role) for role in ObjectRole}

    def secret_name(self, object_name: str) -> Optional[str]:
        """Recover the secret name from a legacy ciphertext object key.

        Returns None for any other object, including ``.aesgcm.encrypted``
        keys, which share the ``.encrypted`` suffix.
        """
        legacy = SUFFIXES[ObjectRole.LEGACY]
        if not object_name.endswith(legacy):
            return None
        if object_name.endswith(SUFFIXES[ObjectRole.AUTHENTICATED]):
            return None
        name = object_name[:-len(legacy)]
        return name or None

    def __repr__(self) -> str:
        return f"<SecretLayout bucket={self.bucket!r}>"
