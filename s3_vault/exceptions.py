"""
Vault exception hierarchy.

    VaultError (base)
    ├── ObjectNotFound  - a stored object is absent
    ├── IntegrityError  - authenticated decryption failed
    ├── CredentialError - no usable AWS credentials
    └── TransportError  - S3/KMS call failed

Messages carry secret names and object ids only, never secret values
or key material.
"""
from typing import Optional


class VaultError(Exception):
    """Base exception for all vault errors."""

    def __init__(
        self,
        message: str,
        secret_name: Optional[str] = None,
        obj: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.secret_name = secret_name
        self.obj = obj

    def __str__(self) -> str:
        context = []
        if self.secret_name:
            context.append(f"secret: {self.secret_name}")
        if self.obj:
            context.append(f"object: {self.obj}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class ObjectNotFound(VaultError):
    """A stored object does not exist in the bucket."""

    def __init__(self, obj: str, secret_name: Optional[str] = None):
        super().__init__("Object not found", secret_name=secret_name, obj=obj)


class IntegrityError(VaultError):
    """Authentication tag verification failed.

    Raised for a wrong data key, a corrupted ciphertext or tampered
    metadata. No plaintext is ever returned alongside this error.
    """


class CredentialError(VaultError):
    """No usable AWS credentials could be resolved."""


class TransportError(VaultError):
    """An S3 or KMS call failed for a reason other than a missing object."""
