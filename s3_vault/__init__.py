from .version import __version__
from .exceptions import (
    VaultError,
    ObjectNotFound,
    IntegrityError,
    CredentialError,
    TransportError,
)
from .vault import VaultClient, VaultConfig, rotate_data_keys

__all__ = [
    "__version__",
    "VaultError",
    "ObjectNotFound",
    "IntegrityError",
    "CredentialError",
    "TransportError",
    "VaultClient",
    "VaultConfig",
    "rotate_data_keys",
]
