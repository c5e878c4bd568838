"""S3 Vault — Named secrets in S3 protected by KMS envelope encryption.

Security Note (Threat Model):
    Data keys and plaintext exist in process memory only for the duration
    of one operation. Secrets stored before AES-GCM support are read through
    the legacy AES-CTR layer, which offers confidentiality but no integrity;
    re-storing them (see ``rotate_data_keys``) upgrades them.
"""

from .client import VaultClient
from .key_rotation import rotate_data_keys
from .config import VaultConfig
from .crypto import Authenticated, EncryptedBundle, Format, Legacy
from .layout import ObjectRole, SecretLayout
from .credentials import CredentialResolver

__all__ = [
    "VaultClient",
    "rotate_data_keys",
    "VaultConfig",
    "Authenticated",
    "EncryptedBundle",
    "Format",
    "Legacy",
    "ObjectRole",
    "SecretLayout",
    "CredentialResolver",
]
