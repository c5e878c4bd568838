"""Tests for the secret-to-object mapping."""
import pytest

from s3_vault.vault.layout import (
    DELETE_POLICY,
    MAX_NAME_LENGTH,
    ObjectRole,
    SecretLayout,
    validate_name,
)


@pytest.fixture
def layout():
    return SecretLayout("vault-bucket")


def test_objects(layout):
    assert layout.objects("db-pass") == {
        ObjectRole.KEY: "db-pass.key",
        ObjectRole.LEGACY: "db-pass.encrypted",
        ObjectRole.AUTHENTICATED: "db-pass.aesgcm.encrypted",
        ObjectRole.METADATA: "db-pass.meta",
    }


@pytest.mark.parametrize("object_name, expected", [
    ("db-pass.encrypted", "db-pass"),
    ("prod/db.encrypted", "prod/db"),
    ("db-pass.aesgcm.encrypted", None),
    ("db-pass.key", None),
    ("db-pass.meta", None),
    (".encrypted", None),
    ("notes.txt", None),
])
def test_secret_name(layout, object_name, expected):
    assert layout.secret_name(object_name) == expected


def test_delete_policy_covers_every_role():
    assert set(DELETE_POLICY) == set(ObjectRole)
    assert not DELETE_POLICY[ObjectRole.KEY]
    assert not DELETE_POLICY[ObjectRole.LEGACY]
    assert DELETE_POLICY[ObjectRole.AUTHENTICATED]
    assert DELETE_POLICY[ObjectRole.METADATA]


def test_validate_name():
    validate_name("db-pass")
    validate_name("a" * MAX_NAME_LENGTH)
    with pytest.raises(ValueError):
        validate_name("")
    with pytest.raises(ValueError):
        validate_name("a" * (MAX_NAME_LENGTH + 1))
    with pytest.raises(ValueError):
        validate_name(None)
    with pytest.raises(ValueError):
        validate_name("foo.aesgcm")
    validate_name("foo.aesgcm.v2")
    validate_name("aesgcm")
