"""Tests for format selection and the dual-format reader."""
import os
import base64

import orjson
import pytest

from s3_vault.exceptions import ObjectNotFound, TransportError
from s3_vault.vault.crypto import Authenticated, Legacy, build_metadata
from s3_vault.vault.layout import ObjectRole
from s3_vault.vault.reader import DualFormatReader, select_format


class TestSelectFormat:

    def test_missing_metadata_is_legacy(self):
        assert select_format(None) == Legacy()

    def test_valid_metadata_is_authenticated(self):
        nonce = os.urandom(12)
        metadata = build_metadata(nonce)
        fmt = select_format(metadata)
        assert fmt == Authenticated(nonce=nonce, aad=metadata)

    @pytest.mark.parametrize("metadata", [
        b"",
        b"not json",
        b"[]",
        b'"nonce"',
        b'{"alg": "AESGCM"}',
    ])
    def test_unusable_metadata_is_legacy(self, metadata):
        assert select_format(metadata) == Legacy()

    @pytest.mark.parametrize("metadata, nonce", [
        (b'{"alg": "AESGCM", "nonce": 12}', None),
        (b'{"alg": "AESGCM", "nonce": "***"}', None),
        (orjson.dumps({"alg": "AESGCM", "nonce": base64.b64encode(b"short").decode()}), b"short"),
    ])
    def test_malformed_nonce_stays_authenticated(self, metadata, nonce):
        assert select_format(metadata) == Authenticated(nonce=nonce, aad=metadata)

    def test_aad_is_raw_metadata_bytes(self):
        nonce = os.urandom(12)
        metadata = b'{ "nonce": "' + base64.b64encode(nonce) + b'", "alg": "AESGCM" }'
        fmt = select_format(metadata)
        assert isinstance(fmt, Authenticated)
        assert fmt.aad == metadata


class TestDualFormatReader:

    @pytest.fixture
    def reader(self, store, layout):
        return DualFormatReader(store, layout)

    @pytest.mark.asyncio
    async def test_prefers_authenticated_ciphertext(self, reader, store):
        metadata = build_metadata(os.urandom(12))
        store.objects.update({
            "db.aesgcm.encrypted": b"gcm",
            "db.encrypted": b"ctr",
            "db.meta": metadata,
        })
        fmt, body = await reader.read("db")
        assert isinstance(fmt, Authenticated)
        assert body == b"gcm"
        assert ("get", "db.encrypted") not in store.calls

    @pytest.mark.asyncio
    async def test_legacy_only_secret(self, reader, store):
        store.objects["db.encrypted"] = b"ctr"
        fmt, body = await reader.read("db")
        assert fmt == Legacy()
        assert body == b"ctr"

    @pytest.mark.asyncio
    async def test_missing_metadata_rereads_legacy_object(self, reader, store):
        store.objects.update({
            "db.aesgcm.encrypted": b"gcm",
            "db.encrypted": b"ctr",
        })
        fmt, body = await reader.read("db")
        assert fmt == Legacy()
        assert body == b"ctr"

    @pytest.mark.asyncio
    async def test_metadata_without_authenticated_ciphertext(self, reader, store):
        store.objects.update({
            "db.encrypted": b"ctr",
            "db.meta": build_metadata(os.urandom(12)),
        })
        fmt, body = await reader.read("db")
        assert fmt == Legacy()
        assert body == b"ctr"

    @pytest.mark.asyncio
    async def test_no_ciphertext(self, reader):
        with pytest.raises(ObjectNotFound):
            await reader.read("db")

    @pytest.mark.asyncio
    async def test_fetch_ciphertext_reports_role(self, reader, store):
        store.objects["db.encrypted"] = b"ctr"
        assert await reader.fetch_ciphertext("db") == (ObjectRole.LEGACY, b"ctr")

    @pytest.mark.asyncio
    async def test_metadata_transport_error_propagates(self, reader, store):
        store.objects["db.aesgcm.encrypted"] = b"gcm"
        store.fail[("get", "db.meta")] = TransportError("S3 get_object failed: SlowDown")
        with pytest.raises(TransportError):
            await reader.read("db")
