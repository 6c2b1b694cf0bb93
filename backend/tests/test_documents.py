"""Tests for document identity helpers."""

import re
import uuid

import pytest

from docforge.documents import (
    ID_FIELD,
    add_id_if_missing,
    create_secure_random_id,
    generate_document_id,
    resolve_handler,
)


class TestDocumentIds:
    def test_generate_is_uuid4(self):
        assert uuid.UUID(generate_document_id()).version == 4

    def test_generate_is_unique(self):
        assert generate_document_id() != generate_document_id()

    def test_add_id_when_missing(self):
        document = {"title": "Hi"}
        assert add_id_if_missing(document) is document
        assert document[ID_FIELD]

    def test_add_id_when_empty(self):
        document = {ID_FIELD: ""}
        add_id_if_missing(document)
        assert document[ID_FIELD] != ""

    def test_existing_id_kept(self):
        document = {ID_FIELD: "keep-me"}
        add_id_if_missing(document)
        assert document[ID_FIELD] == "keep-me"

    def test_secure_random_id(self):
        value = create_secure_random_id()
        assert re.fullmatch(r"[0-9a-f]{48}", value)


class TestResolveHandler:
    @pytest.mark.asyncio
    async def test_plain_value(self):
        assert await resolve_handler({"a": 1}, app=None) == {"a": 1}

    @pytest.mark.asyncio
    async def test_sync_factory(self):
        assert await resolve_handler(lambda app: app["name"], {"name": "x"}) == "x"

    @pytest.mark.asyncio
    async def test_async_factory(self):
        async def factory(app):
            return app * 2

        assert await resolve_handler(factory, 21) == 42
