"""
Notes API - Notes Route Tests
===============================

What:  End-to-end tests of the HTTP surface through the FastAPI app.
How:   HTTPX AsyncClient over ASGITransport; a real temporary cache directory.

What we test:
    ✅ Full create → read → update → read → delete → read lifecycle
    ✅ Duplicate create returns 400 and keeps the first content
    ✅ Listing returns JSON {name, text} pairs, [] for an empty cache
    ✅ Missing form fields and unsafe names return 400
    ✅ Storage failures return 500 with a generic body
    ✅ Overlong names return 400; unexpected errors return 500 with the request ID
    ✅ Upload form, docs, health, request ID header, and access logging
"""

import logging
import os
import shutil
from unittest.mock import AsyncMock, patch

import aiofiles.os
import pytest
from httpx import ASGITransport, AsyncClient


async def _create(client, name, text):
    return await client.post("/write", data={"note_name": name, "note": text})


class TestNoteLifecycle:
    """Scenario tests covering every CRUD endpoint."""

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, test_client):
        response = await _create(test_client, "foo", "hello")
        assert response.status_code == 201
        assert response.text == "Note created"

        response = await test_client.get("/notes/foo")
        assert response.status_code == 200
        assert response.text == "hello"

        response = await test_client.put("/notes/foo", content="world")
        assert response.status_code == 200
        assert response.text == "Note updated"

        response = await test_client.get("/notes/foo")
        assert response.status_code == 200
        assert response.text == "world"

        response = await test_client.delete("/notes/foo")
        assert response.status_code == 200
        assert response.text == "Note deleted"

        response = await test_client.get("/notes/foo")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_duplicate_create_returns_400(self, test_client):
        assert (await _create(test_client, "dup", "a")).status_code == 201

        response = await _create(test_client, "dup", "b")
        assert response.status_code == 400
        assert response.text == "Note already exists"

        response = await test_client.get("/notes/dup")
        assert response.status_code == 200
        assert response.text == "a"

    @pytest.mark.asyncio
    async def test_create_with_multipart_form(self, test_client, cache_dir):
        """The upload form posts multipart/form-data."""
        response = await test_client.post(
            "/write",
            files={"note_name": (None, "multi"), "note": (None, "from a form")},
        )

        assert response.status_code == 201
        assert (cache_dir / "multi.txt").read_text(encoding="utf-8") == "from a form"

    @pytest.mark.asyncio
    async def test_put_preserves_unicode(self, test_client):
        await _create(test_client, "uni", "x")

        await test_client.put(
            "/notes/uni",
            content="naïve café ✓".encode("utf-8"),
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )

        response = await test_client.get("/notes/uni")
        assert response.text == "naïve café ✓"


class TestNotFound:
    """Operations on absent notes return 404."""

    @pytest.mark.asyncio
    async def test_get_missing(self, test_client):
        response = await test_client.get("/notes/nope")
        assert response.status_code == 404
        assert response.text == "Not Found"

    @pytest.mark.asyncio
    async def test_put_missing_does_not_create(self, test_client, cache_dir):
        response = await test_client.put("/notes/nope", content="text")

        assert response.status_code == 404
        assert not (cache_dir / "nope.txt").exists()

    @pytest.mark.asyncio
    async def test_delete_missing(self, test_client):
        response = await test_client.delete("/notes/nope")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_second_delete(self, test_client):
        await _create(test_client, "once", "x")
        assert (await test_client.delete("/notes/once")).status_code == 200
        assert (await test_client.delete("/notes/once")).status_code == 404


class TestListNotes:
    """Tests for GET /notes."""

    @pytest.mark.asyncio
    async def test_empty_cache_returns_empty_array(self, test_client):
        response = await test_client.get("/notes")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_returns_name_text_pairs(self, test_client, cache_dir):
        await _create(test_client, "one", "1")
        await _create(test_client, "two", "2")
        (cache_dir / "_draft.txt").write_text("hidden")
        (cache_dir / ".swap").write_text("hidden")

        response = await test_client.get("/notes")

        assert response.status_code == 200
        body = sorted(response.json(), key=lambda item: item["name"])
        assert body == [{"name": "one", "text": "1"}, {"name": "two", "text": "2"}]

    @pytest.mark.asyncio
    async def test_note_deleted_during_listing_is_omitted(self, test_client):
        await _create(test_client, "a", "1")
        await _create(test_client, "b", "2")
        real_isfile = aiofiles.os.path.isfile

        async def isfile_then_delete(path, *args, **kwargs):
            result = await real_isfile(path, *args, **kwargs)
            if result and os.path.basename(path) == "a.txt":
                os.remove(path)
            return result

        with patch("aiofiles.os.path.isfile", new=isfile_then_delete):
            response = await test_client.get("/notes")

        assert response.status_code == 200
        assert response.json() == [{"name": "b", "text": "2"}]

    @pytest.mark.asyncio
    async def test_enumeration_failure_returns_500(self, test_client, cache_dir):
        shutil.rmtree(cache_dir)

        response = await test_client.get("/notes")

        assert response.status_code == 500
        assert response.text == "Internal Server Error"


class TestRequestValidation:
    """Bad input is rejected with 400 before touching the disk."""

    @pytest.mark.asyncio
    async def test_create_missing_note_field(self, test_client, cache_dir):
        response = await test_client.post("/write", data={"note_name": "foo"})

        assert response.status_code == 400
        assert "note" in response.text
        assert not (cache_dir / "foo.txt").exists()

    @pytest.mark.asyncio
    async def test_create_missing_name_field(self, test_client):
        response = await test_client.post("/write", data={"note": "orphan"})

        assert response.status_code == 400
        assert "note_name" in response.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["../escaped", "..", "a/b", "a\\b"])
    async def test_create_rejects_unsafe_names(self, test_client, tmp_path, name):
        response = await _create(test_client, name, "pwned")

        assert response.status_code == 400
        assert not (tmp_path / "escaped.txt").exists()

    @pytest.mark.asyncio
    async def test_create_overlong_name_returns_400(self, test_client, cache_dir):
        response = await _create(test_client, "a" * 300, "text")

        assert response.status_code == 400
        assert "too long" in response.text
        assert list(cache_dir.iterdir()) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["get", "delete"])
    async def test_overlong_path_name_returns_400(self, test_client, method):
        response = await getattr(test_client, method)(f"/notes/{'a' * 300}")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_path_name_with_backslash_rejected(self, test_client):
        response = await test_client.get("/notes/a%5Cb")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_put_non_utf8_body(self, test_client):
        await _create(test_client, "foo", "hello")

        response = await test_client.put("/notes/foo", content=b"\xff\xfe")

        assert response.status_code == 400
        assert (await test_client.get("/notes/foo")).text == "hello"


class TestAuxiliaryEndpoints:
    """Upload form, API docs, health, and cross-cutting headers."""

    @pytest.mark.asyncio
    async def test_upload_form(self, test_client):
        response = await test_client.get("/UploadForm.html")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert 'action="/write"' in response.text
        assert 'name="note_name"' in response.text

    @pytest.mark.asyncio
    async def test_docs_page(self, test_client):
        response = await test_client.get("/docs")

        assert response.status_code == 200
        assert "swagger" in response.text.lower()

    @pytest.mark.asyncio
    async def test_openapi_lists_note_routes(self, test_client):
        paths = (await test_client.get("/openapi.json")).json()["paths"]

        assert "/write" in paths
        assert set(paths["/notes/{name}"]) == {"get", "put", "delete"}
        assert "get" in paths["/notes"]

    @pytest.mark.asyncio
    async def test_health_healthy(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["cache"] == "available"

    @pytest.mark.asyncio
    async def test_health_unhealthy_without_cache(self, test_client, cache_dir):
        shutil.rmtree(cache_dir)

        response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["cache"] == "unavailable"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/notes")
        assert response.headers.get("X-Request-ID")

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/notes/missing", headers={"X-Request-ID": "abc123"})

        assert response.status_code == 404
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_500_with_request_id(self, app):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            with patch.object(
                app.state.note_store, "read", new=AsyncMock(side_effect=RuntimeError("boom"))
            ):
                response = await client.get("/notes/foo", headers={"X-Request-ID": "req-42"})

        assert response.status_code == 500
        assert response.text == "Internal Server Error"
        assert response.headers["X-Request-ID"] == "req-42"


class TestAccessLogging:
    """One access line per note request; monitoring and docs traffic stays quiet."""

    @staticmethod
    def _access_records(caplog):
        return [r for r in caplog.records if r.name == "notes_api.access"]

    @pytest.mark.asyncio
    async def test_note_request_logged_with_request_id(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="notes_api.access")

        await test_client.get("/notes/missing", headers={"X-Request-ID": "log-1"})

        [record] = self._access_records(caplog)
        assert record.levelno == logging.WARNING
        assert record.status == 404
        assert record.request_id == "log-1"
        assert "GET /notes/missing 404" in record.getMessage()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/health", "/docs", "/openapi.json"])
    async def test_quiet_paths_not_logged(self, test_client, caplog, path):
        caplog.set_level(logging.INFO, logger="notes_api.access")

        assert (await test_client.get(path)).status_code == 200

        assert self._access_records(caplog) == []

    @pytest.mark.asyncio
    async def test_unhandled_exception_logged_as_500(self, app, caplog):
        caplog.set_level(logging.INFO, logger="notes_api.access")
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            with patch.object(
                app.state.note_store, "list_notes", new=AsyncMock(side_effect=RuntimeError("boom"))
            ):
                await client.get("/notes")

        [record] = self._access_records(caplog)
        assert record.levelno == logging.ERROR
        assert record.status == 500
