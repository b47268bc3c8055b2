"""
Base Example Site — File & Image Upload Route Tests
=====================================================

What:  Upload pages, with the temp-file lifecycle checked on every path.
How:   The mocked files.create/images.create record the spooled path so the
       test can check the file existed during the call and is gone after.
"""

import os
from unittest.mock import AsyncMock

import pytest
from starlette.datastructures import UploadFile

from basesite.config import settings
from basesite.exceptions import InvalidRequestError
from basesite.schemas.resources import Image, StoredFile, User
from basesite.services.upload_service import upload_service


def recording(result=None, error=None):
    """An async side effect that records what the API client was handed."""
    seen = {}

    async def side_effect(path, filename, content_type):
        seen.update(path=path, filename=filename, content_type=content_type)
        seen["existed"] = os.path.exists(path)
        with open(path, "rb") as f:
            seen["content"] = f.read()
        if error is not None:
            raise error
        return result

    return side_effect, seen


class TestUploadFile:

    @pytest.mark.asyncio
    async def test_form_renders(self, test_client):
        response = await test_client.get("/upload-file")
        assert response.status_code == 200
        assert 'enctype="multipart/form-data"' in response.text

    @pytest.mark.asyncio
    async def test_upload_success_removes_temp_file(self, test_client, mock_base_client):
        side_effect, seen = recording(result=StoredFile(id="f-1"))
        mock_base_client.files.create.side_effect = side_effect

        response = await test_client.post(
            "/upload-file", files={"file": ("notes.txt", b"hello", "text/plain")}
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/files/f-1"
        assert seen["existed"]
        assert seen["content"] == b"hello"
        assert seen["filename"] == "notes.txt"
        assert seen["content_type"] == "text/plain"
        assert not os.path.exists(seen["path"])

    @pytest.mark.asyncio
    async def test_upload_failure_removes_temp_file(self, test_client, mock_base_client):
        side_effect, seen = recording(error=InvalidRequestError({"error": "Unsupported file"}))
        mock_base_client.files.create.side_effect = side_effect

        response = await test_client.post(
            "/upload-file", files={"file": ("notes.txt", b"hello", "text/plain")}
        )

        assert response.status_code == 200
        assert "Invalid request: Unsupported file" in response.text
        assert seen["existed"]
        assert not os.path.exists(seen["path"])

    @pytest.mark.asyncio
    async def test_no_file_chosen(self, test_client, mock_base_client):
        response = await test_client.post("/upload-file", data={"note": "nothing attached"})

        assert response.status_code == 200
        assert "Please choose a file to upload." in response.text
        mock_base_client.files.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_file_too_large(self, test_client, mock_base_client, monkeypatch):
        monkeypatch.setattr(upload_service, "max_file_size", 4)

        response = await test_client.post(
            "/upload-file", files={"file": ("notes.txt", b"hello", "text/plain")}
        )

        assert response.status_code == 200
        assert "File is too large" in response.text
        mock_base_client.files.create.assert_not_awaited()
        assert os.listdir(settings.upload_dir) == []


class TestUploadImage:

    @pytest.mark.asyncio
    async def test_upload_success(self, test_client, mock_base_client):
        side_effect, seen = recording(result=Image(id="i-1", width=1, height=1))
        mock_base_client.images.create.side_effect = side_effect

        response = await test_client.post(
            "/upload-image", files={"image": ("dot.png", b"\x89PNG\r\n", "image/png")}
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/images/i-1"
        assert seen["content_type"] == "image/png"
        assert not os.path.exists(seen["path"])

    @pytest.mark.asyncio
    async def test_wrong_field_name(self, test_client, mock_base_client):
        response = await test_client.post(
            "/upload-image", files={"file": ("dot.png", b"\x89PNG\r\n", "image/png")}
        )

        assert response.status_code == 200
        assert "Please choose a file to upload." in response.text
        mock_base_client.images.create.assert_not_awaited()


class TestDecodeLimits:

    @pytest.mark.asyncio
    async def test_second_file_is_rejected(self, test_client, mock_base_client):
        response = await test_client.post(
            "/upload-file",
            files=[
                ("file", ("one.txt", b"one", "text/plain")),
                ("file", ("two.txt", b"two", "text/plain")),
            ],
        )

        assert response.status_code == 200
        assert "Invalid request: The submitted form is too large or malformed." in response.text
        mock_base_client.files.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_oversized_field_value(self, test_client, mock_base_client):
        big_email = "a" * (settings.max_field_size + 1)

        response = await test_client.post("/login", data={"email": big_email, "password": "pw"})

        assert response.status_code == 200
        assert "Invalid request: The email field is too large." in response.text
        mock_base_client.sessions.authenticate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unwritable_upload_dir(self, test_client, mock_base_client, tmp_path, monkeypatch):
        """Disk errors while spooling are an unknown failure, not a crash."""
        blocker = tmp_path / "blocker"
        blocker.write_text("a regular file, not a directory")
        monkeypatch.setattr(upload_service, "upload_dir", blocker / "uploads")

        response = await test_client.post(
            "/upload-file", files={"file": ("notes.txt", b"hello", "text/plain")}
        )

        assert response.status_code == 200
        assert "Something went wrong!" in response.text
        assert 'enctype="multipart/form-data"' in response.text
        mock_base_client.files.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unread_file_parts_are_closed(self, test_client, mock_base_client, monkeypatch):
        """A file sent to a page that takes none is still released."""
        close = AsyncMock()
        monkeypatch.setattr(UploadFile, "close", close)
        mock_base_client.sessions.authenticate.return_value = User(id="u-1", email="a@b.com")

        response = await test_client.post(
            "/login",
            data={"email": "a@b.com", "password": "pw"},
            files={"attachment": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 303
        close.assert_awaited()
