"""
Base Example Site — File Pages
================================

    GET  /upload-file          (form)
    POST /upload-file          files.create(path, filename, type)   303 /files/{id} | re-render upload-file
    GET  /files                files.list(page)                     render files
    GET  /files/{id}           files.get(id)                        render file     | 303 /files
    POST /files/{id}/delete    files.delete(id)                     303 /files      | 303 /files

The upload arrives as the multipart field "file"; the dispatcher spools it
to a temp file that is removed once the request finishes.
"""

from basesite.dispatcher import (
    RequestInput,
    RouteSpec,
    redirect_on_failure,
    redirect_to,
    render,
    render_as,
    render_listing,
    render_listing_on_failure,
    rerender_on_failure,
)
from basesite.schemas.resources import Page, StoredFile
from basesite.services.base_client import BaseClient


async def upload_file(client: BaseClient, inp: RequestInput) -> StoredFile:
    upload = inp.upload
    return await client.files.create(upload.path, upload.filename, upload.content_type)


async def list_files(client: BaseClient, inp: RequestInput) -> Page[StoredFile]:
    return await client.files.list(page=inp.page)


async def get_file(client: BaseClient, inp: RequestInput) -> StoredFile:
    return await client.files.get(inp.param("id"))


async def delete_file(client: BaseClient, inp: RequestInput) -> None:
    await client.files.delete(inp.param("id"))


ROUTES = [
    RouteSpec("GET", "/upload-file", name="upload-file-form", on_success=render("upload-file")),
    RouteSpec(
        "POST", "/upload-file",
        name="upload-file",
        upload_field="file",
        operation=upload_file,
        on_success=redirect_to(lambda inp, file: f"/files/{file.id}"),
        on_failure=rerender_on_failure("upload-file"),
    ),
    RouteSpec(
        "GET", "/files",
        name="files",
        operation=list_files,
        on_success=render_listing("files"),
        on_failure=render_listing_on_failure("files"),
    ),
    RouteSpec(
        "GET", "/files/{id}",
        name="file",
        operation=get_file,
        on_success=render_as("file", "file"),
        on_failure=redirect_on_failure("/files"),
    ),
    RouteSpec(
        "POST", "/files/{id}/delete",
        name="delete-file",
        operation=delete_file,
        on_success=redirect_to("/files"),
        on_failure=redirect_on_failure("/files"),
    ),
]
