"""
Base Example Site — Image Pages
=================================

Same shape as files.py, with the multipart field "image". The image
detail page links processed versions through client.images.image_url().
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
from basesite.schemas.resources import Image, Page
from basesite.services.base_client import BaseClient


async def upload_image(client: BaseClient, inp: RequestInput) -> Image:
    upload = inp.upload
    return await client.images.create(upload.path, upload.filename, upload.content_type)


async def list_images(client: BaseClient, inp: RequestInput) -> Page[Image]:
    return await client.images.list(page=inp.page)


async def get_image(client: BaseClient, inp: RequestInput) -> Image:
    return await client.images.get(inp.param("id"))


async def delete_image(client: BaseClient, inp: RequestInput) -> None:
    await client.images.delete(inp.param("id"))


ROUTES = [
    RouteSpec("GET", "/upload-image", name="upload-image-form", on_success=render("upload-image")),
    RouteSpec(
        "POST", "/upload-image",
        name="upload-image",
        upload_field="image",
        operation=upload_image,
        on_success=redirect_to(lambda inp, image: f"/images/{image.id}"),
        on_failure=rerender_on_failure("upload-image"),
    ),
    RouteSpec(
        "GET", "/images",
        name="images",
        operation=list_images,
        on_success=render_listing("images"),
        on_failure=render_listing_on_failure("images"),
    ),
    RouteSpec(
        "GET", "/images/{id}",
        name="image",
        operation=get_image,
        on_success=render_as("image", "image"),
        on_failure=redirect_on_failure("/images"),
    ),
    RouteSpec(
        "POST", "/images/{id}/delete",
        name="delete-image",
        operation=delete_image,
        on_success=redirect_to("/images"),
        on_failure=redirect_on_failure("/images"),
    ),
]
