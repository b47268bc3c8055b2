"""
Base Example Site — Base API Client
=====================================

What:  Async client for the hosted Base API (users, sessions, files, images,
       emails, mailing lists).
Why:   Every piece of persistent state lives in the Base API; this module is
       the only place that knows its URLs, auth header and wire formats.
How:   One shared httpx.AsyncClient; resource endpoint objects hang off the
       client (client.users.create(...), client.mailing_lists.send(...)).
       HTTP failures are translated into the ApiError hierarchy so callers
       never see httpx exceptions.
Who:   Created once in the FastAPI lifespan; called by route operations.

Wire format:
    Requests:  {url}/v1/<path>, Authorization: Bearer <access token>,
               form-encoded bodies (multipart for uploads).
    Responses: JSON bodies; list endpoints return
               {"items": [...], "metadata": {"page", "per_page", "count"}}.
    Errors:    401 → UnauthorizedError
               400/422 → InvalidRequestError(data=<decoded body>)
               anything else → UnknownApiError

No retries are attempted here: a failed call is reported to the page
immediately and the visitor decides whether to submit again.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

import aiofiles
import httpx

from basesite.exceptions import (
    InvalidRequestError,
    UnauthorizedError,
    UnknownApiError,
)
from basesite.schemas.resources import (
    Image,
    MailingList,
    Page,
    StoredFile,
    User,
)

logger = logging.getLogger(__name__)


class BaseClient:
    """
    Entry point of the Base API client.

    Usage:
        client = BaseClient(access_token="...", url="http://localhost:8080")
        user = await client.users.create("a@b.com", "pw", "pw", {"plan": "free"})
        await client.aclose()

    The optional `transport` argument lets tests plug in httpx.MockTransport.
    """

    def __init__(
        self,
        access_token: str,
        url: str = "https://api.base-api.io",
        timeout: float = 30.0,
        per_page: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.per_page = per_page
        self._http = httpx.AsyncClient(
            base_url=f"{self.url}/v1/",
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

        self.users = Users(self)
        self.sessions = Sessions(self)
        self.files = Files(self)
        self.images = Images(self)
        self.emails = Emails(self)
        self.mailing_lists = MailingLists(self)

        logger.info("BaseClient initialized for %s", self.url)

    def public_url(self, path: str, **params: Any) -> str:
        """Absolute URL of an API path, for links rendered into pages."""
        query = {k: v for k, v in params.items() if v is not None}
        url = f"{self.url}/v1/{path}"
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Perform one API call and return the decoded JSON body.

        Returns None for empty bodies (e.g. 204 on delete).

        Raises:
            UnauthorizedError, InvalidRequestError, UnknownApiError
        """
        start_time = time.perf_counter()
        body = None
        if data is not None:
            # Optional fields are left out instead of being sent as "None"
            body = {k: v for k, v in data.items() if v is not None}

        try:
            response = await self._http.request(
                method, path, params=params, data=body, files=files
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, str(e))
            raise UnknownApiError(
                message="Could not reach the Base API",
                context={"method": method, "path": path, "error": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "%s %s → %d in %.0fms", method, path, response.status_code, duration_ms
        )

        if response.status_code == 401:
            raise UnauthorizedError(context={"method": method, "path": path})

        if response.status_code in (400, 422):
            raise InvalidRequestError(
                data=_error_body(response),
                context={"method": method, "path": path},
            )

        if response.is_error:
            raise UnknownApiError(
                status_code=response.status_code,
                context={"method": method, "path": path},
            )

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise UnknownApiError(
                message="The Base API returned a malformed response",
                status_code=response.status_code,
                context={"method": method, "path": path},
            ) from e

    async def health_check(self) -> bool:
        """
        Check if the Base API is reachable with our access token.

        Lists a single user; never raises.
        """
        try:
            await self.request("GET", "users", params={"page": 1, "per_page": 1})
            return True
        except Exception as e:
            logger.warning("Base API health check failed: %s", str(e))
            return False

    async def aclose(self) -> None:
        await self._http.aclose()


def _error_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {"error": response.text or response.reason_phrase}
    if isinstance(payload, dict):
        return payload
    return {"error": str(payload)}


async def _read_upload(path: str) -> bytes:
    async with aiofiles.open(path, "rb") as f:
        return await f.read()


# ══════════════════════════════════════════════════════════════════════════
# Resource Endpoints
# ══════════════════════════════════════════════════════════════════════════

class Endpoint:
    """Shared plumbing for resource endpoints: paths and paging."""

    path = ""

    def __init__(self, client: BaseClient):
        self.client = client

    def _page_params(self, page: int, per_page: Optional[int]) -> Dict[str, int]:
        return {"page": page, "per_page": per_page or self.client.per_page}


class Users(Endpoint):
    path = "users"

    async def create(
        self,
        email: str,
        password: str,
        confirmation: str,
        custom_data: Any = None,
    ) -> User:
        payload = await self.client.request(
            "POST",
            self.path,
            data={
                "email": email,
                "password": password,
                "confirmation": confirmation,
                "custom_data": _encode_custom_data(custom_data),
            },
        )
        return User.model_validate(payload)

    async def list(self, page: int = 1, per_page: Optional[int] = None) -> Page[User]:
        payload = await self.client.request(
            "GET", self.path, params=self._page_params(page, per_page)
        )
        return Page[User].model_validate(payload)

    async def get(self, user_id: str) -> User:
        payload = await self.client.request("GET", f"{self.path}/{quote(user_id, safe='')}")
        return User.model_validate(payload)

    async def update(self, user_id: str, email: str, custom_data: Any = None) -> User:
        payload = await self.client.request(
            "POST",
            f"{self.path}/{quote(user_id, safe='')}",
            data={"email": email, "custom_data": _encode_custom_data(custom_data)},
        )
        return User.model_validate(payload)

    async def delete(self, user_id: str) -> None:
        await self.client.request("DELETE", f"{self.path}/{quote(user_id, safe='')}")


class Sessions(Endpoint):
    path = "users/authenticate"

    async def authenticate(self, email: str, password: str) -> User:
        payload = await self.client.request(
            "POST", self.path, data={"email": email, "password": password}
        )
        return User.model_validate(payload)


class Files(Endpoint):
    path = "files"

    async def create(self, path: str, filename: str, content_type: str) -> StoredFile:
        content = await _read_upload(path)
        payload = await self.client.request(
            "POST",
            self.path,
            files={"file": (filename or Path(path).name, content, content_type)},
        )
        return StoredFile.model_validate(payload)

    async def list(self, page: int = 1, per_page: Optional[int] = None) -> Page[StoredFile]:
        payload = await self.client.request(
            "GET", self.path, params=self._page_params(page, per_page)
        )
        return Page[StoredFile].model_validate(payload)

    async def get(self, file_id: str) -> StoredFile:
        payload = await self.client.request("GET", f"{self.path}/{quote(file_id, safe='')}")
        return StoredFile.model_validate(payload)

    async def delete(self, file_id: str) -> None:
        await self.client.request("DELETE", f"{self.path}/{quote(file_id, safe='')}")

    def download_url(self, file_id: str) -> str:
        return self.client.public_url(f"{self.path}/{quote(file_id, safe='')}/download")


class Images(Endpoint):
    path = "images"

    async def create(self, path: str, filename: str, content_type: str) -> Image:
        content = await _read_upload(path)
        payload = await self.client.request(
            "POST",
            self.path,
            files={"image": (filename or Path(path).name, content, content_type)},
        )
        return Image.model_validate(payload)

    async def list(self, page: int = 1, per_page: Optional[int] = None) -> Page[Image]:
        payload = await self.client.request(
            "GET", self.path, params=self._page_params(page, per_page)
        )
        return Page[Image].model_validate(payload)

    async def get(self, image_id: str) -> Image:
        payload = await self.client.request("GET", f"{self.path}/{quote(image_id, safe='')}")
        return Image.model_validate(payload)

    async def delete(self, image_id: str) -> None:
        await self.client.request("DELETE", f"{self.path}/{quote(image_id, safe='')}")

    def image_url(
        self,
        image_id: str,
        crop: Optional[str] = None,
        resize: Optional[str] = None,
        format: Optional[str] = None,
        quality: Optional[int] = None,
    ) -> str:
        """
        URL of a processed version of the image.

        crop/resize use the API's "<width>x<height>" geometry syntax,
        format is one of jpg/png/gif, quality is 0-100.
        """
        return self.client.public_url(
            f"{self.path}/{quote(image_id, safe='')}/version",
            crop=crop,
            resize=resize,
            format=format,
            quality=quality,
        )


class Emails(Endpoint):
    path = "emails"

    async def send(
        self,
        subject: str,
        from_: str,
        to: str,
        html: Optional[str] = None,
        text: Optional[str] = None,
    ) -> None:
        await self.client.request(
            "POST",
            self.path,
            data={"subject": subject, "from": from_, "to": to, "html": html, "text": text},
        )


class MailingLists(Endpoint):
    path = "mailing_lists"

    async def list(self, page: int = 1, per_page: Optional[int] = None) -> Page[MailingList]:
        payload = await self.client.request(
            "GET", self.path, params=self._page_params(page, per_page)
        )
        return Page[MailingList].model_validate(payload)

    async def get(self, list_id: str) -> MailingList:
        payload = await self.client.request("GET", f"{self.path}/{quote(list_id, safe='')}")
        return MailingList.model_validate(payload)

    async def subscribe(self, list_id: str, email: str) -> MailingList:
        payload = await self.client.request(
            "POST", f"{self.path}/{quote(list_id, safe='')}/subscribe", data={"email": email}
        )
        return MailingList.model_validate(payload)

    async def unsubscribe(self, list_id: str, email: str) -> MailingList:
        payload = await self.client.request(
            "POST", f"{self.path}/{quote(list_id, safe='')}/unsubscribe", data={"email": email}
        )
        return MailingList.model_validate(payload)

    async def send(
        self,
        list_id: str,
        subject: str,
        from_: str,
        html: Optional[str] = None,
        text: Optional[str] = None,
    ) -> None:
        await self.client.request(
            "POST",
            f"{self.path}/{quote(list_id, safe='')}/send",
            data={"subject": subject, "from": from_, "html": html, "text": text},
        )

    def unsubscribe_url(self, list_id: str, email: str) -> str:
        """One-click unsubscribe link to embed in outgoing emails."""
        return self.client.public_url(
            f"{self.path}/{quote(list_id, safe='')}/unsubscribe", email=email
        )


def _encode_custom_data(custom_data: Any) -> Optional[str]:
    if custom_data is None:
        return None
    return json.dumps(custom_data)
