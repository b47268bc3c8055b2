"""
Base Example Site — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for API and form-decoding failures.
Why:   The Base API client and the form decoder raise these; the dispatcher
       classifies them into the three user-facing failure buckets
       (see results.classify).
How:   Each exception class carries a message and optional context dict.
       The message is safe to log; the context holds debug details that are
       logged server-side and never rendered into a page.

Exception Hierarchy:
    BaseSiteError (base)
    ├── ApiError                 → raised by services.base_client
    │   ├── UnauthorizedError    → 401 from the Base API
    │   ├── InvalidRequestError  → 400/422 from the Base API (carries `data`)
    │   └── UnknownApiError      → anything else (status, transport, bad JSON)
    └── FormDecodeError          → form input could not be decoded
"""

from typing import Any, Dict, Optional


class BaseSiteError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Human-readable error description
        context:  Additional debug info (logged but NOT rendered)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ApiError(BaseSiteError):
    """Root of every failure returned by the Base API client."""


class UnauthorizedError(ApiError):
    """
    The Base API rejected the credentials or the access token.

    When:  Wrong email/password on sessions.authenticate, revoked token.
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidRequestError(ApiError):
    """
    The Base API refused the input (validation failure).

    `data` is the decoded JSON error body. The API puts its user-facing
    explanation under the "error" key, e.g. {"error": "Email is taken"}.
    """

    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.data = data or {}
        super().__init__(message=self.detail, context=context)

    @property
    def detail(self) -> str:
        error = self.data.get("error")
        if error is None:
            return "The request was rejected"
        return str(error)


class UnknownApiError(ApiError):
    """
    Any other API failure: unexpected status, network error, timeout,
    or a response body that is not valid JSON.
    """

    def __init__(
        self,
        message: str = "The Base API call failed",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class FormDecodeError(BaseSiteError):
    """
    Raised when submitted form input cannot be turned into handler input.

    When:  Malformed custom_data JSON, oversized field names/values/files,
           a missing upload, a multipart body that does not parse.
    """

    def __init__(
        self,
        message: str = "The submitted form could not be read",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
