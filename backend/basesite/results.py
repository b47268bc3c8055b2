"""
Base Example Site — Remote Call Results
=========================================

What:  The closed set of outcomes of one remote operation:
       Ok(value) | Unauthorized | InvalidRequest(detail) | Unknown(cause)
Why:   Route transforms branch on plain values instead of try/except
       blocks spread over every handler. The exception → variant mapping
       lives in exactly one function (classify), which is total.
How:   invoke() awaits an operation and converts any exception it raises
       into a failure variant. It never raises (except for cancellation).
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from basesite.exceptions import FormDecodeError, InvalidRequestError, UnauthorizedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Unauthorized:
    """Invalid credentials or access denied."""


@dataclass(frozen=True)
class InvalidRequest:
    """The input was rejected; `detail` is safe to show to the visitor."""
    detail: str


@dataclass(frozen=True)
class Unknown:
    """Anything else. `cause` is for logs only."""
    cause: Optional[BaseException] = None


Failure = Union[Unauthorized, InvalidRequest, Unknown]
Result = Union[Ok[T], Failure]


def classify(exc: Exception) -> Failure:
    """Map an exception from the decoder or the API client to its bucket."""
    if isinstance(exc, UnauthorizedError):
        return Unauthorized()
    if isinstance(exc, InvalidRequestError):
        return InvalidRequest(detail=exc.detail)
    if isinstance(exc, FormDecodeError):
        return InvalidRequest(detail=exc.message)
    return Unknown(cause=exc)


async def invoke(operation: Callable[..., Awaitable[Any]], *args: Any) -> Result:
    """
    Run one remote operation and return its Result.

    Unknown failures are logged with their stack trace here, because the
    rendered page will only ever show a generic message.
    """
    try:
        value = await operation(*args)
    except Exception as exc:
        failure = classify(exc)
        if isinstance(failure, Unknown):
            logger.error("Remote operation failed: %s", str(exc), exc_info=True)
        else:
            logger.warning("Remote operation rejected: %s", failure)
        return failure
    return Ok(value)
