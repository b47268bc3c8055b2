"""
Error translator: turns a failure variant into the short message shown on
the page. Internal details (exception text, status codes) never leave here.
"""

from typing import NoReturn

from basesite.results import Failure, InvalidRequest, Unauthorized, Unknown

UNAUTHORIZED_MESSAGE = "Unauthorized!"
INVALID_REQUEST_PREFIX = "Invalid request: "
GENERIC_MESSAGE = "Something went wrong!"


def _unreachable(value: object) -> NoReturn:
    raise TypeError(f"Unhandled failure variant: {type(value).__name__}")


def error_message(failure: Failure) -> str:
    match failure:
        case Unauthorized():
            return UNAUTHORIZED_MESSAGE
        case InvalidRequest(detail=detail):
            return f"{INVALID_REQUEST_PREFIX}{detail}"
        case Unknown():
            return GENERIC_MESSAGE
        case _:
            _unreachable(failure)
