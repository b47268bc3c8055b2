"""
Base Example Site — Form Decoder
==================================

What:  Turns raw request data into handler input.
Why:   Every route reads the same kinds of input (string fields, an optional
       JSON "custom data" field, a page number, at most one file); decoding
       them in one place gives every route the same limits and fallbacks.
How:   read_form() parses url-encoded or multipart bodies with Starlette's
       parser and enforces the field/file limits from settings. The smaller
       helpers decode individual values.

Limits:
    field name  ≤ settings.max_field_name_size bytes (100)
    field value ≤ settings.max_field_size bytes      (1,000,000)
    file        ≤ settings.max_file_size bytes       (1,000,000, see upload_service)
    files       ≤ 1 per submission
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException
from starlette.requests import Request

from basesite.config import settings
from basesite.exceptions import FormDecodeError

logger = logging.getLogger(__name__)

# parseInt semantics: optional sign, then digits, anything may follow
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

MAX_FILES = 1
MAX_FIELDS = 100


async def read_form(request: Request) -> FormData:
    """
    Parse the request body and enforce submission limits.

    Raises:
        FormDecodeError when the body does not parse or a limit is exceeded.
    """
    try:
        form = await request.form(
            max_files=MAX_FILES,
            max_fields=MAX_FIELDS,
            max_part_size=settings.max_field_size,
        )
    except HTTPException as e:
        # Starlette reports multipart limit violations as 400 HTTPExceptions
        logger.warning("Rejected form body: %s", e.detail)
        raise FormDecodeError(
            message="The submitted form is too large or malformed.",
            context={"detail": e.detail},
        ) from e

    for name, value in form.multi_items():
        if len(name.encode("utf-8")) > settings.max_field_name_size:
            raise FormDecodeError(
                message="A form field name is too long.",
                context={"max_field_name_size": settings.max_field_name_size},
            )
        if isinstance(value, str) and len(value.encode("utf-8")) > settings.max_field_size:
            raise FormDecodeError(
                message=f"The {name} field is too large.",
                field=name,
                context={"max_field_size": settings.max_field_size},
            )
    return form


def text_fields(form: Optional[FormData]) -> Dict[str, str]:
    """String fields of a form, unchanged (no trimming, no normalization)."""
    if form is None:
        return {}
    return {
        name: value
        for name, value in form.multi_items()
        if not isinstance(value, UploadFile)
    }


def decode_custom_data(raw: Optional[str], field: str = "custom_data") -> Any:
    """
    Decode the optional free-form JSON field.

    Empty or whitespace-only input means "no metadata" (None).

    Raises:
        FormDecodeError if the text is not valid JSON.
    """
    if raw is None or raw.strip() == "":
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise FormDecodeError(
            message=f"Custom data is not valid JSON ({e.msg} at line {e.lineno} column {e.colno}).",
            field=field,
        ) from e


def encode_custom_data(value: Any) -> str:
    """Inverse of decode_custom_data for prefilling the update form."""
    if value is None:
        return ""
    return json.dumps(value)


def parse_page(raw: Optional[str]) -> int:
    """
    Page number from the query string.

    Missing/empty → 1. Otherwise the leading integer is used ("3abc" → 3);
    input without one falls back to 1. Zero and negatives pass through and
    are left for the API to answer.
    """
    if not raw:
        return 1
    match = _LEADING_INT.match(raw)
    if match is None:
        return 1
    return int(match.group(1))
