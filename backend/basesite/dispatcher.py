"""
Base Example Site — Route Dispatcher
======================================

What:  Interprets declarative RouteSpec tables and applies the uniform
       handler convention to every page of the site.
Why:   Every page follows the same try/redirect/render shape. Each route
       only declares its operation and its success/failure transforms.
How:   build_router() registers one generic endpoint per RouteSpec on a
       FastAPI APIRouter. Each request then runs:

       1. Guard     guest-only routes redirect signed-in visitors to "/"
       2. Decode    path/query/form fields, at most one spooled upload
       3. Invoke    exactly one remote operation, wrapped into a Result
       4. Transform on_success(input, value) or on_failure(input, failure)
       5. Respond   apply the SessionUpdate; 303 redirect or HTML render

       Nothing raised by steps 2-3 escapes to the framework: decode errors,
       temp-file I/O errors and API errors all become failure variants
       (results.classify). Form parts are closed when the request ends.

Failure policies (helpers at the bottom of this module):
    redirect_on_failure(path)   soft-fail reads: back to the listing page
    rerender_on_failure(tpl)    form writes: same template, echoed fields
                                (minus passwords) and a translated message
"""

import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass, field, replace
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from basesite.exceptions import FormDecodeError
from basesite.forms import parse_page, read_form, text_fields
from basesite.messages import error_message
from basesite.results import Failure, Ok, Result, classify, invoke
from basesite.services.base_client import BaseClient
from basesite.services.upload_service import UploadedFile, upload_service
from basesite.session import SessionSnapshot, SessionUpdate

logger = logging.getLogger(__name__)

# Fields that are never echoed back into a re-rendered form
SENSITIVE_FIELDS = frozenset({"password", "confirmation"})


# ══════════════════════════════════════════════════════════════════════════
# Handler Input & Outcomes
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RequestInput:
    """Everything a route operation may read; built fresh per request."""
    path_params: Mapping[str, str] = field(default_factory=dict)
    query: Mapping[str, str] = field(default_factory=dict)
    form: Mapping[str, str] = field(default_factory=dict)
    upload: Optional[UploadedFile] = None
    session: SessionSnapshot = field(default_factory=SessionSnapshot)

    def param(self, name: str) -> str:
        return self.path_params[name]

    def form_value(self, name: str) -> str:
        """A form field; absent fields read as empty strings."""
        return self.form.get(name, "")

    @property
    def page(self) -> int:
        return parse_page(self.query.get("page"))

    def echo(self, names: Iterable[str]) -> Dict[str, str]:
        """Submitted values for a redisplay, never including passwords."""
        return {
            name: self.form_value(name)
            for name in names
            if name not in SENSITIVE_FIELDS
        }


@dataclass(frozen=True)
class Redirect:
    location: str
    session: Optional[SessionUpdate] = None


@dataclass(frozen=True)
class Render:
    template: str
    context: Dict[str, Any] = field(default_factory=dict)
    status_code: int = 200
    session: Optional[SessionUpdate] = None


Outcome = Union[Redirect, Render]
Operation = Callable[[BaseClient, RequestInput], Awaitable[Any]]
SuccessTransform = Callable[[RequestInput, Any], Outcome]
FailureTransform = Callable[[RequestInput, Failure], Outcome]


@dataclass(frozen=True)
class RouteSpec:
    """
    One row of a route table.

    Attributes:
        method:       "GET" or "POST"
        path:         FastAPI path template, e.g. "/users/{id}"
        name:         Unique route name (used for logging and url_for)
        on_success:   Builds the outcome from the operation's value
        operation:    The single remote call; None for pages that only render
        on_failure:   Builds the outcome for a failure; required with an operation
        guest_only:   Redirect signed-in visitors to "/" before doing anything
        upload_field: Multipart field holding the one allowed file
    """
    method: str
    path: str
    name: str
    on_success: SuccessTransform
    operation: Optional[Operation] = None
    on_failure: Optional[FailureTransform] = None
    guest_only: bool = False
    upload_field: Optional[str] = None

    def __post_init__(self) -> None:
        if self.method not in ("GET", "POST"):
            raise ValueError(f"Unsupported method {self.method!r} for {self.name}")
        can_fail = self.operation is not None or self.method == "POST"
        if can_fail and self.on_failure is None:
            raise ValueError(f"Route {self.name} can fail but has no on_failure transform")


# ══════════════════════════════════════════════════════════════════════════
# Dispatcher
# ══════════════════════════════════════════════════════════════════════════

class Dispatcher:
    """
    Runs RouteSpecs against live requests.

    The Base API client is looked up on app.state at request time so the
    app factory (or a test) decides which client instance is used.
    """

    def __init__(self, templates: Jinja2Templates):
        self.templates = templates

    async def handle(self, spec: RouteSpec, request: Request) -> Response:
        session = SessionSnapshot.from_mapping(request.session)

        # ── Guard ─────────────────────────────────────────────────────────
        if spec.guest_only and session.authenticated:
            return RedirectResponse("/", status_code=303)

        client: BaseClient = request.app.state.base_client
        inp = RequestInput(
            path_params=dict(request.path_params),
            query=dict(request.query_params),
            session=session,
        )

        async with AsyncExitStack() as stack:
            inp, result = await self._run(spec, request, inp, client, stack)
            if isinstance(result, Ok):
                outcome = spec.on_success(inp, result.value)
            else:
                outcome = spec.on_failure(inp, result)
                logger.info(
                    "%s %s failed (%s) → %s",
                    spec.method,
                    request.url.path,
                    type(result).__name__,
                    type(outcome).__name__.lower(),
                )
        # Temp uploads are released here, on every path, before responding

        return self.respond(request, outcome)

    async def _run(
        self,
        spec: RouteSpec,
        request: Request,
        inp: RequestInput,
        client: BaseClient,
        stack: AsyncExitStack,
    ) -> Tuple[RequestInput, Result]:
        """
        Decode, then invoke.

        The input is returned with the result so a failure transform can
        echo whatever was decoded before things went wrong.
        """
        try:
            if spec.method == "POST":
                form = await read_form(request)
                # Releases every multipart part, including ones no route reads
                stack.push_async_callback(form.close)
                inp = replace(inp, form=text_fields(form))
                if spec.upload_field:
                    uploaded = await stack.enter_async_context(
                        upload_service.spooled(form.get(spec.upload_field), spec.upload_field)
                    )
                    inp = replace(inp, upload=uploaded)
        except FormDecodeError as exc:
            logger.warning("Form decode failed for %s: %s", spec.name, exc.message)
            return inp, classify(exc)
        except Exception as exc:
            # e.g. the upload directory is not writable
            logger.error("Form decode crashed for %s: %s", spec.name, str(exc), exc_info=True)
            return inp, classify(exc)

        if spec.operation is None:
            return inp, Ok(None)

        return inp, await invoke(spec.operation, client, inp)

    def respond(self, request: Request, outcome: Outcome) -> Response:
        if outcome.session is not None:
            outcome.session.apply(request.session)
        snapshot = SessionSnapshot.from_mapping(request.session)

        if isinstance(outcome, Redirect):
            return RedirectResponse(outcome.location, status_code=303)

        context = {
            "logged_in": snapshot.authenticated,
            "current_user_id": snapshot.user_id,
            "client": request.app.state.base_client,
            "error": None,
            **outcome.context,
        }
        return self.templates.TemplateResponse(
            request,
            f"{outcome.template}.html",
            context,
            status_code=outcome.status_code,
        )


def build_router(dispatcher: Dispatcher, specs: Sequence[RouteSpec]) -> APIRouter:
    """Register one generic endpoint per RouteSpec."""
    router = APIRouter()
    for spec in specs:
        router.add_api_route(
            spec.path,
            _endpoint(dispatcher, spec),
            methods=[spec.method],
            name=spec.name,
            include_in_schema=False,
        )
    return router


def _endpoint(dispatcher: Dispatcher, spec: RouteSpec) -> Callable[[Request], Awaitable[Response]]:
    async def endpoint(request: Request) -> Response:
        return await dispatcher.handle(spec, request)

    endpoint.__name__ = spec.name.replace("-", "_")
    return endpoint


# ══════════════════════════════════════════════════════════════════════════
# Transform Helpers
# ══════════════════════════════════════════════════════════════════════════

def render(template: str, **context: Any) -> SuccessTransform:
    """Success transform for pages that render fixed context."""
    def transform(inp: RequestInput, value: Any) -> Outcome:
        return Render(template, dict(context))
    return transform


def redirect_to(location: Union[str, Callable[[RequestInput, Any], str]]) -> SuccessTransform:
    """Success transform that redirects; `location` may depend on input/value."""
    def transform(inp: RequestInput, value: Any) -> Outcome:
        target = location(inp, value) if callable(location) else location
        return Redirect(target)
    return transform


def redirect_on_failure(location: str) -> FailureTransform:
    """Soft-fail: send the visitor back to a listing page, no message."""
    def transform(inp: RequestInput, failure: Failure) -> Outcome:
        return Redirect(location)
    return transform


def rerender_on_failure(
    template: str,
    fields: Sequence[str] = (),
    **extra: Any,
) -> FailureTransform:
    """Form writes: redisplay the template with echoed fields and the error."""
    def transform(inp: RequestInput, failure: Failure) -> Outcome:
        context: Dict[str, Any] = {
            **extra,
            **inp.path_params,
            **inp.echo(fields),
            "error": error_message(failure),
        }
        return Render(template, context)
    return transform


def render_as(template: str, key: str) -> SuccessTransform:
    """Render the operation's value under a single context key."""
    def transform(inp: RequestInput, value: Any) -> Outcome:
        return Render(template, {key: value})
    return transform


def render_listing(template: str) -> SuccessTransform:
    """Paginated list pages: the Page under "data" plus the requested page."""
    def transform(inp: RequestInput, data: Any) -> Outcome:
        return Render(template, {"data": data, "page": inp.page})
    return transform


def render_listing_on_failure(template: str) -> FailureTransform:
    """A list that can't be fetched renders empty, with the error message."""
    def transform(inp: RequestInput, failure: Failure) -> Outcome:
        return Render(
            template,
            {"data": None, "page": inp.page, "error": error_message(failure)},
        )
    return transform
