"""
Base Example Site — Dispatcher Unit Tests
===========================================

What:  Tests for RouteSpec validation, RequestInput and the transform helpers.
Why:   Route tables are data; a malformed row should fail at import time,
       and the helpers decide what each page echoes back.
"""

import pytest

from basesite.dispatcher import (
    Redirect,
    Render,
    RequestInput,
    RouteSpec,
    redirect_on_failure,
    redirect_to,
    render,
    render_listing,
    render_listing_on_failure,
    rerender_on_failure,
)
from basesite.results import InvalidRequest, Unknown


async def noop(client, inp):
    return None


class TestRouteSpec:

    def test_operation_requires_failure_transform(self):
        with pytest.raises(ValueError, match="no on_failure"):
            RouteSpec("GET", "/x", name="x", operation=noop, on_success=render("x"))

    def test_post_requires_failure_transform(self):
        """Form decoding can fail even without a remote call."""
        with pytest.raises(ValueError, match="no on_failure"):
            RouteSpec("POST", "/x", name="x", on_success=render("x"))

    def test_unsupported_method(self):
        with pytest.raises(ValueError, match="Unsupported method"):
            RouteSpec("PUT", "/x", name="x", on_success=render("x"))

    def test_render_only_page(self):
        spec = RouteSpec("GET", "/", name="home", on_success=render("index"))
        assert spec.operation is None


class TestRequestInput:

    def test_missing_form_value_is_empty(self):
        assert RequestInput().form_value("email") == ""

    def test_echo_never_includes_passwords(self):
        inp = RequestInput(form={"email": "a@b.com", "password": "p", "confirmation": "p"})
        assert inp.echo(("email", "password", "confirmation")) == {"email": "a@b.com"}

    def test_page_from_query(self):
        assert RequestInput(query={"page": "4"}).page == 4
        assert RequestInput().page == 1


class TestTransforms:

    def test_render(self):
        outcome = render("login", email="")(RequestInput(), None)
        assert outcome == Render("login", {"email": ""})

    def test_redirect_to_callable(self):
        transform = redirect_to(lambda inp, value: f"/files/{value}")
        assert transform(RequestInput(), "f-1") == Redirect("/files/f-1")

    def test_redirect_on_failure(self):
        assert redirect_on_failure("/users")(RequestInput(), Unknown()) == Redirect("/users")

    def test_rerender_on_failure(self):
        inp = RequestInput(
            path_params={"id": "u-1"},
            form={"email": "a@b.com", "password": "p"},
        )
        outcome = rerender_on_failure("update-user", ("email", "password"))(
            inp, InvalidRequest("Email is invalid")
        )
        assert outcome.template == "update-user"
        assert outcome.context == {
            "id": "u-1",
            "email": "a@b.com",
            "error": "Invalid request: Email is invalid",
        }

    def test_listing(self):
        inp = RequestInput(query={"page": "2"})
        assert render_listing("files")(inp, "DATA").context == {"data": "DATA", "page": 2}
        failed = render_listing_on_failure("files")(inp, Unknown())
        assert failed.context == {"data": None, "page": 2, "error": "Something went wrong!"}
