"""
Base Example Site — Registration, Login & Logout
==================================================

What:  The only routes that change who the visitor is.
How:   Success transforms return a SessionUpdate instruction; the
       dispatcher writes it to the signed session cookie.

    POST /register  users.create            → session = user.id, 303 /users/{id}
    POST /login     sessions.authenticate   → session = user.id, 303 /users/{id}
    GET  /logout    (no remote call)        → session cleared,   303 /

Password and confirmation values are never echoed into a re-rendered
form; the visitor retypes them after a failed attempt.
"""

from basesite.dispatcher import (
    Outcome,
    Redirect,
    RequestInput,
    RouteSpec,
    render,
    rerender_on_failure,
)
from basesite.forms import decode_custom_data
from basesite.schemas.resources import User
from basesite.services.base_client import BaseClient
from basesite.session import SessionUpdate

REGISTER_FIELDS = ("email", "password", "confirmation", "custom_data")
LOGIN_FIELDS = ("email", "password")


async def create_user(client: BaseClient, inp: RequestInput) -> User:
    return await client.users.create(
        inp.form_value("email"),
        inp.form_value("password"),
        inp.form_value("confirmation"),
        decode_custom_data(inp.form_value("custom_data")),
    )


async def authenticate(client: BaseClient, inp: RequestInput) -> User:
    return await client.sessions.authenticate(
        inp.form_value("email"),
        inp.form_value("password"),
    )


def sign_in(inp: RequestInput, user: User) -> Outcome:
    return Redirect(f"/users/{user.id}", session=SessionUpdate.set_user(user.id))


def sign_out(inp: RequestInput, value: None) -> Outcome:
    return Redirect("/", session=SessionUpdate.clear())


ROUTES = [
    RouteSpec(
        "GET", "/register",
        name="register-form",
        guest_only=True,
        on_success=render("register", email="", custom_data=""),
    ),
    RouteSpec(
        "POST", "/register",
        name="register",
        guest_only=True,
        operation=create_user,
        on_success=sign_in,
        on_failure=rerender_on_failure("register", REGISTER_FIELDS),
    ),
    RouteSpec(
        "GET", "/login",
        name="login-form",
        guest_only=True,
        on_success=render("login", email=""),
    ),
    RouteSpec(
        "POST", "/login",
        name="login",
        guest_only=True,
        operation=authenticate,
        on_success=sign_in,
        on_failure=rerender_on_failure("login", LOGIN_FIELDS),
    ),
    RouteSpec("GET", "/logout", name="logout", on_success=sign_out),
]
