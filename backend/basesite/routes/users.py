"""
Base Example Site — User Pages
================================

    GET  /users               users.list(page)        render users
    GET  /users/{id}          users.get(id)           render user         | 303 /users
    GET  /users/{id}/update   users.get(id)           render update-user  | 303 /users
    POST /users/{id}          users.update(...)       303 /users/{id}     | re-render update-user
    POST /users/{id}/delete   users.delete(id)        303 /users          | 303 /users

Deleting the signed-in user also signs the visitor out, whether or not
the delete succeeds (a repeat fails because the user is already gone).
Either way the visitor lands on the listing, so repeating it is harmless.
"""

from basesite.dispatcher import (
    Outcome,
    Redirect,
    Render,
    RequestInput,
    RouteSpec,
    redirect_on_failure,
    redirect_to,
    render_as,
    render_listing,
    render_listing_on_failure,
    rerender_on_failure,
)
from basesite.forms import decode_custom_data, encode_custom_data
from basesite.results import Failure
from basesite.schemas.resources import Page, User
from basesite.services.base_client import BaseClient
from basesite.session import SessionUpdate

UPDATE_FIELDS = ("email", "custom_data")


async def list_users(client: BaseClient, inp: RequestInput) -> Page[User]:
    return await client.users.list(page=inp.page)


async def get_user(client: BaseClient, inp: RequestInput) -> User:
    return await client.users.get(inp.param("id"))


async def update_user(client: BaseClient, inp: RequestInput) -> User:
    return await client.users.update(
        inp.param("id"),
        inp.form_value("email"),
        decode_custom_data(inp.form_value("custom_data")),
    )


async def delete_user(client: BaseClient, inp: RequestInput) -> None:
    await client.users.delete(inp.param("id"))


def show_update_form(inp: RequestInput, user: User) -> Outcome:
    return Render(
        "update-user",
        {
            "id": user.id,
            "email": user.email,
            "custom_data": encode_custom_data(user.custom_data),
        },
    )


def after_delete(inp: RequestInput, value: object) -> Outcome:
    # Deleting yourself ends your session
    if inp.session.user_id == inp.param("id"):
        return Redirect("/users", session=SessionUpdate.clear())
    return Redirect("/users")


def after_failed_delete(inp: RequestInput, failure: Failure) -> Outcome:
    # A repeated self-delete fails because the account is gone; the session
    # must not stay pinned to it
    return after_delete(inp, None)


ROUTES = [
    RouteSpec(
        "GET", "/users",
        name="users",
        operation=list_users,
        on_success=render_listing("users"),
        on_failure=render_listing_on_failure("users"),
    ),
    RouteSpec(
        "GET", "/users/{id}",
        name="user",
        operation=get_user,
        on_success=render_as("user", "user"),
        on_failure=redirect_on_failure("/users"),
    ),
    RouteSpec(
        "GET", "/users/{id}/update",
        name="update-user-form",
        operation=get_user,
        on_success=show_update_form,
        on_failure=redirect_on_failure("/users"),
    ),
    RouteSpec(
        "POST", "/users/{id}",
        name="update-user",
        operation=update_user,
        on_success=redirect_to(lambda inp, user: f"/users/{inp.param('id')}"),
        on_failure=rerender_on_failure("update-user", UPDATE_FIELDS),
    ),
    RouteSpec(
        "POST", "/users/{id}/delete",
        name="delete-user",
        operation=delete_user,
        on_success=after_delete,
        on_failure=after_failed_delete,
    ),
]
