"""
Base Example Site — Mailing List Pages
========================================

    GET  /mailing-lists                    mailing_lists.list(page)
    GET  /mailing-lists/{id}               mailing_lists.get(id)           | 303 /mailing-lists
    POST /mailing-lists/{id}/subscribe     mailing_lists.subscribe(id, email)
    POST /mailing-lists/{id}/unsubscribe   mailing_lists.unsubscribe(id, email)
    POST /mailing-lists/{id}/send          mailing_lists.send(id, subject, from, html, text)

The three forms live on the detail page; each one redirects back to it on
success and to the listing on failure.
"""

from basesite.dispatcher import (
    RequestInput,
    RouteSpec,
    redirect_on_failure,
    redirect_to,
    render_as,
    render_listing,
    render_listing_on_failure,
)
from basesite.schemas.resources import MailingList, Page
from basesite.services.base_client import BaseClient


async def list_mailing_lists(client: BaseClient, inp: RequestInput) -> Page[MailingList]:
    return await client.mailing_lists.list(page=inp.page)


async def get_mailing_list(client: BaseClient, inp: RequestInput) -> MailingList:
    return await client.mailing_lists.get(inp.param("id"))


async def subscribe(client: BaseClient, inp: RequestInput) -> MailingList:
    return await client.mailing_lists.subscribe(inp.param("id"), inp.form_value("email"))


async def unsubscribe(client: BaseClient, inp: RequestInput) -> MailingList:
    return await client.mailing_lists.unsubscribe(inp.param("id"), inp.form_value("email"))


async def send_to_list(client: BaseClient, inp: RequestInput) -> None:
    await client.mailing_lists.send(
        inp.param("id"),
        inp.form_value("subject"),
        inp.form_value("from"),
        html=inp.form_value("html") or None,
        text=inp.form_value("text") or None,
    )


def back_to_list(inp: RequestInput, value: object) -> str:
    return f"/mailing-lists/{inp.param('id')}"


ROUTES = [
    RouteSpec(
        "GET", "/mailing-lists",
        name="mailing-lists",
        operation=list_mailing_lists,
        on_success=render_listing("mailing-lists"),
        on_failure=render_listing_on_failure("mailing-lists"),
    ),
    RouteSpec(
        "GET", "/mailing-lists/{id}",
        name="mailing-list",
        operation=get_mailing_list,
        on_success=render_as("mailing-list", "list"),
        on_failure=redirect_on_failure("/mailing-lists"),
    ),
    RouteSpec(
        "POST", "/mailing-lists/{id}/subscribe",
        name="subscribe",
        operation=subscribe,
        on_success=redirect_to(back_to_list),
        on_failure=redirect_on_failure("/mailing-lists"),
    ),
    RouteSpec(
        "POST", "/mailing-lists/{id}/unsubscribe",
        name="unsubscribe",
        operation=unsubscribe,
        on_success=redirect_to(back_to_list),
        on_failure=redirect_on_failure("/mailing-lists"),
    ),
    RouteSpec(
        "POST", "/mailing-lists/{id}/send",
        name="send-to-mailing-list",
        operation=send_to_list,
        on_success=redirect_to(back_to_list),
        on_failure=redirect_on_failure("/mailing-lists"),
    ),
]
