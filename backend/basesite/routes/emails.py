"""
Transactional email form.

A successful send redirects to /send-email?sent=1 so a browser
refresh can't send the email twice. Field values travel under "values"
because "from" is a reserved word in templates.
"""

from basesite.dispatcher import (
    Outcome,
    Render,
    RequestInput,
    RouteSpec,
    redirect_to,
)
from basesite.messages import error_message
from basesite.results import Failure
from basesite.services.base_client import BaseClient

EMAIL_FIELDS = ("subject", "from", "to", "html", "text")


async def send_email(client: BaseClient, inp: RequestInput) -> None:
    await client.emails.send(
        inp.form_value("subject"),
        inp.form_value("from"),
        inp.form_value("to"),
        html=inp.form_value("html") or None,
        text=inp.form_value("text") or None,
    )


def show_form(inp: RequestInput, value: None) -> Outcome:
    return Render(
        "send-email",
        {
            "values": {name: "" for name in EMAIL_FIELDS},
            "success": inp.query.get("sent") == "1",
        },
    )


def show_form_with_error(inp: RequestInput, failure: Failure) -> Outcome:
    return Render(
        "send-email",
        {
            "values": inp.echo(EMAIL_FIELDS),
            "success": False,
            "error": error_message(failure),
        },
    )


ROUTES = [
    RouteSpec("GET", "/send-email", name="send-email-form", on_success=show_form),
    RouteSpec(
        "POST", "/send-email",
        name="send-email",
        operation=send_email,
        on_success=redirect_to("/send-email?sent=1"),
        on_failure=show_form_with_error,
    ),
]
