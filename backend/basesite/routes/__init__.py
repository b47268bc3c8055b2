"""
Base Example Site — Route Tables
==================================

What:  Declarative RouteSpec tables, one module per resource area.
How:   Each module exposes ROUTES; main.py hands ROUTE_TABLE to the
       dispatcher, which registers one endpoint per entry.

Route Inventory:
    - home.py:           GET  /
    - auth.py:           GET/POST /register, GET/POST /login, GET /logout
    - users.py:          /users, /users/{id}, /users/{id}/update, /users/{id}/delete
    - emails.py:         GET/POST /send-email
    - files.py:          /upload-file, /files, /files/{id}, /files/{id}/delete
    - images.py:         /upload-image, /images, /images/{id}, /images/{id}/delete
    - mailing_lists.py:  /mailing-lists, /mailing-lists/{id}[/subscribe|/unsubscribe|/send]
    - health.py:         GET /health (plain FastAPI router, JSON)

Design Principle:
    Route modules say WHAT each endpoint calls and where it goes next.
    They never catch exceptions or touch the session; the dispatcher does.
"""

from basesite.routes import auth, emails, files, home, images, mailing_lists, users

ROUTE_TABLE = [
    *home.ROUTES,
    *auth.ROUTES,
    *users.ROUTES,
    *emails.ROUTES,
    *files.ROUTES,
    *images.ROUTES,
    *mailing_lists.ROUTES,
]
