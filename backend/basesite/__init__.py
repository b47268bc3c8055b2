"""
Base Example Site — Application Package Initializer
=====================================================

What: Marks the `basesite` directory as a Python package.
Why:  Enables module imports like `from basesite.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    Every page of the site follows the same request-handling convention:

    ┌─────────────────────────────────────┐
    │     Route tables (routes/*.py)      │  ← (verb, path) → operation + transforms
    ├─────────────────────────────────────┤
    │     Dispatcher (dispatcher.py)      │  ← guard → decode → invoke → redirect/render
    ├─────────────────────────────────────┤
    │  Form decoder / Error translator    │  ← forms.py, results.py, messages.py
    ├─────────────────────────────────────┤
    │   Base API client (services/)       │  ← all persistent state lives remotely
    └─────────────────────────────────────┘

    Route modules only describe WHAT each endpoint does; the dispatcher owns
    HOW every endpoint behaves on success and failure.
"""

__version__ = "1.0.0"
