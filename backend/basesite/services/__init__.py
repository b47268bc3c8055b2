# Services package init
"""
Base Example Site — Services Layer
====================================

What:  Everything that talks to something outside the request: the Base
       API and the local temp directory.

Service Inventory:
    - BaseClient:    Async client for the Base API (users, sessions, files,
                     images, emails, mailing lists)
    - UploadService: Spools one multipart upload to disk and removes it
                     again when the request ends

Routes never call these directly; route operations receive the client
from the dispatcher, and the dispatcher owns the upload lifecycle.
"""
