"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports: the Microsoft Graph
    list/drive store, the MSAL token source and local preference storage.

Dependencies:
    ``sharepoint_rest``/``http_client`` depend on ``requests``, ``msal_auth``
    on ``msal``; all of them only speak domain types to callers.

Call context:
    Imported by ``printboard.app.controller`` for runtime wiring and by tests
    that stub the transport underneath.
"""
