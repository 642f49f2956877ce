"""
Usogui DB Server Package.

This package contains the web server implementation for the Usogui fan database.
It includes the API definition, configuration, dependencies and service logic.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration settings and constants.
    services: Authentication, spoiler gating, translations, search and media helpers.
    middleware: Request metrics middleware.
    exception_handlers: Application-wide exception handlers.
"""
