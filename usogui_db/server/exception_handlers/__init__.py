"""
Exception handlers for the Usogui DB server.

This package contains the handlers for unhandled exceptions and database
integrity failures, and a setup function that registers them with the
FastAPI application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
