"""Unit tests for the database layer.

Repository tests run against in-memory SQLite; the base repository CRUD is
also covered with a mocked session.
"""
