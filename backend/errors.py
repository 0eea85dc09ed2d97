"""
Domain errors raised by the dependency and status-transition core.

main.py maps each class to an HTTP status code; nothing in the core
imports FastAPI.
"""

from typing import List, Optional


class TaskManagementError(Exception):
    """Base class for errors scoped to a single request."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TaskManagementError):
    """A referenced task or dependency does not exist."""

    status_code = 404


class InvalidArgumentError(TaskManagementError):
    """The request is malformed, e.g. a task depending on itself."""


class ConflictError(TaskManagementError):
    """The dependency already exists or would close a cycle."""


class TaskBlockedError(TaskManagementError):
    """A status transition was rejected because of the dependency graph."""

    def __init__(self, message: str, reasons: Optional[List[str]] = None):
        super().__init__(message)
        self.reasons = list(reasons or [])
