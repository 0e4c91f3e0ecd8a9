"""Failures surfaced by the catalog client."""
from __future__ import annotations

from enum import Enum

GENERIC_SERVER_MESSAGE = "Something went wrong. Check the backend console for more details"


class ErrorKind(str, Enum):
    SERVER = "server"
    NO_RESPONSE = "no_response"
    REQUEST_SETUP = "request_setup"


class CatalogError(Exception):
    """Base class for every catalog request failure.

    ``kind`` tells the display layer which of the three failure families
    occurred; ``message`` is safe to show to the user.
    """

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ServerError(CatalogError):
    """The backend answered with a failing status or an unusable body."""

    kind = ErrorKind.SERVER

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoResponseError(CatalogError):
    """The request was sent but no response arrived."""

    kind = ErrorKind.NO_RESPONSE


class RequestSetupError(CatalogError):
    """The request could not be built, so it was never sent."""

    kind = ErrorKind.REQUEST_SETUP
