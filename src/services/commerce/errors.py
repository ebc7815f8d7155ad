"""Exceptions raised by the commerce integration."""

from __future__ import annotations

from typing import Any


class CommerceError(Exception):
    """Base class for commerce integration failures."""


class AuthError(CommerceError):
    """Raised when a bearer token cannot be obtained."""


class ValidationError(CommerceError):
    """Raised for malformed caller input or an unrenderable backend record."""


class NotFoundError(CommerceError):
    """Raised when a referenced record could not be resolved."""


class BackendError(CommerceError):
    """Raised when the commerce backend answers with an error."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401
