"""Errors raised for HTTP-level failures."""
from __future__ import annotations

from typing import Any, Optional


class SyntheticRequesterError(Exception):
    """Raised when the server answers with a status code of 400 or above.

    ``request`` carries the response body, parsed as JSON when possible and the
    raw text otherwise. Connection-level failures are never wrapped in this
    error; they surface as the transport's own exception.
    """

    name = "RequesterError"

    def __init__(self, message: Optional[str] = None, request: Any = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.request = request
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"{self.name}({self.message!r}, status_code={self.status_code})"


__all__ = ["SyntheticRequesterError"]
