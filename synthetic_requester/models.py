"""Pydantic models describing a single outbound request."""
from __future__ import annotations

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field


class RequestDescriptor(BaseModel):
    """Everything a transport needs to issue one request.

    Built fresh for every call from the caller's options plus the fields
    derived from the URL and body.
    """

    method: str
    url: str
    scheme: str
    hostname: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=0, le=65535)
    path: str = "/"
    body: Union[str, bytes] = ""
    options: Dict[str, Any] = Field(default_factory=dict)

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self.options.get("headers") or {})

    @property
    def is_secure(self) -> bool:
        return self.scheme == "https"
