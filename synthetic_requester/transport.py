"""Transports that put a request descriptor on the wire via `requests`."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

import requests

from .logger import logger
from .models import RequestDescriptor

CHUNK_SIZE = 8192
TLS_OPTIONS = ("verify", "cert")
# Keys the descriptor derives itself; caller options never override them.
DERIVED_OPTIONS = ("method", "url", "data", "headers", "stream")


@dataclass
class TransportResponse:
    text: str
    status_code: Optional[int] = None
    reason: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


@runtime_checkable
class Transport(Protocol):
    def request(self, descriptor: RequestDescriptor) -> TransportResponse:
        ...


class HttpTransport:
    """Plaintext client. Opens one session per request and closes it afterwards."""

    def request(self, descriptor: RequestDescriptor) -> TransportResponse:
        kwargs = self._request_kwargs(descriptor)
        # One request per call: redirects are followed only when the caller asks.
        kwargs.setdefault("allow_redirects", False)
        with requests.Session() as session:
            # Proxies, CA bundles and netrc credentials come from options, never the environment.
            session.trust_env = False
            with session.request(
                descriptor.method,
                descriptor.url,
                data=descriptor.body or None,
                headers=descriptor.headers,
                stream=True,
                **kwargs,
            ) as response:
                text = self._read_body(response)
                return TransportResponse(
                    text=text,
                    status_code=response.status_code,
                    reason=response.reason,
                    headers=dict(response.headers),
                )

    def _request_kwargs(self, descriptor: RequestDescriptor) -> Dict[str, Any]:
        return {
            key: value
            for key, value in descriptor.options.items()
            if key not in DERIVED_OPTIONS and key not in TLS_OPTIONS
        }

    @staticmethod
    def _read_body(response: requests.Response) -> str:
        chunks = []
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if chunk:
                chunks.append(chunk)
        logger.debug("Received {} chunk(s) from {}", len(chunks), response.url)
        return b"".join(chunks).decode("utf-8", errors="replace")


class HttpsTransport(HttpTransport):
    """Encrypted client. TLS settings such as ``verify`` and ``cert`` pass through."""

    def _request_kwargs(self, descriptor: RequestDescriptor) -> Dict[str, Any]:
        return {key: value for key, value in descriptor.options.items() if key not in DERIVED_OPTIONS}


TransportFactory = Callable[[], Transport]

# Process-wide configuration shared by every requester that uses `transport_for`.
# Pass `transport_factory` to a single requester to substitute a transport locally.
_TRANSPORTS: Dict[str, TransportFactory] = {
    "https": HttpsTransport,
}


def register_transport(scheme: str, factory: TransportFactory) -> None:
    """Use ``factory`` to build the transport for URLs with ``scheme``.

    The registration is process-wide: it applies to every requester built with
    the default ``transport_for`` factory.
    """

    _TRANSPORTS[scheme.rstrip(":").lower()] = factory


def unregister_transport(scheme: str) -> None:
    _TRANSPORTS.pop(scheme.rstrip(":").lower(), None)


def transport_for(scheme: str) -> Transport:
    """Return a transport for ``scheme``; unknown schemes get the plaintext client."""

    factory = _TRANSPORTS.get((scheme or "").rstrip(":").lower(), HttpTransport)
    return factory()


__all__ = [
    "HttpTransport",
    "HttpsTransport",
    "Transport",
    "TransportResponse",
    "register_transport",
    "transport_for",
    "unregister_transport",
]
