"""Minimal GET helper that parses JSON bodies and raises on HTTP errors."""
from __future__ import annotations

from .errors import SyntheticRequesterError
from .models import RequestDescriptor
from .requester import SyntheticRequester, SyntheticRequesterDatasource
from .transport import HttpTransport, HttpsTransport, Transport, TransportResponse, register_transport, transport_for

__all__ = [
    "HttpTransport",
    "HttpsTransport",
    "RequestDescriptor",
    "SyntheticRequester",
    "SyntheticRequesterDatasource",
    "SyntheticRequesterError",
    "Transport",
    "TransportResponse",
    "register_transport",
    "transport_for",
]
