"""Requester that turns one HTTP round trip into a parsed result or an error."""
from __future__ import annotations

import argparse
import json
from typing import Any, Callable, Dict, Optional, Protocol
from urllib.parse import urlsplit

from .errors import SyntheticRequesterError
from .logger import logger
from .models import RequestDescriptor
from .transport import Transport, transport_for

DEFAULT_TIMEOUT = 20

RequesterCallback = Callable[[Any], Any]


def identity(response: Any) -> Any:
    return response


class SyntheticRequesterDatasource(Protocol):
    def get(self, url: str, options: Optional[Dict[str, Any]] = None) -> Any:
        ...


def serialize_body(data: Any) -> str | bytes:
    """Strings and bytes go out as-is, ``None`` as nothing, anything else as JSON."""

    if data is None:
        return ""
    if isinstance(data, (str, bytes)):
        return data
    return json.dumps(data)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant {name}")


def parse_body(text: str) -> Any:
    """Parse ``text`` as strict JSON, falling back to the raw text. Never raises.

    ``NaN`` and ``Infinity`` are not JSON, so bodies containing them stay raw.
    """

    if not text:
        return text
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return text


def build_descriptor(method: str, url: str, data: Any = "", options: Optional[Dict[str, Any]] = None) -> RequestDescriptor:
    options = dict(options or {})
    parts = urlsplit(url)
    raw_data = serialize_body(data)
    encoded = raw_data.encode("utf-8") if isinstance(raw_data, str) else raw_data
    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    options["headers"] = {
        **(options.get("headers") or {}),
        "Content-Length": str(len(encoded)),
    }
    return RequestDescriptor(
        method=method,
        url=url,
        scheme=parts.scheme,
        hostname=parts.hostname,
        port=parts.port,
        path=path,
        body=raw_data,
        options=options,
    )


class SyntheticRequester:
    """GET helper bound to a base URL.

    ``callback`` post-processes every successful result before it is returned.
    ``transport_factory`` maps a URL scheme to the transport that performs the
    request; the default picks the encrypted client for ``https`` and the
    plaintext client otherwise.
    """

    def __init__(
        self,
        base_url: str = "",
        callback: RequesterCallback = identity,
        transport_factory: Callable[[str], Transport] = transport_for,
    ) -> None:
        self.base_url = base_url
        self.callback = callback
        self.transport_factory = transport_factory

    def get(self, url: str, options: Optional[Dict[str, Any]] = None) -> Any:
        response = self._request("GET", self.base_url + url, None, options)
        return self.callback(response)

    def _request(self, method: str, url: str, data: Any = "", options: Optional[Dict[str, Any]] = None) -> Any:
        descriptor = build_descriptor(method, url, data, options)
        transport = self.transport_factory(descriptor.scheme)
        logger.debug("{} {} via {}", method, url, type(transport).__name__)
        try:
            response = transport.request(descriptor)
        except Exception as exc:
            logger.error("{} {} failed: {}", method, url, exc)
            raise

        parsed = parse_body(response.text)
        status_code = response.status_code or 500
        if status_code >= 400:
            logger.warning("{} {} returned {} {}", method, url, status_code, response.reason)
            raise SyntheticRequesterError(response.reason, parsed, status_code=status_code)

        logger.debug("{} {} returned {}", method, url, status_code)
        return parsed


def _parse_header(value: str) -> tuple[str, str]:
    name, sep, header_value = value.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Expected 'Name: value', got {value!r}")
    return name.strip(), header_value.strip()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Issue a GET request and print the parsed body")
    parser.add_argument("path", type=str, help="Path appended to the base URL (or a full URL)")
    parser.add_argument("--base-url", type=str, default="", help="Prefix concatenated before the path")
    parser.add_argument(
        "--header",
        type=_parse_header,
        action="append",
        default=[],
        help="Extra request header as 'Name: value' (repeatable)",
    )
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Socket timeout in seconds")
    parser.add_argument("--insecure", action="store_true", help="Skip TLS certificate verification")
    args = parser.parse_args(argv)

    options: Dict[str, Any] = {"headers": dict(args.header), "timeout": args.timeout}
    if args.insecure:
        options["verify"] = False

    requester = SyntheticRequester(args.base_url)
    try:
        result = requester.get(args.path, options)
    except SyntheticRequesterError as exc:
        logger.error("Request failed: {} {}", exc.status_code, exc.message)
        print(exc.request if isinstance(exc.request, str) else json.dumps(exc.request, indent=2))
        raise SystemExit(1)
    print(result if isinstance(result, str) else json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
