"""
HTTP transport capability.

A transport executes exactly one prepared request and returns exactly one
response. It owns connection pooling and timeouts; it never retries.
"""

from types import TracebackType
from typing import Optional, Protocol, Type, runtime_checkable

import requests


@runtime_checkable
class Transport(Protocol):
    """Send one request, get one response.

    Implementations raise ``requests.RequestException`` (or ``TransportError``)
    when the request could not be delivered.
    """

    def send(self, request: requests.PreparedRequest) -> requests.Response: ...


class RequestsTransport:
    """Default blocking transport backed by a ``requests.Session``."""

    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ):
        """
        Initialize transport.

        Args:
            session: Session to send requests with (a fresh one if omitted)
            timeout: Per-request timeout in seconds, passed to requests as-is
        """
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, request: requests.PreparedRequest) -> requests.Response:
        return self.session.send(request, timeout=self.timeout)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()
