"""
Form3 accounts API client implementation.
"""

import json
import logging
import uuid
from http import HTTPStatus
from types import TracebackType
from typing import TYPE_CHECKING, Any, Callable, Optional, Type
from urllib.parse import quote, urlsplit

import requests

from ..schemas.account import ACCOUNT_TYPE, Account, AccountAttributes, AccountEnvelope
from .pagination import DEFAULT_ACCOUNTS_PAGE_SIZE, AccountsIterator, ListAccountsParams
from .transport import RequestsTransport, Transport

if TYPE_CHECKING:
    from ..config import Config

logger = logging.getLogger(__name__)

MEDIA_TYPE = "application/vnd.api+json"
ACCOUNTS_PATH = "/organisation/accounts"


class Form3Error(Exception):
    """Base exception for accounts client errors."""

    pass


class ConfigError(Form3Error):
    """Client configuration is missing or invalid. No request was attempted."""

    pass


class EncodingError(Form3Error):
    """Request payload could not be serialized to JSON."""

    pass


class TransportError(Form3Error):
    """The transport failed to deliver the request (network, DNS, TLS, timeout)."""

    pass


class DecodeError(Form3Error):
    """A successful response body did not match the expected shape."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Failed to decode {status_code} response: {message}")


class ApiError(Form3Error):
    """API returned a non-success status.

    ``error_code`` and ``error_message`` are only populated for 400 responses,
    the one status for which the API sends a structured error body.
    """

    def __init__(
        self,
        status_code: int,
        status: str,
        error_code: int | str | None = None,
        error_message: str = "",
        response: requests.Response | None = None,
    ):
        self.status_code = status_code
        self.status = status
        self.error_code = error_code
        self.error_message = error_message
        self.response = response

        detail = f"{status_code} {status}".rstrip()
        extra = " ".join(str(part) for part in (error_code, error_message) if part not in (None, ""))
        if extra:
            detail = f"{detail}: {extra}"
        super().__init__(f"Form3 API error {detail}")

    @property
    def is_bad_request(self) -> bool:
        return self.status_code == HTTPStatus.BAD_REQUEST

    @property
    def is_not_found(self) -> bool:
        return self.status_code == HTTPStatus.NOT_FOUND

    @property
    def is_conflict(self) -> bool:
        return self.status_code == HTTPStatus.CONFLICT


def _status_text(response: requests.Response) -> str:
    if response.reason:
        return response.reason
    try:
        return HTTPStatus(response.status_code).phrase
    except ValueError:
        return ""


def _decode_error_body(response: requests.Response) -> tuple[int | str | None, str]:
    """Extract ``(error_code, error_message)`` from a 400 body.

    Malformed bodies yield ``(None, "")`` so the HTTP status is never masked.
    """
    try:
        body = response.json()
    except ValueError:
        return None, ""
    if not isinstance(body, dict):
        return None, ""

    error_code = body.get("error_code")
    if isinstance(error_code, bool) or not isinstance(error_code, (int, str)):
        error_code = None
    error_message = body.get("error_message")
    if not isinstance(error_message, str):
        error_message = ""
    return error_code, error_message


def interpret_response(
    method: str,
    response: requests.Response,
    decode: Callable[[Any], Any] | None = None,
) -> Any:
    """
    Classify a response and decode its body.

    Decision table:
    - DELETE + 204: success, body ignored
    - 200 / 201: body decoded with ``decode`` (``None`` when no decoder)
    - 400: ``ApiError`` with the structured error body, if any
    - anything else: ``ApiError`` with status code and text only

    Raises:
        ApiError: For every non-success status
        DecodeError: If a 200/201 body is not JSON or has the wrong shape
    """
    status_code = response.status_code

    if method.upper() == "DELETE" and status_code == HTTPStatus.NO_CONTENT:
        return None

    if status_code in (HTTPStatus.OK, HTTPStatus.CREATED):
        if decode is None:
            return None
        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(status_code, f"body is not valid JSON: {e}") from e
        try:
            return decode(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(status_code, f"unexpected body shape: {e!r}") from e

    error_code: int | str | None = None
    error_message = ""
    if status_code == HTTPStatus.BAD_REQUEST:
        error_code, error_message = _decode_error_body(response)

    raise ApiError(
        status_code=status_code,
        status=_status_text(response),
        error_code=error_code,
        error_message=error_message,
        response=response,
    )


def _new_account_id() -> str:
    return str(uuid.uuid4())


class AccountsClient:
    """
    Client for the Form3 accounts API.

    Features:
    - Fetch, create and delete accounts
    - Paginated account listing via ``AccountsIterator``
    - Pluggable transport (``requests`` by default)

    Failures are raised once and never retried.
    """

    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        base_url: str,
        transport: Transport | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
        page_size: int = DEFAULT_ACCOUNTS_PAGE_SIZE,
        id_factory: Callable[[], str] | None = None,
    ):
        """
        Initialize accounts client.

        Args:
            base_url: API root (e.g., "http://localhost:8080/v1")
            transport: Transport to send requests with; a ``RequestsTransport``
                using ``timeout`` when omitted
            timeout: Request timeout in seconds for the default transport
            page_size: Default page size for ``list_accounts``
            id_factory: Generates account ids when ``create_account`` is
                called without one (random UUID4 by default)

        Raises:
            ConfigError: If base_url is empty or not an http(s) URL
        """
        if not base_url:
            raise ConfigError("base_url is required")
        parts = urlsplit(base_url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigError(f"Invalid base_url '{base_url}': expected an http(s) URL")

        self.base_url = base_url.rstrip("/")
        self._origin = f"{parts.scheme}://{parts.netloc}"
        self._base_path = parts.path.rstrip("/")

        self.transport: Transport = transport or RequestsTransport(timeout=timeout)
        self.page_size = page_size
        self.id_factory = id_factory or _new_account_id

    @classmethod
    def from_config(cls, config: "Config", transport: Transport | None = None) -> "AccountsClient":
        """Build a client from application configuration."""
        return cls(
            base_url=config.api.base_url,
            transport=transport,
            timeout=config.api.timeout,
            page_size=config.api.page_size,
        )

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        # Server-issued links already carry the base path (e.g. /v1/...)
        if self._base_path and (
            path == self._base_path or path.startswith((f"{self._base_path}/", f"{self._base_path}?"))
        ):
            return f"{self._origin}{path}"
        return f"{self.base_url}{path}"

    def build_request(
        self,
        method: str,
        path: str,
        payload: Any = None,
    ) -> requests.PreparedRequest:
        """
        Build an outbound request.

        Args:
            method: HTTP method
            path: Path relative to the base URL, or an absolute URL
            payload: Envelope with ``to_dict()`` or a JSON-serializable mapping

        Raises:
            EncodingError: If the payload cannot be JSON encoded
        """
        method = method.upper()
        body = None
        if payload is not None:
            data = payload.to_dict() if hasattr(payload, "to_dict") else payload
            try:
                body = json.dumps(data, allow_nan=False).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise EncodingError(f"Failed to encode {method} {path} payload: {e}") from e

        headers = {"Accept": MEDIA_TYPE}
        if method == "POST":
            headers["Content-Type"] = MEDIA_TYPE

        return requests.Request(method, self._url(path), headers=headers, data=body).prepare()

    def do_request(
        self,
        request: requests.PreparedRequest,
        decode: Callable[[Any], Any] | None = None,
    ) -> Any:
        """Send a prepared request and interpret the response."""
        logger.debug(f"API Request: {request.method} {request.url}")

        try:
            response = self.transport.send(request)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request to {request.url} failed: {e}") from e

        logger.debug(f"Response status: {response.status_code}")

        return interpret_response(request.method or "", response, decode)

    def request(
        self,
        method: str,
        path: str,
        payload: Any = None,
        decode: Callable[[Any], Any] | None = None,
    ) -> Any:
        """Build, send and interpret one request."""
        return self.do_request(self.build_request(method, path, payload), decode)

    def get_account(self, account_id: str) -> Account:
        """
        Get an account by ID.

        Raises:
            ApiError: 404 if the account does not exist
        """
        path = f"{ACCOUNTS_PATH}/{_path_segment(account_id, 'account_id')}"
        envelope: AccountEnvelope = self.request("GET", path, decode=AccountEnvelope.from_dict)
        return envelope.data

    def create_account(
        self,
        organisation_id: str,
        attributes: AccountAttributes | None,
        account_id: str | None = None,
    ) -> Account:
        """
        Create an account.

        Args:
            organisation_id: Owning organisation
            attributes: Banking attributes (the server rejects creation without them)
            account_id: Caller-supplied id; generated by ``id_factory`` if omitted

        Returns:
            The account as stored by the server

        Raises:
            ApiError: 400 on validation failure, 409 if the id already exists
        """
        if not organisation_id:
            raise ValueError("organisation_id is required")
        if account_id is None:
            account_id = self.id_factory()
        if not account_id:
            raise ValueError("account_id must not be empty")

        payload = AccountEnvelope(
            data=Account(
                id=account_id,
                organisation_id=organisation_id,
                type=ACCOUNT_TYPE,
                attributes=attributes,
            )
        )
        envelope: AccountEnvelope = self.request(
            "POST", ACCOUNTS_PATH, payload=payload, decode=AccountEnvelope.from_dict
        )
        logger.debug(f"Created account id={envelope.data.id}")
        return envelope.data

    def delete_account(self, account_id: str, version: int) -> None:
        """
        Delete an account.

        The API answers 404 both for unknown ids and for stale versions.

        Raises:
            ApiError: 404 if the account or version does not exist
        """
        if isinstance(version, bool) or not isinstance(version, int) or version < 0:
            raise ValueError(f"version must be a non-negative integer, got {version!r}")

        path = f"{ACCOUNTS_PATH}/{_path_segment(account_id, 'account_id')}?version={version}"
        self.request("DELETE", path)
        logger.debug(f"Deleted account id={account_id} version={version}")

    def list_accounts(self, params: ListAccountsParams | None = None) -> AccountsIterator:
        """
        List accounts page by page.

        Nothing is fetched until the iterator is advanced.
        """
        if params is None:
            params = ListAccountsParams(page_size=self.page_size)
        return AccountsIterator(self, params.to_path(ACCOUNTS_PATH))

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "AccountsClient":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


def _path_segment(value: str, name: str) -> str:
    if not value:
        raise ValueError(f"{name} must not be empty")
    return quote(value, safe="")
