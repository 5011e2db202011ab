"""
Form3 Accounts API Client.

Provides:
- Fetch an account (GET /organisation/accounts/{id})
- Create an account (POST /organisation/accounts)
- Delete an account (DELETE /organisation/accounts/{id}?version={n})
- Paginated account listing following server ``next`` links

Errors are raised once, typed by kind, and never retried.
"""

from .client import (
    ACCOUNTS_PATH,
    MEDIA_TYPE,
    AccountsClient,
    ApiError,
    ConfigError,
    DecodeError,
    EncodingError,
    Form3Error,
    TransportError,
    interpret_response,
)
from .pagination import (
    DEFAULT_ACCOUNTS_PAGE_SIZE,
    AccountsIterator,
    IteratorState,
    ListAccountsParams,
)
from .transport import RequestsTransport, Transport

__all__ = [
    "ACCOUNTS_PATH",
    "DEFAULT_ACCOUNTS_PAGE_SIZE",
    "MEDIA_TYPE",
    "AccountsClient",
    "AccountsIterator",
    "ApiError",
    "ConfigError",
    "DecodeError",
    "EncodingError",
    "Form3Error",
    "IteratorState",
    "ListAccountsParams",
    "RequestsTransport",
    "Transport",
    "TransportError",
    "interpret_response",
]
