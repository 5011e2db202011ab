"""
Pagination over account list results.

The iterator is a small explicit state machine:

    FRESH ──current_page()──▶ HAS_PAGE ──advance() without next link──▶ EXHAUSTED

Traversal ends only when a fetched page carries no ``next`` link; the number
of pages is decided by the server.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator

from ..schemas.account import Account, AccountListEnvelope, Links

if TYPE_CHECKING:
    from .client import AccountsClient

DEFAULT_ACCOUNTS_PAGE_SIZE = 100


class IteratorState(str, Enum):
    """Lifecycle of an ``AccountsIterator``."""

    FRESH = "fresh"
    HAS_PAGE = "has_page"
    EXHAUSTED = "exhausted"


@dataclass
class ListAccountsParams:
    """Options for ``AccountsClient.list_accounts``."""

    page_number: int = 0  # 0-based
    page_size: int = DEFAULT_ACCOUNTS_PAGE_SIZE

    def __post_init__(self) -> None:
        if isinstance(self.page_number, bool) or not isinstance(self.page_number, int):
            raise ValueError(f"page_number must be an integer, got {self.page_number!r}")
        if isinstance(self.page_size, bool) or not isinstance(self.page_size, int):
            raise ValueError(f"page_size must be an integer, got {self.page_size!r}")
        if self.page_number < 0:
            raise ValueError(f"page_number must be >= 0, got {self.page_number}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")

    def to_path(self, collection_path: str) -> str:
        return f"{collection_path}?page[number]={self.page_number}&page[size]={self.page_size}"


class AccountsIterator:
    """
    Forward-only cursor over account list pages.

    Usage::

        pages = client.list_accounts()
        while pages.advance():
            for account in pages.current_page():
                ...

    The iterator is also a Python iterator yielding one list per page.
    Not safe for concurrent use; each traversal owns its own cursor.
    """

    def __init__(self, client: "AccountsClient", path: str):
        self._client = client
        self._path = path
        self._links: Links | None = None
        self._state = IteratorState.FRESH

    @property
    def state(self) -> IteratorState:
        return self._state

    @property
    def path(self) -> str:
        """Request path of the page ``current_page()`` fetches next."""
        return self._path

    @property
    def links(self) -> Links | None:
        """Links of the most recently fetched page."""
        return self._links

    def advance(self) -> bool:
        """
        Move to the next page.

        Returns True before the first fetch and whenever the last fetched
        page had a ``next`` link; False once the traversal is exhausted.
        """
        if self._state is IteratorState.FRESH:
            return True
        if self._state is IteratorState.EXHAUSTED:
            return False

        if self._links is not None and self._links.next:
            self._path = self._links.next
            return True

        self._state = IteratorState.EXHAUSTED
        return False

    def current_page(self) -> list[Account]:
        """
        Fetch the page at the current path.

        Calling this again without ``advance()`` re-fetches the same page.

        Raises:
            ApiError, TransportError, DecodeError: As raised by the client
        """
        envelope: AccountListEnvelope = self._client.request(
            "GET", self._path, decode=AccountListEnvelope.from_dict
        )
        self._links = envelope.links
        if self._state is IteratorState.FRESH:
            self._state = IteratorState.HAS_PAGE
        return envelope.data

    def all_accounts(self) -> list[Account]:
        """Fetch every remaining page and return the accounts in server order."""
        return [account for page in self for account in page]

    def __iter__(self) -> Iterator[list[Account]]:
        return self

    def __next__(self) -> list[Account]:
        if not self.advance():
            raise StopIteration
        return self.current_page()
