"""
Wire schemas for the accounts API.

Every request and response body is a JSON:API style envelope that places the
resource under ``data`` and pagination URLs under ``links``.
"""

from .account import (
    ACCOUNT_TYPE,
    Account,
    AccountAttributes,
    AccountEnvelope,
    AccountListEnvelope,
    Links,
    format_timestamp,
    parse_timestamp,
)

__all__ = [
    "ACCOUNT_TYPE",
    "Account",
    "AccountAttributes",
    "AccountEnvelope",
    "AccountListEnvelope",
    "Links",
    "format_timestamp",
    "parse_timestamp",
]
