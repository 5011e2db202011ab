"""Test fixtures and utilities."""

import json
from typing import Any

import pytest
import requests

BASE_URL = "http://localhost:8080/v1"
ACCOUNTS_URL = f"{BASE_URL}/organisation/accounts"

ACCOUNT_ID = "11111111-1111-1111-1111-111111111111"
ORGANISATION_ID = "22222222-2222-2222-2222-222222222222"


def account_data(
    account_id: str = ACCOUNT_ID,
    version: int = 0,
    **attributes: Any,
) -> dict:
    """Account resource as returned by the API."""
    return {
        "id": account_id,
        "type": "accounts",
        "organisation_id": ORGANISATION_ID,
        "version": version,
        "created_on": "2021-04-13T09:45:30.611Z",
        "modified_on": "2021-04-13T09:45:30.611Z",
        "attributes": attributes or {"country": "GB", "bic": "NWBKGB22"},
    }


def page_link(page_number: int, page_size: int) -> str:
    """Relative link in the form the API returns it."""
    return f"/v1/organisation/accounts?page[number]={page_number}&page[size]={page_size}"


def make_response(
    status_code: int,
    json_body: Any = None,
    body: bytes | None = None,
    reason: str | None = None,
) -> requests.Response:
    """Build a ``requests.Response`` without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.encoding = "utf-8"
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
    else:
        response._content = body or b""
    return response


class StubTransport:
    """Transport double that records requests and replays canned responses."""

    def __init__(self, *replies: requests.Response | Exception):
        self.requests: list[requests.PreparedRequest] = []
        self._replies = list(replies)

    def send(self, request: requests.PreparedRequest) -> requests.Response:
        self.requests.append(request)
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        reply.request = request
        return reply


@pytest.fixture
def sample_account() -> dict:
    """Single account API payload."""
    return account_data()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration overrides inherited from the environment."""
    for name in ("FORM3_API_URL", "FORM3_TIMEOUT", "FORM3_PAGE_SIZE", "FORM3_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
