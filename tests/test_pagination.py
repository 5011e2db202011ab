"""Tests for paginated account listing."""

import math

import pytest
import responses

from form3_accounts.accounts_client import (
    AccountsClient,
    ApiError,
    IteratorState,
    ListAccountsParams,
)

from conftest import ACCOUNTS_URL, BASE_URL, StubTransport, account_data, make_response, page_link


def add_pages(account_ids: list[str], page_size: int) -> None:
    """Register one mocked response per page, chained by next links."""
    page_count = max(1, math.ceil(len(account_ids) / page_size))
    for number in range(page_count):
        chunk = account_ids[number * page_size : (number + 1) * page_size]
        links = {
            "self": page_link(number, page_size),
            "first": page_link(0, page_size),
            "last": page_link(page_count - 1, page_size),
        }
        if number > 0:
            links["prev"] = page_link(number - 1, page_size)
        if number < page_count - 1:
            links["next"] = page_link(number + 1, page_size)
        responses.add(
            responses.GET,
            f"{ACCOUNTS_URL}?page[number]={number}&page[size]={page_size}",
            json={"data": [account_data(account_id) for account_id in chunk], "links": links},
            status=200,
        )


class TestListAccountsParams:
    def test_defaults(self):
        params = ListAccountsParams()

        assert params.page_number == 0
        assert params.page_size == 100

    def test_path(self):
        path = ListAccountsParams(page_number=2, page_size=10).to_path("/organisation/accounts")

        assert path == "/organisation/accounts?page[number]=2&page[size]=10"

    @pytest.mark.parametrize(
        "kwargs",
        [{"page_number": -1}, {"page_size": 0}, {"page_size": "10"}, {"page_number": 1.5}],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ListAccountsParams(**kwargs)


class TestAccountsIterator:
    """Tests for the pagination state machine."""

    @pytest.fixture
    def client(self) -> AccountsClient:
        return AccountsClient(BASE_URL)

    @responses.activate
    def test_fresh_iterator_fetches_nothing(self, client):
        pages = client.list_accounts()

        assert pages.state is IteratorState.FRESH
        assert pages.advance() is True
        assert pages.advance() is True
        assert len(responses.calls) == 0

    def test_default_params_path(self, client):
        pages = client.list_accounts()

        assert pages.path == "/organisation/accounts?page[number]=0&page[size]=100"

    def test_client_page_size_is_default(self):
        client = AccountsClient(BASE_URL, page_size=25)

        assert client.list_accounts().path.endswith("page[size]=25")

    @responses.activate
    def test_empty_account_set(self, client):
        responses.add(
            responses.GET,
            f"{ACCOUNTS_URL}?page[number]=0&page[size]=100",
            json={"data": [], "links": {"self": page_link(0, 100), "first": page_link(0, 100)}},
            status=200,
        )

        pages = client.list_accounts()

        assert pages.advance() is True
        assert pages.current_page() == []
        assert pages.state is IteratorState.HAS_PAGE
        assert pages.advance() is False
        assert pages.state is IteratorState.EXHAUSTED
        assert pages.advance() is False
        assert len(responses.calls) == 1

    @pytest.mark.parametrize(
        ("total", "page_size"),
        [(1, 1), (5, 2), (6, 2), (7, 3), (3, 100)],
    )
    @responses.activate
    def test_iterates_all_pages_in_order(self, client, total, page_size):
        account_ids = [f"account-{i:03d}" for i in range(total)]
        add_pages(account_ids, page_size)

        pages = client.list_accounts(ListAccountsParams(page_size=page_size))
        seen: list[str] = []
        page_count = 0
        while pages.advance():
            seen.extend(account.id for account in pages.current_page())
            page_count += 1

        assert page_count == math.ceil(total / page_size)
        assert seen == account_ids
        assert len(set(seen)) == len(seen)

    @responses.activate
    def test_advance_follows_next_link(self, client):
        add_pages(["a", "b", "c"], 2)
        pages = client.list_accounts(ListAccountsParams(page_size=2))

        pages.advance()
        pages.current_page()

        assert pages.links.next == page_link(1, 2)
        assert pages.advance() is True
        assert pages.path == page_link(1, 2)
        assert [a.id for a in pages.current_page()] == ["c"]
        assert pages.advance() is False

    @responses.activate
    def test_current_page_refetches_without_advance(self, client):
        add_pages(["a"], 2)
        pages = client.list_accounts(ListAccountsParams(page_size=2))

        pages.advance()
        first = pages.current_page()
        second = pages.current_page()

        assert first == second
        assert len(responses.calls) == 2
        assert responses.calls[0].request.url == responses.calls[1].request.url

    @responses.activate
    def test_python_iteration(self, client):
        add_pages(["a", "b", "c", "d", "e"], 2)

        pages = list(client.list_accounts(ListAccountsParams(page_size=2)))

        assert [[a.id for a in page] for page in pages] == [["a", "b"], ["c", "d"], ["e"]]

    @responses.activate
    def test_all_accounts(self, client):
        add_pages(["a", "b", "c"], 1)

        accounts = client.list_accounts(ListAccountsParams(page_size=1)).all_accounts()

        assert [a.id for a in accounts] == ["a", "b", "c"]

    @responses.activate
    def test_start_from_later_page(self, client):
        add_pages(["a", "b", "c", "d"], 2)

        pages = client.list_accounts(ListAccountsParams(page_number=1, page_size=2))

        assert [a.id for a in pages.all_accounts()] == ["c", "d"]

    @responses.activate
    def test_error_mid_traversal(self, client):
        responses.add(
            responses.GET,
            f"{ACCOUNTS_URL}?page[number]=0&page[size]=1",
            json={"data": [account_data("a")], "links": {"next": page_link(1, 1)}},
            status=200,
        )
        responses.add(
            responses.GET,
            f"{ACCOUNTS_URL}?page[number]=1&page[size]=1",
            status=500,
        )
        pages = client.list_accounts(ListAccountsParams(page_size=1))

        assert pages.advance()
        pages.current_page()
        assert pages.advance()
        with pytest.raises(ApiError) as exc_info:
            pages.current_page()

        assert exc_info.value.status_code == 500

    def test_failed_first_fetch_stays_fresh(self):
        transport = StubTransport(make_response(503), make_response(200, {"data": []}))
        client = AccountsClient(BASE_URL, transport=transport)
        pages = client.list_accounts()

        assert pages.advance()
        with pytest.raises(ApiError):
            pages.current_page()
        assert pages.state is IteratorState.FRESH

        assert pages.advance()
        assert pages.current_page() == []
        assert pages.advance() is False

    def test_null_data_is_an_empty_page(self):
        transport = StubTransport(make_response(200, {"data": None, "links": None}))
        client = AccountsClient(BASE_URL, transport=transport)

        assert list(client.list_accounts()) == [[]]

    def test_absolute_next_link(self):
        transport = StubTransport(
            make_response(200, {"data": [account_data("a")], "links": {"next": "http://mirror.test/v1/page-2"}}),
            make_response(200, {"data": [account_data("b")], "links": {}}),
        )
        client = AccountsClient(BASE_URL, transport=transport)

        accounts = client.list_accounts().all_accounts()

        assert [a.id for a in accounts] == ["a", "b"]
        assert transport.requests[1].url == "http://mirror.test/v1/page-2"
