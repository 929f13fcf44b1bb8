"""Tests for cursor pagination: termination, ordering and the fetch ceiling."""

import httpx
import pytest

from fake_bitbucket import API, diffstat_entry
from prgate_core.bitbucket.pagination import DEFAULT_MAX_PAGES, iter_pages, paginate
from prgate_core.bitbucket.schemas import DiffStatPage
from prgate_core.bitbucket.transport import Transport
from prgate_core.errors import ValidationError

START = f"{API}/2.0/repositories/acme/infra/pullrequests/7/diffstat"


def _page_url(n: int) -> str:
    return START if n == 1 else f"{START}?page={n}"


def _add_chain(bitbucket, pages: list[list[str]]):
    """Register a finite chain where page n lists files pages[n-1]."""
    for i, paths in enumerate(pages, 1):
        body = {"values": [diffstat_entry(new=p) for p in paths]}
        if i < len(pages):
            body["next"] = _page_url(i + 1)
        bitbucket.add("GET", _page_url(i), json=body)


@pytest.fixture
def transport(http_client):
    return Transport(http_client, "bot", "pw")


class TestPaginate:
    def test_single_page(self, bitbucket, transport):
        _add_chain(bitbucket, [["a.py", "b.py"]])
        items = paginate(transport, START, DiffStatPage)
        assert [e.new.path for e in items] == ["a.py", "b.py"]
        assert len(bitbucket.requests) == 1

    def test_concatenates_pages_in_order_with_one_fetch_each(self, bitbucket, transport):
        _add_chain(bitbucket, [["a.py"], ["b.py", "c.py"], [], ["d.py"]])
        items = paginate(transport, START, DiffStatPage)
        assert [e.new.path for e in items] == ["a.py", "b.py", "c.py", "d.py"]
        assert [str(r.url) for r in bitbucket.requests] == [_page_url(n) for n in range(1, 5)]

    def test_empty_next_ends_traversal(self, bitbucket, transport):
        bitbucket.add("GET", START, json={"values": [diffstat_entry(new="a.py")], "next": ""})
        assert len(paginate(transport, START, DiffStatPage)) == 1
        assert len(bitbucket.requests) == 1

    def test_null_next_ends_traversal(self, bitbucket, transport):
        bitbucket.add("GET", START, json={"values": [], "next": None})
        assert paginate(transport, START, DiffStatPage) == []

    def test_invalid_page_fails_whole_traversal(self, bitbucket, transport):
        bitbucket.add("GET", START, json={"values": [diffstat_entry(new="a.py")], "next": _page_url(2)})
        bitbucket.add("GET", _page_url(2), json={"next": _page_url(3)})  # no "values"
        with pytest.raises(ValidationError):
            paginate(transport, START, DiffStatPage)
        assert len(bitbucket.requests) == 2

    def test_page_entries_are_validated(self, bitbucket, transport):
        bitbucket.add("GET", START, json={"values": [{"old": None, "new": {"path": "a.py"}}]})  # no status
        with pytest.raises(ValidationError):
            paginate(transport, START, DiffStatPage)


class TestCeiling:
    @staticmethod
    def _endless(counter: list):
        """A chain that always points to a new, never-seen page."""

        def handler(request):
            counter.append(request)
            n = len(counter)
            return httpx.Response(
                200,
                json={"values": [diffstat_entry(new=f"f{n}.py")], "next": f"{START}?page={n + 1}"},
            )

        return handler

    def test_stops_after_default_ceiling_and_returns_partial_results(self):
        fetched = []
        with httpx.Client(transport=httpx.MockTransport(self._endless(fetched))) as http:
            items = paginate(Transport(http, "bot", "pw"), START, DiffStatPage)
        assert DEFAULT_MAX_PAGES == 1000
        assert len(fetched) == 1000
        assert len(items) == 1000
        assert items[-1].new.path == "f1000.py"

    def test_ceiling_is_configurable(self):
        fetched = []
        with httpx.Client(transport=httpx.MockTransport(self._endless(fetched))) as http:
            items = paginate(Transport(http, "bot", "pw"), START, DiffStatPage, max_pages=5)
        assert len(fetched) == 5
        assert len(items) == 5

    def test_cyclic_cursor_visits_each_page_once(self, bitbucket, transport):
        bitbucket.add("GET", START, json={"values": [diffstat_entry(new="a.py")], "next": _page_url(2)})
        bitbucket.add("GET", _page_url(2), json={"values": [diffstat_entry(new="b.py")], "next": START})
        items = paginate(transport, START, DiffStatPage)
        assert [e.new.path for e in items] == ["a.py", "b.py"]
        assert len(bitbucket.requests) == 2

    def test_self_referencing_cursor_fetched_once(self, bitbucket, transport):
        bitbucket.add("GET", START, json={"values": [diffstat_entry(new="a.py")], "next": START})
        assert len(paginate(transport, START, DiffStatPage)) == 1
        assert len(bitbucket.requests) == 1


class TestIterPages:
    def test_is_lazy(self, bitbucket, transport):
        _add_chain(bitbucket, [["a.py"], ["b.py"]])
        pages = iter_pages(transport, START, DiffStatPage)
        first = next(pages)
        assert first.values[0].new.path == "a.py"
        assert len(bitbucket.requests) == 1
