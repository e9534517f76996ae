"""Tests for the search, resolver, identity and browser services."""

import asyncio
import json
import sqlite3
import webbrowser

import httpx
import pyperclip
import pytest

from services import (Browser, IdentityStore, KeyValueStore,
                      MovieSearchService, UrlResolver)

SEARCH_ENDPOINT = "https://search.example/"
POSTER_BASE = "https://image.example/w500"


def _make_service(handler=None) -> MovieSearchService:
    transport = httpx.MockTransport(handler or (lambda request: httpx.Response(200, json={"results": []})))
    client = httpx.AsyncClient(transport=transport)
    return MovieSearchService(client, SEARCH_ENDPOINT, POSTER_BASE, 100)


def _record(**overrides):
    record = {
        "id": 27205,
        "title": "Inception",
        "release_date": "2010-07-15",
        "overview": "Cobb, a skilled thief who commits corporate espionage by infiltrating the subconscious.",
        "poster_path": "/inception.jpg",
    }
    record.update(overrides)
    return record


# ---------------------------------------------------------------------------
# Record parsing
# ---------------------------------------------------------------------------


class TestParseRecord:
    def test_full_record(self) -> None:
        movie = _make_service().parse_record(_record())
        assert movie.id == "27205"
        assert movie.title == "Inception"
        assert movie.release_year == "2010"
        assert movie.display_title == "Inception (2010)"
        assert movie.poster_url == "https://image.example/w500/inception.jpg"
        assert movie.icon == movie.poster_url

    @pytest.mark.parametrize("release_date", [None, "", "2010", "July 2010", "10-07-2010", "2010-7-15"])
    def test_year_needs_full_date(self, release_date) -> None:
        movie = _make_service().parse_record(_record(release_date=release_date))
        assert movie.release_year == ""
        assert movie.display_title == "Inception"

    def test_missing_poster_uses_generic_icon(self) -> None:
        movie = _make_service().parse_record(_record(poster_path=None))
        assert movie.poster_url == ""
        assert movie.icon == "mdi:movie"

    def test_missing_overview(self) -> None:
        record = _record()
        del record["overview"]
        assert _make_service().parse_record(record).overview_snippet == ""

    @pytest.mark.parametrize("record", [None, "oops", {}, {"id": None, "title": "x"}, {"id": "", "title": "x"}])
    def test_records_without_id_are_skipped(self, record) -> None:
        assert _make_service().parse_record(record) is None

    def test_missing_title(self) -> None:
        assert _make_service().parse_record(_record(title=None)).title == "Untitled"


class TestSnippet:
    def test_short_overview_is_kept(self) -> None:
        assert _make_service().snippet("Up", "A balloon house.") == "A balloon house."

    def test_long_overview_is_truncated(self) -> None:
        title = "Inception"
        snippet = _make_service().snippet(title, "x" * 500)
        assert snippet.endswith("...")
        assert len(title) + len(snippet) == 100

    @pytest.mark.parametrize("title_length", [0, 1, 50, 96, 97, 98, 99, 100])
    def test_budget_is_never_exceeded(self, title_length) -> None:
        title = "t" * title_length
        snippet = _make_service().snippet(title, "o" * 200)
        assert len(title) + len(snippet) <= 100

    def test_no_room_for_marker(self) -> None:
        assert _make_service().snippet("t" * 99, "overview") == ""


# ---------------------------------------------------------------------------
# Search requests
# ---------------------------------------------------------------------------


class TestSearch:
    def test_query_is_encoded_and_results_parsed(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"results": [_record(), {"title": "no id"}, _record(id=2, title="Other")]})

        results, error = asyncio.run(_make_service(handler).search("Amélie & co"))
        assert error is None
        assert [m.id for m in results] == ["27205", "2"]
        assert seen[0].method == "GET"
        assert seen[0].url.params["search"] == "Amélie & co"
        assert str(seen[0].url).startswith(SEARCH_ENDPOINT + "?search=")

    def test_zero_results(self) -> None:
        results, error = asyncio.run(_make_service().search("nothing"))
        assert results == []
        assert error is None

    def test_server_error(self) -> None:
        results, error = asyncio.run(_make_service(lambda r: httpx.Response(503)).search("x"))
        assert results is None
        assert "failed" in error

    def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route", request=request)

        results, error = asyncio.run(_make_service(handler).search("x"))
        assert results is None
        assert error

    def test_malformed_json(self) -> None:
        handler = lambda r: httpx.Response(200, content=b"<html>", headers={"content-type": "text/html"})
        results, error = asyncio.run(_make_service(handler).search("x"))
        assert results is None
        assert "invalid" in error

    @pytest.mark.parametrize("payload", [[], {"results": None}, {"page": 1}, {"results": "x"}])
    def test_missing_results_list(self, payload) -> None:
        handler = lambda r: httpx.Response(200, content=json.dumps(payload).encode())
        results, error = asyncio.run(_make_service(handler).search("x"))
        assert results is None
        assert error


# ---------------------------------------------------------------------------
# URL resolution
# ---------------------------------------------------------------------------


class TestUrlResolver:
    def _resolver(self, handler) -> UrlResolver:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return UrlResolver(client, "https://letterboxd.com/tmdb")

    def test_follows_redirects_with_head(self) -> None:
        methods = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            if request.url.path == "/tmdb/27205":
                return httpx.Response(301, headers={"Location": "https://letterboxd.com/film/inception/"})
            return httpx.Response(200)

        url = asyncio.run(self._resolver(handler).resolve_movie("27205"))
        assert url == "https://letterboxd.com/film/inception/"
        assert methods == ["HEAD", "HEAD"]

    def test_network_failure_returns_empty(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("slow", request=request)

        assert asyncio.run(self._resolver(handler).resolve_movie("27205")) == ""

    def test_redirect_loop_returns_empty(self) -> None:
        handler = lambda r: httpx.Response(302, headers={"Location": "https://letterboxd.com/tmdb/1"})
        assert asyncio.run(self._resolver(handler).resolve_movie("1")) == ""


# ---------------------------------------------------------------------------
# Identity persistence
# ---------------------------------------------------------------------------


class TestIdentityStore:
    def test_set_get_clear(self, tmp_path) -> None:
        store = KeyValueStore(str(tmp_path / "settings.db"))
        identity = IdentityStore(store, "letterboxdUser")

        async def scenario():
            assert await identity.get_identity() == ""
            await identity.set_identity("alice")
            assert await identity.get_identity() == "alice"
            await identity.set_identity("bob")
            assert await identity.get_identity() == "bob"
            await identity.clear_identity()
            assert await identity.get_identity() == ""

        try:
            asyncio.run(scenario())
        finally:
            store.close()

    def test_concurrent_calls_share_one_connection(self, tmp_path) -> None:
        store = KeyValueStore(str(tmp_path / "settings.db"))
        identity = IdentityStore(store, "letterboxdUser")

        async def scenario():
            writes = [identity.set_identity(f"user{i}") for i in range(20)]
            reads = [identity.get_identity() for _ in range(20)]
            await asyncio.gather(*writes, *reads)
            return await identity.get_identity()

        try:
            assert asyncio.run(scenario()).startswith("user")
        finally:
            store.close()

    def test_value_survives_reopen(self, tmp_path) -> None:
        path = str(tmp_path / "settings.db")
        store = KeyValueStore(path)
        store.set("letterboxdUser", "alice")
        store.close()

        reopened = KeyValueStore(path)
        try:
            assert reopened.get("letterboxdUser") == "alice"
            assert reopened.get("other") is None
        finally:
            reopened.close()

    def test_store_errors_propagate(self, tmp_path) -> None:
        store = KeyValueStore(str(tmp_path / "settings.db"))
        store.close()
        identity = IdentityStore(store, "letterboxdUser")
        with pytest.raises(sqlite3.Error):
            asyncio.run(identity.get_identity())


# ---------------------------------------------------------------------------
# Browser
# ---------------------------------------------------------------------------


class TestBrowser:
    def test_open(self, monkeypatch) -> None:
        opened = []
        monkeypatch.setattr(webbrowser, "open", lambda url: opened.append(url) or True)
        success, message = Browser().open("https://letterboxd.com/film/inception/")
        assert success
        assert opened == ["https://letterboxd.com/film/inception/"]

    def test_open_failure(self, monkeypatch) -> None:
        def boom(url):
            raise webbrowser.Error("no runnable browser")

        monkeypatch.setattr(webbrowser, "open", boom)
        success, message = Browser().open("https://letterboxd.com/")
        assert not success
        assert "no runnable browser" in message

    def test_copy(self, monkeypatch) -> None:
        copied = []
        monkeypatch.setattr(pyperclip, "copy", copied.append)
        success, _ = Browser().copy("https://letterboxd.com/film/inception/")
        assert success
        assert copied == ["https://letterboxd.com/film/inception/"]

    def test_copy_without_clipboard(self, monkeypatch) -> None:
        def boom(text):
            raise pyperclip.PyperclipException("no clipboard")

        monkeypatch.setattr(pyperclip, "copy", boom)
        success, message = Browser().copy("x")
        assert not success
        assert "no clipboard" in message
