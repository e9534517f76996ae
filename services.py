# services.py
import asyncio
import logging
import re
import sqlite3
import threading
import webbrowser
from typing import Any, List, Optional, Tuple

import httpx
import pyperclip

from models import MovieResult

logger = logging.getLogger(__name__)

_RELEASE_DATE_RE = re.compile(r"^(\d{4})-\d{2}-\d{2}$")
TRUNCATION_MARKER = "..."


class KeyValueStore:
    """A service to manage a tiny SQLite-backed key-value table."""
    def __init__(self, db_name: str):
        self.db_name = db_name
        self.conn = sqlite3.connect(db_name, check_same_thread=False)
        self.lock = threading.Lock()
        self.create_table()

    def create_table(self):
        """Creates the settings table if it doesn't exist."""
        with self.lock, self.conn:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

    def get(self, key: str) -> Optional[str]:
        with self.lock, self.conn:
            row = self.conn.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str):
        with self.lock, self.conn:
            self.conn.execute(
                "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
                (key, value),
            )

    def delete(self, key: str):
        with self.lock, self.conn:
            self.conn.execute("DELETE FROM settings WHERE key = ?", (key,))

    def close(self):
        self.conn.close()


class IdentityStore:
    """Get, set and clear the persisted Letterboxd username.

    Store errors are propagated to the caller unchanged.
    """
    def __init__(self, store: KeyValueStore, key: str):
        self.store = store
        self.key = key

    async def get_identity(self) -> str:
        value = await asyncio.to_thread(self.store.get, self.key)
        return value or ""

    async def set_identity(self, name: str) -> None:
        await asyncio.to_thread(self.store.set, self.key, name)
        logger.info("Stored Letterboxd username %r", name)

    async def clear_identity(self) -> None:
        await asyncio.to_thread(self.store.delete, self.key)
        logger.info("Cleared Letterboxd username")


class MovieSearchService:
    """A service to handle interactions with the TMDB search proxy."""
    def __init__(self, client: httpx.AsyncClient, endpoint: str, poster_base_url: str, display_budget: int):
        self.client = client
        self.endpoint = endpoint
        self.poster_base_url = poster_base_url
        self.display_budget = display_budget

    async def search(self, query: str) -> Tuple[Optional[List[MovieResult]], Optional[str]]:
        """Performs the search and returns (results, None) or (None, error message)."""
        try:
            response = await self.client.get(self.endpoint, params={"search": query})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.warning("Search request for %r failed: %s", query, e)
            return None, f"Search request failed: {e}"
        except ValueError as e:
            logger.warning("Search response for %r was not JSON: %s", query, e)
            return None, "Search service returned an invalid response."

        records = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(records, list):
            logger.warning("Search response for %r has no results list", query)
            return None, "Search service returned an invalid response."

        results = []
        for record in records:
            parsed = self.parse_record(record)
            if parsed:
                results.append(parsed)
        return results, None

    def parse_record(self, record: Any) -> Optional[MovieResult]:
        """Parses a single raw API record into our MovieResult data model."""
        if not isinstance(record, dict) or record.get("id") in (None, ""):
            return None

        title = str(record.get("title") or "Untitled")
        release_year = ""
        match = _RELEASE_DATE_RE.match(str(record.get("release_date") or ""))
        if match:
            release_year = match.group(1)

        poster_path = record.get("poster_path")
        return MovieResult(
            id=str(record["id"]),
            title=title,
            release_year=release_year,
            overview_snippet=self.snippet(title, str(record.get("overview") or "")),
            poster_url=f"{self.poster_base_url}{poster_path}" if poster_path else "",
        )

    def snippet(self, title: str, overview: str) -> str:
        """Cuts the overview so that title plus snippet fits the display budget."""
        room = self.display_budget - len(title)
        if len(overview) <= room:
            return overview
        if room < len(TRUNCATION_MARKER):
            return ""
        return overview[:room - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER


class UrlResolver:
    """Maps a TMDB id to Letterboxd's canonical film URL via redirects."""
    def __init__(self, client: httpx.AsyncClient, tmdb_redirect_url: str):
        self.client = client
        self.tmdb_redirect_url = tmdb_redirect_url

    async def resolve_canonical_url(self, template_url: str) -> str:
        """Returns the final URL after redirects, or "" when it can't be resolved."""
        try:
            response = await self.client.head(template_url, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.warning("Could not resolve %s: %s", template_url, e)
            return ""
        return str(response.url)

    async def resolve_movie(self, movie_id: str) -> str:
        return await self.resolve_canonical_url(f"{self.tmdb_redirect_url}/{movie_id}")


class Browser:
    """A service to open URLs and copy them to the clipboard."""
    def open(self, url: str) -> Tuple[bool, str]:
        try:
            opened = webbrowser.open(url)
        except (webbrowser.Error, OSError) as e:
            logger.warning("Failed to open browser for %s: %s", url, e)
            return False, f"Could not open {url}: {e}"
        if not opened:
            return False, f"No browser available to open {url}"
        return True, f"Opened {url}"

    def copy(self, text: str) -> Tuple[bool, str]:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            logger.warning("Clipboard unavailable: %s", e)
            return False, f"Clipboard unavailable: {e}"
        return True, f"Copied {text}"
