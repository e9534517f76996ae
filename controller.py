# controller.py
import logging
import sqlite3
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from actions import PROMPT_ACTIONS, actions_for, category_of
from links import FilmUrl
from models import (PROMPT_KEY, ActionDefinition, Category, ListEntry,
                    MovieResult, SessionState, SettingsForm)
from services import Browser, IdentityStore, MovieSearchService, UrlResolver

logger = logging.getLogger(__name__)

USERNAME_PLACEHOLDER = "Enter your Letterboxd username"


class View(Protocol):
    """What the controllers need from whatever draws the screen."""
    def show_entries(self, entries: Sequence[ListEntry]) -> None: ...
    def show_form(self, form: SettingsForm) -> None: ...
    def set_search_term(self, text: str) -> None: ...
    def go_back(self) -> None: ...
    def notify(self, message: str, *, severity: str = "information") -> None: ...
    def add_log(self, message: str) -> None: ...


class Mode(Enum):
    IDLE = "idle"
    RESULTS = "results"


class SessionContext:
    """Session state plus the collaborators every handler shares."""
    def __init__(self, identity: IdentityStore, view: View):
        self.state = SessionState()
        self.mode = Mode.IDLE
        self.identity = identity
        self.view = view

    def store_failed(self, error: sqlite3.Error) -> None:
        logger.error("Settings store failed: %s", error)
        self.view.notify(f"Could not access saved settings: {error}", severity="error")


def prompt_entry() -> ListEntry:
    return ListEntry(
        key=PROMPT_KEY,
        title="Search for a movie",
        subtitle="Type the name of the movie you want to search for in the search bar above",
        icon="mdi:movie-search",
        actions=PROMPT_ACTIONS,
        default_action="Search",
    )


def movie_entry(movie: MovieResult, actions: Sequence[ActionDefinition]) -> ListEntry:
    return ListEntry(
        key=movie.id,
        title=movie.display_title,
        subtitle=movie.overview_snippet,
        icon=movie.icon,
        actions=tuple(actions),
        default_action="Open on Letterboxd",
        movie=movie,
    )


class SearchController:
    """Turns the typed query into a rendered list of movies."""
    def __init__(self, context: SessionContext, search_service: MovieSearchService):
        self.context = context
        self.search_service = search_service
        self._token = 0

    def load(self) -> None:
        self.context.view.show_entries([prompt_entry()])
        self.context.mode = Mode.IDLE
        self.context.state.highlighted_id = ""

    def on_query_change(self, text: str) -> None:
        self.context.state.query = text

    async def submit(self) -> None:
        query = self.context.state.query.strip()
        if not query:
            return

        self._token += 1
        token = self._token
        view = self.context.view
        try:
            identity = await self.context.identity.get_identity()
        except sqlite3.Error as e:
            self.context.store_failed(e)
            return
        view.add_log(f"🔎 Searching for '{query}'...")

        results, error = await self.search_service.search(query)
        if token != self._token:
            logger.debug("Discarding stale results for %r", query)
            return
        if error:
            view.notify(error, severity="error")
            view.add_log(f"[red]❌ {error}[/red]")
            return

        actions = actions_for(identity)
        entries: List[ListEntry] = [movie_entry(movie, actions) for movie in results]
        view.show_entries(entries)
        self.context.mode = Mode.RESULTS
        self.context.state.highlighted_id = ""
        self.context.state.query = ""
        view.set_search_term("")

        if not entries:
            view.add_log(f"🤷 No movies found for '{query}'.")
        else:
            view.add_log(f"🎬 Found {len(entries)} movies for '{query}'.")


class SettingsFlow:
    """Builds and handles the username settings form."""
    def __init__(self, context: SessionContext):
        self.context = context

    async def open(self) -> None:
        try:
            identity = await self.context.identity.get_identity()
        except sqlite3.Error as e:
            self.context.store_failed(e)
            return
        self.context.view.show_form(SettingsForm(
            username_placeholder=identity or USERNAME_PLACEHOLDER,
            show_clear=bool(identity),
        ))

    async def submit(self, username: Optional[str], clear: bool) -> None:
        """Stores or clears the username; clearing wins when both are given."""
        view = self.context.view
        username = (username or "").strip()
        try:
            if clear:
                await self.context.identity.clear_identity()
                view.notify("Letterboxd username removed.")
            elif username:
                await self.context.identity.set_identity(username)
                view.notify(f"Letterboxd username set to {username}.")
        except sqlite3.Error as e:
            self.context.store_failed(e)
        view.go_back()


class DispatchController:
    """Tracks the highlighted movie and turns actions into navigation."""
    def __init__(self, context: SessionContext, resolver: UrlResolver, browser: Browser, settings: SettingsFlow):
        self.context = context
        self.resolver = resolver
        self.browser = browser
        self.settings = settings

    def on_highlight(self, key: Optional[str]) -> None:
        self.context.state.highlighted_id = "" if not key or key == PROMPT_KEY else key

    async def on_item_activated(self, key: Optional[str]) -> None:
        """Default action: open the film page of a result in an already rendered list."""
        if self.context.mode is not Mode.RESULTS:
            return
        if not key or key == PROMPT_KEY or self.context.state.query:
            return
        self.context.state.highlighted_id = key
        canonical = await self.resolver.resolve_movie(key)
        if canonical:
            self._navigate(canonical)
        else:
            logger.info("No Letterboxd page resolved for movie %s", key)

    async def on_action_selected(self, value: str) -> None:
        category = category_of(value)
        if category is None:
            logger.warning("Ignoring unknown action %r", value)
            return
        if category is Category.SPECIAL and value == "settings":
            await self.settings.open()
            return

        movie_id = self.context.state.highlighted_id
        if not movie_id:
            self.context.view.add_log("[yellow]⚠️ No movie selected.[/yellow]")
            return

        identity = ""
        if category in (Category.FRIENDS, Category.USER):
            try:
                identity = await self.context.identity.get_identity()
            except sqlite3.Error as e:
                self.context.store_failed(e)
                return
            if not identity:
                logger.info("Action %r needs a Letterboxd username", value)
                return

        canonical = await self.resolver.resolve_movie(movie_id)
        if not canonical:
            logger.info("No Letterboxd page resolved for movie %s", movie_id)
            return

        if category is Category.SPECIAL:
            if value == "copy-link":
                self._copy(canonical)
            else:
                self._navigate(canonical)
            return

        try:
            url = build_url(category, value, canonical, identity)
        except ValueError as e:
            logger.warning("Cannot build %s URL from %s: %s", category.value, canonical, e)
            self.context.view.notify(f"Unexpected Letterboxd URL: {canonical}", severity="warning")
            return
        self._navigate(url)

    def _navigate(self, url: str) -> None:
        success, message = self.browser.open(url)
        if success:
            self.context.view.add_log(f"[green]✅ {message}[/green]")
        else:
            self.context.view.notify(message, severity="warning")
            self.context.view.add_log(f"[red]❌ {message}[/red]")

    def _copy(self, url: str) -> None:
        success, message = self.browser.copy(url)
        if success:
            self.context.view.add_log(f"📋 {message}")
        else:
            self.context.view.notify(message, severity="warning")


def build_url(category: Category, value: str, canonical: str, identity: str = "") -> str:
    """Builds the destination URL for a movie-bound action."""
    if category is Category.GENERAL:
        return f"{canonical.rstrip('/')}/{value}"
    film = FilmUrl.parse(canonical)
    if category is Category.FRIENDS:
        return film.friends(identity, value)
    if category is Category.USER:
        return film.user(identity, value)
    raise ValueError(f"{category.value} actions do not build film URLs")
