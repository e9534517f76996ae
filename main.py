# main.py
import argparse
import logging
from typing import Optional, Sequence

import httpx
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.logging import TextualHandler
from textual.reactive import reactive
from textual.widgets import Footer, Header

from config import Config
from controller import (DispatchController, SearchController, SessionContext,
                        SettingsFlow)
from models import AppState, ListEntry, SettingsForm
from services import (Browser, IdentityStore, KeyValueStore,
                      MovieSearchService, UrlResolver)
from ui import (ActionMenu, DetailsPane, LogPane, ResultsDisplay,
                SearchControls, SettingsScreen)

class LetterboxdSearchApp(App):
    BINDINGS = [
        ("q", "quit", "Quit"),
        ("a", "show_actions", "Actions"),
        ("c", "copy_link", "Copy Link"),
        ("s", "settings", "Settings"),
    ]
    CSS_PATH = "letterboxd_search.css"
    TITLE = "Letterboxd Search"

    app_state = reactive(AppState(), always_update=True)

    def __init__(self, search_service: MovieSearchService, resolver: UrlResolver, identity: IdentityStore,
                 browser: Browser, config: Config, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__()
        self.config = config
        self.http_client = http_client
        self.session = SessionContext(identity, self)
        self.search_controller = SearchController(self.session, search_service)
        self.settings_flow = SettingsFlow(self.session)
        self.dispatch_controller = DispatchController(self.session, resolver, browser, self.settings_flow)
        self.log_pane: Optional[LogPane] = None
        self.results_display: Optional[ResultsDisplay] = None
        self.details_pane: Optional[DetailsPane] = None
        self.search_controls: Optional[SearchControls] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="main-container"):
            with Horizontal(id="app-grid"):
                with Vertical(id="left-pane"):
                    yield SearchControls()
                    yield ResultsDisplay(id="results-table")
                with Vertical(id="right-pane"):
                    yield DetailsPane(id="details-pane")
            yield LogPane(id="log", wrap=True, highlight=True, markup=True)
        yield Footer()

    def on_mount(self) -> None:
        self.log_pane = self.query_one(LogPane)
        self.results_display = self.query_one(ResultsDisplay)
        self.details_pane = self.query_one(DetailsPane)
        self.search_controls = self.query_one(SearchControls)
        self.search_controller.load()
        self.search_controls.query_one("#search-input").focus()

    async def on_unmount(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()

    def watch_app_state(self, old_state: AppState, new_state: AppState) -> None:
        if self.results_display is None or self.details_pane is None:
            return
        if old_state.entries != new_state.entries:
            self.results_display.update_entries(new_state.entries)
        self.details_pane.update_details(new_state.selected)

    # --- View ---
    def show_entries(self, entries: Sequence[ListEntry]) -> None:
        self.app_state = AppState(entries=tuple(entries))

    def show_form(self, form: SettingsForm) -> None:
        self.push_screen(SettingsScreen(form))

    def set_search_term(self, text: str) -> None:
        if self.search_controls is not None and not text:
            self.search_controls.clear()

    def go_back(self) -> None:
        if isinstance(self.screen, SettingsScreen):
            self.pop_screen()

    def add_log(self, message: str) -> None:
        if self.log_pane is not None:
            self.log_pane.add_message(message)

    # --- Actions ---
    def action_show_actions(self) -> None:
        entry = self.app_state.selected
        if entry is None or not entry.actions:
            self.add_log("[yellow]⚠️ Nothing selected.[/yellow]")
            return
        self.push_screen(ActionMenu(entry), self.handle_action_choice)

    def handle_action_choice(self, value: Optional[str]) -> None:
        if value:
            self.run_worker(self.dispatch_controller.on_action_selected(value), group="dispatch")

    def action_copy_link(self) -> None:
        self.run_worker(self.dispatch_controller.on_action_selected("copy-link"), group="dispatch")

    def action_settings(self) -> None:
        self.run_worker(self.dispatch_controller.on_action_selected("settings"), group="dispatch")

    # --- Message Handlers ---
    def on_search_controls_query_changed(self, message: SearchControls.QueryChanged) -> None:
        self.search_controller.on_query_change(message.query)

    def on_search_controls_search_requested(self, message: SearchControls.SearchRequested) -> None:
        self.workers.cancel_group(self, "search_worker")
        self.run_worker(self.search_controller.submit(), group="search_worker", exclusive=True)

    def on_results_display_entry_highlighted(self, message: ResultsDisplay.EntryHighlighted) -> None:
        self.dispatch_controller.on_highlight(message.key)
        selected = next((e for e in self.app_state.entries if e.key == message.key), None)
        self.app_state = AppState(entries=self.app_state.entries, selected=selected)

    def on_results_display_entry_selected(self, message: ResultsDisplay.EntrySelected) -> None:
        self.run_worker(self.dispatch_controller.on_item_activated(message.key), group="dispatch")

    def on_settings_screen_submitted(self, message: SettingsScreen.Submitted) -> None:
        self.run_worker(self.settings_flow.submit(message.username, message.clear), group="settings")


def build_app(app_config: Config, store: KeyValueStore) -> LetterboxdSearchApp:
    client = httpx.AsyncClient(
        timeout=app_config.REQUEST_TIMEOUT,
        headers={"User-Agent": app_config.USER_AGENT},
    )
    search_service = MovieSearchService(
        client, app_config.SEARCH_ENDPOINT, app_config.POSTER_BASE_URL, app_config.DISPLAY_BUDGET
    )
    resolver = UrlResolver(client, app_config.TMDB_REDIRECT_URL)
    identity = IdentityStore(store, app_config.USERNAME_KEY)
    return LetterboxdSearchApp(search_service, resolver, identity, Browser(), app_config, http_client=client)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    defaults = Config()
    parser = argparse.ArgumentParser(description="Search for a movie and open its Letterboxd pages.")
    parser.add_argument("--db", default=defaults.DATABASE_FILENAME,
                        help=f"SQLite file holding settings (default: {defaults.DATABASE_FILENAME}).")
    parser.add_argument("--search-endpoint", default=defaults.SEARCH_ENDPOINT,
                        help="TMDB search proxy URL.")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Level for diagnostics sent to the Textual devtools console.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, handlers=[TextualHandler()])

    app_config = Config(DATABASE_FILENAME=args.db, SEARCH_ENDPOINT=args.search_endpoint)
    store = KeyValueStore(app_config.DATABASE_FILENAME)
    app = build_app(app_config, store)

    try:
        app.run()
    finally:
        store.close()


if __name__ == "__main__":
    main()
