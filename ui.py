# ui.py
from typing import Optional, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import (Button, Checkbox, DataTable, Input, Label,
                             Markdown, OptionList, RichLog, Static)
from textual.widgets.option_list import Option

from models import ListEntry, SettingsForm

class SearchControls(Static):
    """Widget for the search input and button."""
    class QueryChanged(Message):
        def __init__(self, query: str) -> None:
            self.query = query
            super().__init__()

    class SearchRequested(Message):
        pass

    def compose(self) -> ComposeResult:
        yield Label("Search for a movie:")
        yield Input(placeholder="Search for a movie...", id="search-input")
        yield Button("Search", variant="primary", id="search-button")

    def on_input_changed(self, event: Input.Changed) -> None:
        self.post_message(self.QueryChanged(event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.post_message(self.SearchRequested())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.post_message(self.SearchRequested())

    def clear(self) -> None:
        self.query_one(Input).value = ""


class DetailsPane(Static):
    """Widget to display details of the highlighted movie."""
    def on_mount(self) -> None:
        self.update_details(None)

    def update_details(self, entry: Optional[ListEntry]) -> None:
        if entry and entry.movie:
            movie = entry.movie
            poster = f"`{movie.poster_url}`" if movie.poster_url else "*No poster*"
            actions = ", ".join(a.title for a in entry.actions)
            content = f"## {entry.title}\n\n{entry.subtitle}\n\n- **TMDB id**: {movie.id}\n- **Poster**: {poster}\n- **Enter**: {entry.default_action}\n- **Actions**: {actions}"
        elif entry:
            content = f"## {entry.title}\n\n*{entry.subtitle}*"
        else:
            content = "## Details\n\n*Select a movie to see its details.*"
        self.query_one(Markdown).update(content)

    def compose(self) -> ComposeResult:
        yield Markdown()


class ResultsDisplay(DataTable):
    """Widget for the main results table."""
    class EntrySelected(Message):
        def __init__(self, key: str) -> None:
            self.key = key
            super().__init__()

    class EntryHighlighted(Message):
        def __init__(self, key: Optional[str]) -> None:
            self.key = key
            super().__init__()

    def on_mount(self) -> None:
        self.add_columns("Title", "Overview")
        self.cursor_type = "row"

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key.value:
            self.post_message(self.EntrySelected(event.row_key.value))

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self.post_message(self.EntryHighlighted(event.row_key.value))

    def update_entries(self, entries: Sequence[ListEntry]) -> None:
        self.clear()
        for e in entries:
            self.add_row(e.title, e.subtitle, key=e.key)
        self.focus()


class ActionMenu(ModalScreen[Optional[str]]):
    """Lists the actions of one entry; dismisses with the chosen value."""
    BINDINGS = [("escape", "close", "Close")]

    def __init__(self, entry: ListEntry) -> None:
        super().__init__()
        self.entry = entry

    def compose(self) -> ComposeResult:
        with Vertical(id="action-menu"):
            yield Label(Text(f"Actions for {self.entry.title}", style="bold"))
            yield OptionList(*[Option(a.title, id=a.value) for a in self.entry.actions])

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option.id)

    def action_close(self) -> None:
        self.dismiss(None)


class SettingsScreen(ModalScreen[None]):
    """The username settings form."""
    BINDINGS = [("escape", "close", "Close")]

    class Submitted(Message):
        def __init__(self, username: str, clear: bool) -> None:
            self.username = username
            self.clear = clear
            super().__init__()

    def __init__(self, form: SettingsForm) -> None:
        super().__init__()
        self.form = form

    def compose(self) -> ComposeResult:
        with Vertical(id="settings-form"):
            yield Label(self.form.username_label)
            yield Static(self.form.username_description, classes="description")
            yield Input(placeholder=self.form.username_placeholder, id="username")
            if self.form.show_clear:
                yield Checkbox(self.form.clear_label, value=False, id="clear-username")
                yield Static(self.form.clear_description, classes="description")
            with Horizontal(id="settings-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", id="cancel")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save":
            self.submit()
        else:
            self.dismiss(None)

    def submit(self) -> None:
        username = self.query_one("#username", Input).value
        clear = False
        if self.form.show_clear:
            clear = self.query_one("#clear-username", Checkbox).value
        self.post_message(self.Submitted(username, clear))

    def action_close(self) -> None:
        self.dismiss(None)


class LogPane(RichLog):
    """A dedicated widget for logging application events."""
    def add_message(self, message: str) -> None:
        self.write(message)
