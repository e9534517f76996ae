# models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

PROMPT_KEY = "search"
GENERIC_MOVIE_ICON = "mdi:movie"


class Category(Enum):
    GENERAL = "general"
    FRIENDS = "friends"
    USER = "user"
    SPECIAL = "special"


@dataclass(frozen=True)
class ActionDefinition:
    """A selectable action: label, routing value and icon reference."""
    title: str
    value: str
    icon: str


@dataclass(frozen=True)
class MovieResult:
    """A single movie as returned by the metadata search."""
    id: str
    title: str
    release_year: str
    overview_snippet: str
    poster_url: str

    @property
    def display_title(self) -> str:
        if self.release_year:
            return f"{self.title} ({self.release_year})"
        return self.title

    @property
    def icon(self) -> str:
        return self.poster_url or GENERIC_MOVIE_ICON


@dataclass(frozen=True)
class ListEntry:
    """A renderable list item with the actions attached to it."""
    key: str
    title: str
    subtitle: str
    icon: str
    actions: Tuple[ActionDefinition, ...] = ()
    default_action: str = ""
    movie: Optional[MovieResult] = None

    @property
    def is_prompt(self) -> bool:
        return self.key == PROMPT_KEY


@dataclass(frozen=True)
class SettingsForm:
    """A renderable form for managing the Letterboxd username."""
    username_placeholder: str
    show_clear: bool
    username_label: str = "Letterboxd Username"
    username_description: str = (
        "Providing your Letterboxd username will enable additional actions "
        "like viewing your friends' reviews and lists."
    )
    clear_label: str = "Clear Letterboxd Username"
    clear_description: str = "Check this box to unset the Letterboxd username"


@dataclass
class SessionState:
    """Mutable per-session state owned by the controllers."""
    query: str = ""
    highlighted_id: str = ""


@dataclass(frozen=True)
class AppState:
    """A single object to hold what the screen is currently showing."""
    entries: Tuple[ListEntry, ...] = field(default_factory=tuple)
    selected: Optional[ListEntry] = None
