# actions.py
from typing import Dict, Optional, Tuple

from models import ActionDefinition, Category

GENERAL_ACTIONS: Tuple[ActionDefinition, ...] = (
    ActionDefinition("Reviews", "reviews", "mdi:comment-text-multiple"),
    ActionDefinition("Lists", "lists", "mdi:format-list-bulleted"),
    ActionDefinition("Members", "members", "mdi:account-group"),
    ActionDefinition("Fans", "fans", "mdi:heart-multiple"),
    ActionDefinition("Likes", "likes", "mdi:heart"),
    ActionDefinition("Similar Films", "similar", "mdi:movie-open-star"),
)

FRIENDS_ACTIONS: Tuple[ActionDefinition, ...] = (
    ActionDefinition("Friends' Activity", "activity/by/friends", "mdi:account-multiple"),
    ActionDefinition("Friends' Reviews", "reviews/by/added", "mdi:account-multiple-check"),
    ActionDefinition("Friends' Lists", "lists/by/updated", "mdi:playlist-star"),
    ActionDefinition("Friends' Ratings", "members/rated", "mdi:star-circle"),
)

USER_ACTIONS: Tuple[ActionDefinition, ...] = (
    ActionDefinition("My Activity", "activity", "mdi:account-clock"),
    ActionDefinition("My Diary", "diary", "mdi:notebook"),
    ActionDefinition("My Review", "review", "mdi:pencil"),
)

SPECIAL_ACTIONS: Tuple[ActionDefinition, ...] = (
    ActionDefinition("Open on Letterboxd", "open", "mdi:open-in-new"),
    ActionDefinition("Copy Letterboxd Link", "copy-link", "mdi:content-copy"),
    ActionDefinition("Settings", "settings", "mdi:cog"),
)

_CATALOG: Dict[Category, Tuple[ActionDefinition, ...]] = {
    Category.GENERAL: GENERAL_ACTIONS,
    Category.FRIENDS: FRIENDS_ACTIONS,
    Category.USER: USER_ACTIONS,
    Category.SPECIAL: SPECIAL_ACTIONS,
}

# Special actions that do not need a highlighted movie.
PROMPT_ACTIONS: Tuple[ActionDefinition, ...] = tuple(
    a for a in SPECIAL_ACTIONS if a.value == "settings"
)


def list_actions(category: Category) -> Tuple[ActionDefinition, ...]:
    return _CATALOG[category]


def category_of(value: str) -> Optional[Category]:
    """Returns the category whose action set contains `value`, or None."""
    for category, actions in _CATALOG.items():
        if any(action.value == value for action in actions):
            return category
    return None


def actions_for(identity: str) -> Tuple[ActionDefinition, ...]:
    """Builds an item's action list; user-scoped actions need an identity."""
    actions = GENERAL_ACTIONS
    if identity:
        actions = actions + FRIENDS_ACTIONS + USER_ACTIONS
    return actions + SPECIAL_ACTIONS
