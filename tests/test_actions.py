import pytest

from actions import (FRIENDS_ACTIONS, GENERAL_ACTIONS, PROMPT_ACTIONS,
                     SPECIAL_ACTIONS, USER_ACTIONS, actions_for, category_of,
                     list_actions)
from models import Category


def test_every_value_maps_to_its_own_category():
    for category in Category:
        for action in list_actions(category):
            assert category_of(action.value) is category


def test_no_value_appears_twice():
    values = [a.value for category in Category for a in list_actions(category)]
    assert len(values) == len(set(values))


@pytest.mark.parametrize("value", ["", "unknown", "Reviews", "film"])
def test_unknown_value_has_no_category(value):
    assert category_of(value) is None


def test_actions_without_identity_skip_scoped_actions():
    actions = actions_for("")
    assert actions == GENERAL_ACTIONS + SPECIAL_ACTIONS
    assert not set(actions) & set(FRIENDS_ACTIONS + USER_ACTIONS)


def test_actions_with_identity_are_ordered():
    actions = actions_for("alice")
    assert actions == GENERAL_ACTIONS + FRIENDS_ACTIONS + USER_ACTIONS + SPECIAL_ACTIONS
    assert actions[-len(SPECIAL_ACTIONS):] == SPECIAL_ACTIONS


def test_prompt_only_offers_settings():
    assert [a.value for a in PROMPT_ACTIONS] == ["settings"]
