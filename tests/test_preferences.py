"""File-locked favorites and recent searches."""

import pytest
from filelock import FileLock

from munchly.core.config import Settings
from munchly.errors import PreferencesUnavailable
from munchly.services.preferences import PreferencesStore


def test_toggle_favorite_restaurant(preferences):
    assert preferences.toggle_favorite_restaurant("rest_1") is True
    assert preferences.is_favorite_restaurant("rest_1")

    assert preferences.toggle_favorite_restaurant("rest_1") is False
    assert preferences.favorite_restaurant_ids() == []


def test_favorites_survive_a_new_store(preferences):
    preferences.toggle_favorite_restaurant("rest_2")
    preferences.toggle_favorite_menu_item("item_2_1")

    reopened = PreferencesStore(preferences.path)

    assert reopened.favorite_restaurant_ids() == ["rest_2"]
    assert reopened.is_favorite_menu_item("item_2_1")


def test_clear_favorites(preferences):
    preferences.toggle_favorite_restaurant("rest_1")
    preferences.toggle_favorite_menu_item("item_1_1")

    preferences.clear_favorites()

    document = preferences.load()
    assert document.favorite_restaurant_ids == []
    assert document.favorite_menu_item_ids == []


def test_recent_searches_dedupe_ignoring_case(preferences):
    preferences.add_recent_search("Pizza")
    preferences.add_recent_search("sushi")
    searches = preferences.add_recent_search("pizza")

    assert searches == ["pizza", "sushi"]


def test_recent_searches_are_capped(preferences):
    for i in range(12):
        preferences.add_recent_search(f"query {i}")

    searches = preferences.recent_searches()
    assert len(searches) == 10
    assert searches[0] == "query 11"
    assert searches[-1] == "query 2"


def test_blank_search_is_ignored(preferences):
    preferences.add_recent_search("tacos")

    assert preferences.add_recent_search("   ") == ["tacos"]


def test_remove_and_clear_searches(preferences):
    preferences.add_recent_search("tacos")
    preferences.add_recent_search("ramen")

    assert preferences.remove_recent_search("tacos") == ["ramen"]

    preferences.clear_recent_searches()
    assert preferences.recent_searches() == []


def test_corrupt_file_starts_fresh(preferences):
    preferences.path.parent.mkdir(parents=True, exist_ok=True)
    preferences.path.write_text("{not json", encoding="utf-8")

    assert preferences.recent_searches() == []
    assert preferences.toggle_favorite_restaurant("rest_1") is True


def test_held_lock_times_out(preferences):
    impatient = PreferencesStore(preferences.path, lock_timeout=0.05)
    impatient.path.parent.mkdir(parents=True, exist_ok=True)

    with FileLock(str(impatient.lock_path)):
        with pytest.raises(PreferencesUnavailable):
            impatient.toggle_favorite_restaurant("rest_1")


def test_store_from_settings(tmp_path):
    settings = Settings(_env_file=None, data_directory=str(tmp_path / "d"), recent_searches_limit=2)
    store = PreferencesStore.from_settings(settings)

    for query in ("a", "b", "c"):
        store.add_recent_search(query)

    assert store.path == tmp_path / "d" / "preferences.json"
    assert store.recent_searches() == ["c", "b"]
