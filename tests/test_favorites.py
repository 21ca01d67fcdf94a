"""
Tests for favorite-movie list mutations.
"""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from errors import NotFoundError


def test_add_appends(favorites, alice):
    user = favorites.add_favorite("alice1", "movie42")
    assert user["favoriteMovies"] == ["movie42"]


def test_double_add_then_remove_clears_every_occurrence(favorites, alice):
    favorites.add_favorite("alice1", "movie42")
    user = favorites.add_favorite("alice1", "movie42")
    assert user["favoriteMovies"] == ["movie42", "movie42"]

    user = favorites.remove_favorite("alice1", "movie42")
    assert "movie42" not in user["favoriteMovies"]


def test_remove_keeps_order_of_others(favorites, alice):
    for movie_id in ["m1", "m2", "m1", "m3"]:
        favorites.add_favorite("alice1", movie_id)
    user = favorites.remove_favorite("alice1", "m1")
    assert user["favoriteMovies"] == ["m2", "m3"]


def test_remove_absent_id_is_a_noop(favorites, alice):
    favorites.add_favorite("alice1", "m1")
    user = favorites.remove_favorite("alice1", "movie42")
    assert user["favoriteMovies"] == ["m1"]
    assert user["username"] == "alice1"


def test_unknown_movie_id_can_be_added(favorites, alice, db):
    assert db["movies"].count_documents({}) == 0
    assert favorites.add_favorite("alice1", "does-not-exist")["favoriteMovies"] == ["does-not-exist"]


@pytest.mark.parametrize("op", ["add_favorite", "remove_favorite"])
def test_unknown_user(favorites, op):
    with pytest.raises(NotFoundError):
        getattr(favorites, op)("ghost1", "movie42")


def test_mutations_go_through_directory(favorites, directory, alice):
    favorites.add_favorite("alice1", "movie42")
    assert directory.find_by_username("alice1")["favoriteMovies"] == ["movie42"]


def test_concurrent_adds_both_land(favorites, alice):
    with ThreadPoolExecutor(max_workers=2) as pool:
        list(pool.map(lambda movie_id: favorites.add_favorite("alice1", movie_id), ["movie42", "movie7"]))
    assert sorted(favorites.directory.find_by_username("alice1")["favoriteMovies"]) == ["movie42", "movie7"]


def test_add_is_a_single_round_trip(favorites, directory, alice):
    directory.collection = MagicMock(wraps=directory.collection)
    favorites.add_favorite("alice1", "movie42")
    favorites.remove_favorite("alice1", "movie7")
    assert directory.collection.find_one_and_update.call_count == 2
    directory.collection.find_one.assert_not_called()
