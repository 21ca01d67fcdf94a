"""
Favorite-movie lists stored on the user document.

add_favorite appends unconditionally, so the same id can appear more than
once; remove_favorite pulls every occurrence. Movie ids are not checked
against the catalog.
"""

from typing import Any, Dict

from users import UserDirectory


class FavoritesManager:
    def __init__(self, directory: UserDirectory):
        self.directory = directory

    def add_favorite(self, username: str, movie_id: str) -> Dict[str, Any]:
        return self.directory.apply(username, {"$push": {"favoriteMovies": movie_id}})

    def remove_favorite(self, username: str, movie_id: str) -> Dict[str, Any]:
        return self.directory.apply(username, {"$pull": {"favoriteMovies": movie_id}})
