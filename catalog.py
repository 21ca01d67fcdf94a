"""Read-only queries against the ``movies`` collection."""

import logging
from typing import Any, Dict, List

from pymongo.database import Database
from pymongo.errors import PyMongoError

from database import MOVIES, get_documents, to_str_id
from errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)


class MovieCatalog:
    def __init__(self, db: Database):
        self.db = db
        self.collection = db[MOVIES]

    def _find_one(self, query: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return self.collection.find_one(query)
        except PyMongoError as e:
            logger.exception("Movie lookup failed for %s", query)
            raise StorageError() from e

    def list_movies(self) -> List[Dict[str, Any]]:
        try:
            movies = get_documents(self.db, MOVIES)
        except PyMongoError as e:
            logger.exception("Failed to list movies")
            raise StorageError() from e
        return [to_str_id(m) for m in movies]

    def get_by_title(self, title: str) -> Dict[str, Any]:
        movie = self._find_one({"title": title})
        if not movie:
            raise NotFoundError(f"Movie {title} was not found.")
        return to_str_id(movie)

    def get_genre(self, name: str) -> Dict[str, Any]:
        movie = self._find_one({"genre.name": name})
        if not movie:
            raise NotFoundError(f"Genre {name} was not found.")
        return movie["genre"]

    def get_director(self, name: str) -> Dict[str, Any]:
        movie = self._find_one({"director.name": name})
        if not movie:
            raise NotFoundError(f"Director {name} was not found.")
        return movie["director"]
