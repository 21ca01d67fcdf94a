"""
Database helpers

The MongoClient is opened once when the application starts and closed on
shutdown; components receive the Database handle rather than importing a
module-level connection.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)

USERS = "users"
MOVIES = "movies"


def connect(url: str, name: str, client: Optional[MongoClient] = None) -> Database:
    if client is None:
        client = MongoClient(url, tz_aware=True)
    db = client[name]
    logger.info("Using database %s", name)
    return db


def close(db: Database) -> None:
    db.client.close()
    logger.info("Database connection closed")


def ensure_indexes(db: Database) -> None:
    # Unique usernames; concurrent inserts/renames race on this index
    db[USERS].create_index([("username", ASCENDING)], unique=True)
    db[MOVIES].create_index([("title", ASCENDING)])
    db[MOVIES].create_index([("genre.name", ASCENDING)])
    db[MOVIES].create_index([("director.name", ASCENDING)])


def now() -> datetime:
    return datetime.now(timezone.utc)


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document stamped with created_at/updated_at and return its id."""
    if isinstance(data, BaseModel):
        doc = data.model_dump(mode="json")
    else:
        doc = dict(data)
    stamp = now()
    doc["created_at"] = stamp
    doc["updated_at"] = stamp
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(db: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  limit: Optional[int] = None) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def to_str_id(doc):
    if not doc:
        return doc
    d = dict(doc)
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d
