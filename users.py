"""
User directory: registration, profile updates, deregistration and login
lookups against the ``users`` collection.

Every mutation is a single find_one_and_update / find_one_and_delete call so
concurrent writes to the same user never lose one another.
"""

import logging
from typing import Any, Dict

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from database import USERS, create_document, now, to_str_id
from errors import ConflictError, InvalidCredentials, NotFoundError, StorageError
from schemas import User, UserCreate, UserUpdate
from security import CredentialStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"username", "password", "email"}


def _taken(username: str) -> ConflictError:
    return ConflictError(f"The username {username} already exists. Please choose another username.")


def _missing(username: str) -> NotFoundError:
    return NotFoundError(f"{username} was not found.")


class UserDirectory:
    def __init__(self, db: Database, credentials: CredentialStore):
        self.collection = db[USERS]
        self.db = db
        self.credentials = credentials
        # Compared against when the username is unknown so login timing
        # does not depend on whether the account exists.
        self._dummy_digest = credentials.hash("not-a-real-password")

    def find_by_username(self, username: str) -> Dict[str, Any]:
        try:
            user = self.collection.find_one({"username": username})
        except PyMongoError as e:
            logger.exception("Failed to look up user %s", username)
            raise StorageError() from e
        if not user:
            raise _missing(username)
        return to_str_id(user)

    def register(self, candidate: UserCreate) -> Dict[str, Any]:
        try:
            if self.collection.find_one({"username": candidate.username}, {"_id": 1}):
                raise _taken(candidate.username)
            user = User(
                username=candidate.username,
                password_hash=self.credentials.hash(candidate.password),
                email=candidate.email,
                birth_date=candidate.birth_date,
            )
            doc = user.model_dump(mode="json", by_alias=True, exclude={"created_at", "updated_at"})
            user_id = create_document(self.db, USERS, doc)
            created = self.collection.find_one({"_id": ObjectId(user_id)})
        except DuplicateKeyError as e:
            # lost a race with a concurrent registration
            raise _taken(candidate.username) from e
        except PyMongoError as e:
            logger.exception("Failed to register user %s", candidate.username)
            raise StorageError() from e
        logger.info("Registered user %s", candidate.username)
        return to_str_id(created)

    def apply(self, username: str, update: Dict[str, Any]) -> Dict[str, Any]:
        """Atomically apply a Mongo update document to one user and return the result."""
        update = dict(update)
        update.setdefault("$set", {})["updated_at"] = now()
        try:
            updated = self.collection.find_one_and_update(
                {"username": username},
                update,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            new_name = update.get("$set", {}).get("username", username)
            raise _taken(new_name) from e
        except PyMongoError as e:
            logger.exception("Failed to update user %s", username)
            raise StorageError() from e
        if updated is None:
            raise _missing(username)
        return to_str_id(updated)

    def update(self, username: str, changes: UserUpdate) -> Dict[str, Any]:
        fields = changes.model_dump(mode="json", by_alias=True, exclude_unset=True)
        # birthDate may be cleared with null; the other fields may not
        fields = {k: v for k, v in fields.items() if v is not None or k not in REQUIRED_FIELDS}
        if not fields:
            return self.find_by_username(username)
        password = fields.pop("password", None)
        if password is not None:
            fields["passwordHash"] = self.credentials.hash(password)
        return self.apply(username, {"$set": fields})

    def remove(self, username: str) -> None:
        try:
            deleted = self.collection.find_one_and_delete({"username": username}, projection={"_id": 1})
        except PyMongoError as e:
            logger.exception("Failed to delete user %s", username)
            raise StorageError() from e
        if deleted is None:
            raise _missing(username)
        logger.info("Deleted user %s", username)

    def authenticate(self, username: str, password: str) -> Dict[str, Any]:
        try:
            user = self.find_by_username(username)
        except NotFoundError:
            self.credentials.verify(password, self._dummy_digest)
            logger.info("Login failed for unknown user %s", username)
            raise InvalidCredentials()
        if not self.credentials.verify(password, user.get("passwordHash")):
            logger.info("Login failed for user %s", username)
            raise InvalidCredentials()
        return user
