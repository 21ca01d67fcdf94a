"""
Database Schemas

Pydantic models for the MongoDB collections and for the request and
response bodies of the API.

Documents and JSON bodies use camelCase keys (imageUrl, birthDate,
favoriteMovies, ...); the Python attributes are snake_case aliases of them.

Collections:
- User -> "users" collection
- Movie -> "movies" collection
"""

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, EmailStr
from typing import Annotated, Optional, List
from datetime import date, datetime

USERNAME_PATTERN = r"^[A-Za-z0-9]+$"


def _as_date(value):
    # pymongo hands BSON dates back as datetimes
    if isinstance(value, datetime):
        return value.date()
    return value


MongoDate = Annotated[Optional[date], BeforeValidator(_as_date)]


class Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class User(Document):
    """
    Users collection schema
    Collection name: "users"
    """
    username: str = Field(..., description="Unique login name")
    password_hash: str = Field(..., alias="passwordHash", description="bcrypt digest, never the plaintext")
    email: EmailStr = Field(..., description="Email address")
    birth_date: MongoDate = Field(None, alias="birthDate")
    favorite_movies: List[str] = Field(default_factory=list, alias="favoriteMovies",
                                       description="Favorite movie ids, in insertion order")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Genre(Document):
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")


class Director(Document):
    name: str
    bio: Optional[str] = None
    birth_date: MongoDate = Field(None, alias="birthDate")
    birth_place: Optional[str] = Field(None, alias="birthPlace")
    image_url: Optional[str] = Field(None, alias="imageUrl")


class Movie(Document):
    """
    Movies collection schema
    Collection name: "movies"
    """
    id: Optional[str] = None
    title: str = Field(..., description="Movie title")
    description: Optional[str] = Field(None, description="Synopsis")
    genre: Optional[Genre] = None
    director: Optional[Director] = None
    image_url: Optional[str] = Field(None, alias="imageUrl", description="Poster image URL")
    featured: bool = Field(False, description="Whether to highlight on homepage")


# Request bodies

class UserCreate(Document):
    username: str = Field(..., min_length=5, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=1)
    email: EmailStr
    birth_date: Optional[date] = Field(None, alias="birthDate")


class UserUpdate(Document):
    """Profile changes; only the fields sent are validated and applied."""
    username: Optional[str] = Field(None, min_length=5, pattern=USERNAME_PATTERN)
    password: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    birth_date: Optional[date] = Field(None, alias="birthDate")


class LoginRequest(BaseModel):
    username: str
    password: str


# Responses

class UserOut(Document):
    id: Optional[str] = None
    username: str
    email: EmailStr
    birth_date: MongoDate = Field(None, alias="birthDate")
    favorite_movies: List[str] = Field(default_factory=list, alias="favoriteMovies")


class AuthResponse(BaseModel):
    token: str
    user: UserOut
