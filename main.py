import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo import MongoClient

import database
from catalog import MovieCatalog
from errors import AppError, AuthError, NotFoundError
from favorites import FavoritesManager
from schemas import AuthResponse, Director, Genre, LoginRequest, Movie, UserCreate, UserOut, UserUpdate
from security import CredentialStore, TokenService, get_token_service, require_user
from settings import Settings
from users import UserDirectory

logger = logging.getLogger(__name__)

WELCOME = (
    "Welcome to the 90s Movies API. Please check /docs for a description "
    "of how to use the API. Enjoy!"
)


def create_app(settings: Optional[Settings] = None, mongo_client: Optional[MongoClient] = None) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database.connect(settings.database_url, settings.database_name, client=mongo_client)
        database.ensure_indexes(db)
        users = UserDirectory(db, CredentialStore(rounds=settings.bcrypt_rounds))
        app.state.db = db
        app.state.tokens = TokenService(settings.jwt_secret, settings.jwt_algorithm, settings.jwt_expires_in)
        app.state.users = users
        app.state.favorites = FavoritesManager(users)
        app.state.catalog = MovieCatalog(db)
        logger.info("90s Movies API started")
        yield
        database.close(db)
        logger.info("90s Movies API stopped")

    app = FastAPI(title="90s Movies API", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = (time.perf_counter() - start) * 1000
        logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed)
        return response

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        return JSONResponse({"detail": exc.message}, status_code=exc.status_code, headers=headers)

    register_routes(app)
    return app


# Dependencies

def get_directory(request: Request) -> UserDirectory:
    return request.app.state.users


def get_favorites(request: Request) -> FavoritesManager:
    return request.app.state.favorites


def get_catalog(request: Request) -> MovieCatalog:
    return request.app.state.catalog


def register_routes(app: FastAPI) -> None:

    @app.get("/", response_class=PlainTextResponse)
    def read_root():
        return WELCOME

    @app.get("/health")
    def health(request: Request):
        response = {"backend": "running", "database": "unavailable", "collections": []}
        try:
            response["collections"] = request.app.state.db.list_collection_names()
            response["database"] = "connected"
        except Exception as e:
            logger.warning("Health check could not reach the database: %s", e)
        return response

    # Auth

    @app.post("/login", response_model=AuthResponse)
    def login(payload: LoginRequest,
              users: UserDirectory = Depends(get_directory),
              tokens: TokenService = Depends(get_token_service)):
        user = users.authenticate(payload.username, payload.password)
        return AuthResponse(token=tokens.issue(user["username"]), user=UserOut(**user))

    # Users

    @app.post("/users/add", response_model=UserOut)
    def register(payload: UserCreate, users: UserDirectory = Depends(get_directory)):
        return users.register(payload)

    @app.put("/user/{username}", response_model=UserOut)
    def update_user(username: str, payload: UserUpdate,
                    users: UserDirectory = Depends(get_directory),
                    _caller: str = Depends(require_user)):
        return users.update(username, payload)

    @app.delete("/users/delete/{username}", response_class=PlainTextResponse)
    def deregister(username: str,
                   users: UserDirectory = Depends(get_directory),
                   _caller: str = Depends(require_user)):
        try:
            users.remove(username)
        except NotFoundError:
            return PlainTextResponse(f"{username} was not found.", status_code=400)
        return f"{username} was deleted."

    # Favorites

    @app.post("/users/{username}/favMovies/{movie_id}", response_model=UserOut)
    def add_favorite(username: str, movie_id: str,
                     favorites: FavoritesManager = Depends(get_favorites),
                     _caller: str = Depends(require_user)):
        return favorites.add_favorite(username, movie_id)

    @app.delete("/users/{username}/Movies/{movie_id}", response_model=UserOut)
    def remove_favorite(username: str, movie_id: str,
                        favorites: FavoritesManager = Depends(get_favorites),
                        _caller: str = Depends(require_user)):
        return favorites.remove_favorite(username, movie_id)

    # Movies

    @app.get("/movies", response_model=List[Movie])
    def list_movies(catalog: MovieCatalog = Depends(get_catalog), _caller: str = Depends(require_user)):
        return catalog.list_movies()

    @app.get("/movies/{title}", response_model=Movie)
    def get_movie(title: str, catalog: MovieCatalog = Depends(get_catalog), _caller: str = Depends(require_user)):
        return catalog.get_by_title(title)

    @app.get("/genre/{name}", response_model=Genre)
    def get_genre(name: str, catalog: MovieCatalog = Depends(get_catalog), _caller: str = Depends(require_user)):
        return catalog.get_genre(name)

    @app.get("/directors/{name}", response_model=Director)
    def get_director(name: str, catalog: MovieCatalog = Depends(get_catalog), _caller: str = Depends(require_user)):
        return catalog.get_director(name)


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
