"""
Password digests, bearer tokens and the request guard.

Tokens are stateless JWTs: validity depends only on the signature and the
expiry claim. There is no revocation list, so logging out means the client
discards its token; a leaked token stays valid until it expires.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from errors import (
    AuthError,
    TokenExpired,
    TokenMalformed,
    TokenSignatureInvalid,
    Unauthorized,
)

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class CredentialStore:
    """Salted bcrypt digests. Each call to hash() uses a fresh salt."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, digest: Optional[str]) -> bool:
        if not digest:
            return False
        try:
            return self._context.verify(plaintext, digest)
        except (ValueError, TypeError):
            # unrecognised or corrupt digest
            return False


class TokenService:
    def __init__(self, secret: str, algorithm: str = "HS256", expires_in: int = 86400):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in

    def issue(self, subject: str, now: Optional[datetime] = None) -> str:
        """Create a signed JWT for the given username."""
        now = now or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": subject,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=self.expires_in)).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def validate(self, token: str) -> str:
        """Check signature and expiry and return the subject claim."""
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired()
        except jwt.InvalidSignatureError:
            raise TokenSignatureInvalid()
        except jwt.InvalidTokenError:
            raise TokenMalformed()
        subject = payload["sub"]
        if not isinstance(subject, str) or not subject:
            raise TokenMalformed()
        return subject


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def require_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """FastAPI dependency ensuring the request carries a valid bearer token.

    Returns the caller's username and records it on ``request.state``.
    """
    if credentials is None:
        raise Unauthorized()
    try:
        username = tokens.validate(credentials.credentials)
    except AuthError as exc:
        logger.debug("Rejected token on %s %s: %s", request.method, request.url.path, exc.message)
        raise Unauthorized(exc.message)
    request.state.username = username
    return username
