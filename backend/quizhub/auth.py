"""Authentication helpers and FastAPI security dependencies.

This module provides utilities to decode JWT tokens and the FastAPI
dependencies used by the routes:

- `get_current_user` requires a valid bearer token,
- `get_optional_user` returns `None` for anonymous requests,
- `require_roles(...)` additionally restricts access to given roles.

Token verification raises HTTPExceptions on failure so the helpers can be
used directly inside route dependencies.
"""

from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from . import models, repositories
from .config import settings
from .database import engine
from .schemas import Role

bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str):
    """Decode and verify a JWT token.

    Returns the decoded payload on success or raises an HTTPException
    with status 401 on failure.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail='token expired')
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail='invalid token')


def _user_from_token(token: str) -> models.User:
    payload = decode_token(token)
    user_id = payload.get('user_id')
    if not user_id:
        raise HTTPException(status_code=401, detail='invalid token payload')
    with Session(engine) as session:
        user = repositories.UserRepository(session).get(user_id)
        if not user:
            raise HTTPException(status_code=401, detail='user not found')
        return user


def get_current_user(credentials: HTTPAuthorizationCredentials = Security(bearer_scheme)) -> models.User:
    """FastAPI dependency that returns the authenticated user.

    The role is read from the database, not from the token, so role
    changes apply to tokens issued before them.
    """
    return _user_from_token(credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_bearer_scheme),
) -> Optional[models.User]:
    """Like `get_current_user` but anonymous requests yield `None`.

    A token that is present but invalid is still rejected with 401.
    """
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials)


def require_roles(*roles: Role):
    """Build a dependency that admits only users holding one of `roles`."""
    allowed = {r.value for r in roles}

    def dependency(user: models.User = Depends(get_current_user)) -> models.User:
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail='insufficient role')
        return user

    return dependency


require_author = require_roles(Role.ADMIN, Role.TEACHER)
require_admin = require_roles(Role.ADMIN)
