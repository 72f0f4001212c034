from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.hash import bcrypt
from pymongo.database import Database

import config
from database import BLACKLISTED_TOKENS, USERS, find_by_id, get_db
from errors import AuthenticationError, AuthorizationError, StaleSessionError
from logger import CustomLogger
from schemas import Role

console = CustomLogger()

bearer_scheme = HTTPBearer(auto_error=False)


# Utility functions

def hash_password(password: str) -> str:
    return bcrypt.using(rounds=config.BCRYPT_ROUNDS).hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.verify(password, password_hash or "")
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry; raises AuthenticationError otherwise."""
    try:
        return jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError as e:
        console.debug(f"Rejected token: {e}")
        raise AuthenticationError()


# Dependencies

def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Database = Depends(get_db),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    token = credentials.credentials
    # Logged-out tokens stay here until the TTL index drops them at expiry
    if db[BLACKLISTED_TOKENS].find_one({"token": token}):
        console.debug("Rejected blacklisted token")
        raise AuthenticationError()
    return token


def get_token_claims(token: str = Depends(get_bearer_token)) -> dict:
    return decode_access_token(token)


def get_current_user(claims: dict = Depends(get_token_claims), db: Database = Depends(get_db)) -> dict:
    """
    Load the user behind the token on every request.

    The role used by the role checks comes from this document, not from
    the token claim, so a role change applies to the very next request.
    """
    user = find_by_id(db, USERS, claims.get("id"))
    if not user:
        raise StaleSessionError()
    return user


def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if user.get("role") != Role.ADMIN.value:
        raise AuthorizationError()
    return user


def require_editor_or_admin(user: dict = Depends(get_current_user)) -> dict:
    if user.get("role") not in (Role.EDITOR.value, Role.ADMIN.value):
        raise AuthorizationError()
    return user
