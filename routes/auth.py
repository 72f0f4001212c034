from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from pymongo.database import Database

import config
from auth import (
    create_access_token,
    get_bearer_token,
    get_current_user,
    get_token_claims,
    hash_password,
    verify_password,
)
from database import BLACKLISTED_TOKENS, USERS, create_document, get_db
from errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from logger import CustomLogger
from responses import envelope
from schemas import LoginRequest, Role, SignupRequest

console = CustomLogger()
router = APIRouter(tags=["Auth"])


def check_password_length(password: str) -> None:
    if len(password) < config.MIN_PASSWORD_LENGTH:
        raise ValidationError("Password length can't be less than 4")


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Database = Depends(get_db)):
    if db[USERS].find_one({"email": payload.email}):
        raise ConflictError("Email already exists.")

    check_password_length(payload.password)

    # The very first account bootstraps the system as its Admin
    role = Role.ADMIN if db[USERS].count_documents({}) == 0 else Role.VIEWER

    user_id = create_document(db, USERS, {
        "email": payload.email,
        "password": hash_password(payload.password),
        "role": role.value,
        "favorites": [],
    })
    console.log(f"User {payload.email} signed up as {role.value}")

    return envelope(
        status.HTTP_201_CREATED,
        data={"user_id": str(user_id), "email": payload.email, "role": role.value},
        message="User created successfully.",
    )


@router.post("/login")
def login(payload: LoginRequest, db: Database = Depends(get_db)):
    user = db[USERS].find_one({"email": payload.email})
    if not user:
        raise NotFoundError("User not found.")

    if not verify_password(payload.password, user.get("password")):
        raise AuthenticationError("Invalid Password.")

    token = create_access_token({
        "email": user["email"],
        "id": str(user["_id"]),
        "role": user["role"],
    })
    return envelope(status.HTTP_200_OK, data={"token": token}, message="Login successful.")


@router.get("/logout")
def logout(
    _: dict = Depends(get_current_user),
    token: str = Depends(get_bearer_token),
    claims: dict = Depends(get_token_claims),
    db: Database = Depends(get_db),
):
    # Same expiry as the token itself, so the TTL index drops the entry
    # exactly when the token would have stopped working anyway
    expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
    create_document(db, BLACKLISTED_TOKENS, {"token": token, "expiresAt": expires_at})
    console.log(f"User {claims.get('email')} logged out")

    return envelope(status.HTTP_200_OK, message="User logged out successfully.")
