from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pymongo.database import Database

from auth import get_current_user, hash_password, require_admin, verify_password
from database import (
    USERS,
    create_document,
    delete_unreferenced_favorites,
    find_by_id,
    get_db,
    get_documents,
    update_document,
)
from errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from logger import CustomLogger
from responses import envelope
from routes.auth import check_password_length
from schemas import AddUserRequest, Role, UpdatePasswordRequest

console = CustomLogger()
router = APIRouter(prefix="/users", tags=["Users"])


def serialize_user(user: dict) -> dict:
    return {
        "user_id": str(user["_id"]),
        "email": user["email"],
        "role": user["role"],
        "created_at": user.get("created_at"),
    }


@router.get("")
def get_users(
    limit: int = Query(5, ge=0),
    offset: int = Query(0, ge=0),
    role: Optional[Role] = None,
    _: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    # Admins are only listed when asked for explicitly
    role_filter = role.value if role else {"$in": [Role.VIEWER.value, Role.EDITOR.value]}
    users = get_documents(db, USERS, {"role": role_filter}, limit=limit, offset=offset)

    return envelope(
        status.HTTP_200_OK,
        data=[serialize_user(user) for user in users],
        message="Users retrieved successfully.",
    )


@router.post("/add-user", status_code=status.HTTP_201_CREATED)
def add_user(payload: AddUserRequest, admin: dict = Depends(require_admin), db: Database = Depends(get_db)):
    if payload.role == Role.ADMIN:
        raise ValidationError("Bad Request, an Admin can't be added.")

    if db[USERS].find_one({"email": payload.email}):
        raise ConflictError("Email already exists.")

    check_password_length(payload.password)

    user_id = create_document(db, USERS, {
        "email": payload.email,
        "password": hash_password(payload.password),
        "role": payload.role.value,
        "favorites": [],
    })
    console.log(f"{admin['email']} added user {payload.email} as {payload.role.value}")

    return envelope(
        status.HTTP_201_CREATED,
        data={"user_id": str(user_id), "email": payload.email, "role": payload.role.value},
        message="User created successfully.",
    )


@router.put("/update-password", status_code=status.HTTP_204_NO_CONTENT)
def update_password(
    payload: UpdatePasswordRequest,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    check_password_length(payload.new_password)

    if not verify_password(payload.old_password, user.get("password")):
        raise AuthenticationError()

    update_document(db, USERS, user["_id"], {"password": hash_password(payload.new_password)})
    console.log(f"Password updated for {user['email']}")

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}")
def delete_user(user_id: str, admin: dict = Depends(require_admin), db: Database = Depends(get_db)):
    user = find_by_id(db, USERS, user_id)
    if not user:
        raise NotFoundError("User not found.")

    db[USERS].delete_one({"_id": user["_id"]})
    console.log(f"{admin['email']} deleted user {user['email']}")

    # Shared favorites this user was the last to hold go with them
    delete_unreferenced_favorites(db, user.get("favorites", []))

    return envelope(status.HTTP_200_OK, data={"user_id": user_id}, message="User deleted successfully.")
