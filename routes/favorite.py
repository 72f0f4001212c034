from fastapi import APIRouter, Depends, Query, status
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from auth import get_current_user
from database import (
    ALBUMS,
    ARTISTS,
    FAVORITES,
    TRACKS,
    USERS,
    create_document,
    delete_unreferenced_favorites,
    find_by_id,
    get_db,
)
from errors import NotFoundError, ValidationError
from logger import CustomLogger
from responses import envelope
from schemas import Category, FavoriteCreate

console = CustomLogger()
router = APIRouter(prefix="/favorites", tags=["Favorites"])

CATEGORY_COLLECTIONS = {
    Category.ARTIST: ARTISTS,
    Category.ALBUM: ALBUMS,
    Category.TRACK: TRACKS,
}


def serialize_favorite(favorite: dict) -> dict:
    return {
        "favorite_id": str(favorite["_id"]),
        "category": favorite["category"],
        "item_id": str(favorite["item_id"]),
        "name": favorite["name"],
        "created_at": favorite.get("created_at"),
    }


@router.get("/{category}")
def get_favorites(
    category: Category,
    limit: int = Query(5, ge=0),
    offset: int = Query(0, ge=0),
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    favorite_ids = user.get("favorites", [])
    found = {
        f["_id"]: f
        for f in db[FAVORITES].find({"_id": {"$in": favorite_ids}, "category": category.value})
    }
    # Keep the order in which the user added them
    ordered = [found[fid] for fid in favorite_ids if fid in found]
    # limit=0 means no limit, as with cursor.limit()
    page = ordered[offset:offset + limit] if limit else ordered[offset:]

    return envelope(
        status.HTTP_200_OK,
        data=[serialize_favorite(f) for f in page],
        message="Favorites retrieved successfully.",
    )


@router.post("/add-favorite", status_code=status.HTTP_201_CREATED)
def add_favorite(payload: FavoriteCreate, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    item = find_by_id(db, CATEGORY_COLLECTIONS[payload.category], payload.item_id)
    if not item:
        raise NotFoundError("Item not found in this category.")

    favorite = db[FAVORITES].find_one({"item_id": item["_id"]})
    if favorite and favorite["_id"] in user.get("favorites", []):
        raise ValidationError("The given item is already present in the favorite")

    if not favorite:
        try:
            # The name is a snapshot taken now and never refreshed
            favorite_id = create_document(db, FAVORITES, {
                "item_id": item["_id"],
                "category": payload.category.value,
                "name": item["name"],
            })
        except DuplicateKeyError:
            # Another request created it first; share that one
            favorite_id = db[FAVORITES].find_one({"item_id": item["_id"]})["_id"]
    else:
        favorite_id = favorite["_id"]

    db[USERS].update_one({"_id": user["_id"]}, {"$addToSet": {"favorites": favorite_id}})
    console.log(f"{user['email']} added {payload.category.value} {item['_id']} to favorites")

    return envelope(
        status.HTTP_201_CREATED,
        data={"favorite_id": str(favorite_id)},
        message="Favorite added successfully.",
    )


@router.delete("/remove-favorite/{favorite_id}")
def remove_favorite(favorite_id: str, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    favorite = find_by_id(db, FAVORITES, favorite_id)
    if not favorite:
        raise NotFoundError("Favorite not found.")

    db[USERS].update_one({"_id": user["_id"]}, {"$pull": {"favorites": favorite["_id"]}})
    # Other users keep the shared row; it goes once nobody holds it
    delete_unreferenced_favorites(db, [favorite["_id"]])
    console.log(f"{user['email']} removed favorite {favorite_id}")

    return envelope(status.HTTP_200_OK, data={"favorite_id": favorite_id}, message="Favorite removed successfully")
