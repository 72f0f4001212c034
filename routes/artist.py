from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pymongo.database import Database

from auth import get_current_user, require_admin, require_editor_or_admin
from database import (
    ARTISTS,
    create_document,
    delete_favorite_for_item,
    find_by_id,
    get_db,
    get_documents,
    update_document,
)
from errors import ConflictError, NotFoundError
from logger import CustomLogger
from responses import envelope
from schemas import ArtistCreate, ArtistUpdate, patch_fields

console = CustomLogger()
router = APIRouter(prefix="/artists", tags=["Artists"])


def serialize_artist(artist: dict) -> dict:
    return {
        "artist_id": str(artist["_id"]),
        "name": artist["name"],
        "grammy": artist["grammy"],
        "hidden": artist["hidden"],
    }


@router.get("")
def get_artists(
    limit: int = Query(5, ge=0),
    offset: int = Query(0, ge=0),
    grammy: Optional[int] = None,
    hidden: Optional[bool] = None,
    _: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    query = {}
    if grammy is not None:
        query["grammy"] = grammy
    if hidden is not None:
        query["hidden"] = hidden

    artists = get_documents(db, ARTISTS, query, limit=limit, offset=offset)
    return envelope(
        status.HTTP_200_OK,
        data=[serialize_artist(a) for a in artists],
        message="Artists retrieved successfully.",
    )


@router.get("/{artist_id}")
def get_artist(artist_id: str, _: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    artist = find_by_id(db, ARTISTS, artist_id)
    if not artist:
        raise NotFoundError("Artist not found")
    return envelope(status.HTTP_200_OK, data=serialize_artist(artist), message="Artist retrieved successfully.")


@router.post("/add-artist", status_code=status.HTTP_201_CREATED)
def add_artist(payload: ArtistCreate, _: dict = Depends(require_admin), db: Database = Depends(get_db)):
    if db[ARTISTS].find_one({"name": payload.name}):
        raise ConflictError("Artist already exists.")

    artist_id = create_document(db, ARTISTS, payload.model_dump())
    console.log(f"Artist '{payload.name}' created ({artist_id})")

    return envelope(
        status.HTTP_201_CREATED,
        data={"artist_id": str(artist_id)},
        message="Artist created successfully.",
    )


@router.put("/{artist_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_artist(
    artist_id: str,
    payload: ArtistUpdate,
    _: dict = Depends(require_editor_or_admin),
    db: Database = Depends(get_db),
):
    changes = patch_fields(payload)

    artist = find_by_id(db, ARTISTS, artist_id)
    if not artist:
        raise NotFoundError("Artist not found.")

    if "name" in changes and db[ARTISTS].find_one({"name": changes["name"], "_id": {"$ne": artist["_id"]}}):
        raise ConflictError("Artist already exists.")

    update_document(db, ARTISTS, artist["_id"], changes)
    console.log(f"Artist {artist_id} updated: {sorted(changes)}")

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{artist_id}")
def delete_artist(artist_id: str, _: dict = Depends(require_editor_or_admin), db: Database = Depends(get_db)):
    artist = find_by_id(db, ARTISTS, artist_id)
    if not artist:
        raise NotFoundError("Artist not found.")

    delete_favorite_for_item(db, artist["_id"])
    db[ARTISTS].delete_one({"_id": artist["_id"]})
    console.log(f"Artist '{artist['name']}' deleted")

    return envelope(
        status.HTTP_200_OK,
        data={"artist_id": artist_id},
        message=f"Artist:{artist['name']} deleted successfully.",
    )
