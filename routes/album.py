from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pymongo.database import Database

from auth import get_current_user, require_admin, require_editor_or_admin
from database import (
    ALBUMS,
    ARTISTS,
    create_document,
    delete_favorite_for_item,
    find_by_id,
    get_db,
    get_documents,
    names_by_id,
    update_document,
)
from errors import ConflictError, NotFoundError
from logger import CustomLogger
from responses import envelope
from schemas import AlbumCreate, AlbumUpdate, patch_fields

console = CustomLogger()
router = APIRouter(prefix="/albums", tags=["Albums"])


def serialize_album(album: dict, artist_name: Optional[str]) -> dict:
    return {
        "album_id": str(album["_id"]),
        "artist_id": str(album["artist"]),
        "artist_name": artist_name,
        "name": album["name"],
        "year": album["year"],
        "hidden": album["hidden"],
    }


@router.get("")
def get_albums(
    limit: int = Query(5, ge=0),
    offset: int = Query(0, ge=0),
    artist_id: Optional[str] = None,
    hidden: Optional[bool] = None,
    _: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    query = {}
    if artist_id is not None:
        artist = find_by_id(db, ARTISTS, artist_id)
        if not artist:
            raise NotFoundError("Artist not found, not valid artist ID.")
        query["artist"] = artist["_id"]
    if hidden is not None:
        query["hidden"] = hidden

    albums = get_documents(db, ALBUMS, query, limit=limit, offset=offset)
    artist_names = names_by_id(db, ARTISTS, [a["artist"] for a in albums])

    return envelope(
        status.HTTP_200_OK,
        data=[serialize_album(a, artist_names.get(a["artist"])) for a in albums],
        message="Albums fetched successfully.",
    )


@router.get("/{album_id}")
def get_album(album_id: str, _: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    album = find_by_id(db, ALBUMS, album_id)
    if not album:
        raise NotFoundError("Album not found")

    artist = db[ARTISTS].find_one({"_id": album["artist"]}, {"name": 1})
    return envelope(
        status.HTTP_200_OK,
        data=serialize_album(album, artist["name"] if artist else None),
        message="Album fetched successfully.",
    )


@router.post("/add-album", status_code=status.HTTP_201_CREATED)
def add_album(payload: AlbumCreate, _: dict = Depends(require_admin), db: Database = Depends(get_db)):
    artist = find_by_id(db, ARTISTS, payload.artist_id)
    if not artist:
        raise NotFoundError("Artist not found.")

    if db[ALBUMS].find_one({"name": payload.name}):
        raise ConflictError("Album already exists.")

    album_id = create_document(db, ALBUMS, {
        "name": payload.name,
        "year": payload.year,
        "hidden": payload.hidden,
        "artist": artist["_id"],
    })
    console.log(f"Album '{payload.name}' created ({album_id})")

    return envelope(
        status.HTTP_201_CREATED,
        data={"album_id": str(album_id)},
        message="Album created successfully.",
    )


@router.put("/{album_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_album(
    album_id: str,
    payload: AlbumUpdate,
    _: dict = Depends(require_editor_or_admin),
    db: Database = Depends(get_db),
):
    changes = patch_fields(payload)

    album = find_by_id(db, ALBUMS, album_id)
    if not album:
        raise NotFoundError("Album not found.")

    if "name" in changes and db[ALBUMS].find_one({"name": changes["name"], "_id": {"$ne": album["_id"]}}):
        raise ConflictError("Album already exists.")

    update_document(db, ALBUMS, album["_id"], changes)
    console.log(f"Album {album_id} updated: {sorted(changes)}")

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{album_id}")
def delete_album(album_id: str, _: dict = Depends(require_editor_or_admin), db: Database = Depends(get_db)):
    album = find_by_id(db, ALBUMS, album_id)
    if not album:
        raise NotFoundError("Album not found.")

    delete_favorite_for_item(db, album["_id"])
    db[ALBUMS].delete_one({"_id": album["_id"]})
    console.log(f"Album '{album['name']}' deleted")

    return envelope(
        status.HTTP_200_OK,
        data={"album_id": album_id},
        message=f"Album:{album['name']} deleted successfully.",
    )
