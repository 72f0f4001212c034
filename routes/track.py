from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pymongo.database import Database

from auth import get_current_user, require_admin, require_editor_or_admin
from database import (
    ALBUMS,
    ARTISTS,
    TRACKS,
    create_document,
    delete_favorite_for_item,
    find_by_id,
    get_db,
    get_documents,
    names_by_id,
    update_document,
)
from errors import NotFoundError
from logger import CustomLogger
from responses import envelope
from schemas import TrackCreate, TrackUpdate, patch_fields

console = CustomLogger()
router = APIRouter(prefix="/tracks", tags=["Tracks"])


def serialize_track(track: dict, artist_name: Optional[str], album_name: Optional[str]) -> dict:
    return {
        "track_id": str(track["_id"]),
        "artist_id": str(track["artist"]),
        "album_id": str(track["album"]),
        "artist_name": artist_name,
        "album_name": album_name,
        "name": track["name"],
        "duration": track["duration"],
        "hidden": track["hidden"],
    }


@router.get("")
def get_tracks(
    limit: int = Query(5, ge=0),
    offset: int = Query(0, ge=0),
    artist_id: Optional[str] = None,
    album_id: Optional[str] = None,
    hidden: Optional[bool] = None,
    _: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    query = {}
    if artist_id is not None:
        artist = find_by_id(db, ARTISTS, artist_id)
        if not artist:
            raise NotFoundError("Artist not found.")
        query["artist"] = artist["_id"]
    if album_id is not None:
        album = find_by_id(db, ALBUMS, album_id)
        if not album:
            raise NotFoundError("Album not found.")
        query["album"] = album["_id"]
    if hidden is not None:
        query["hidden"] = hidden

    tracks = get_documents(db, TRACKS, query, limit=limit, offset=offset)
    artist_names = names_by_id(db, ARTISTS, [t["artist"] for t in tracks])
    album_names = names_by_id(db, ALBUMS, [t["album"] for t in tracks])

    return envelope(
        status.HTTP_200_OK,
        data=[
            serialize_track(t, artist_names.get(t["artist"]), album_names.get(t["album"]))
            for t in tracks
        ],
        message="Tracks retrieved successfully.",
    )


@router.get("/{track_id}")
def get_track(track_id: str, _: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    track = find_by_id(db, TRACKS, track_id)
    if not track:
        raise NotFoundError("Track not found")

    artist_names = names_by_id(db, ARTISTS, [track["artist"]])
    album_names = names_by_id(db, ALBUMS, [track["album"]])
    return envelope(
        status.HTTP_200_OK,
        data=serialize_track(track, artist_names.get(track["artist"]), album_names.get(track["album"])),
        message="Track fetched successfully.",
    )


@router.post("/add-track", status_code=status.HTTP_201_CREATED)
def add_track(payload: TrackCreate, _: dict = Depends(require_admin), db: Database = Depends(get_db)):
    # Artist is checked before album so the first missing reference is reported
    artist = find_by_id(db, ARTISTS, payload.artist_id)
    if not artist:
        raise NotFoundError("Artist not found.")

    album = find_by_id(db, ALBUMS, payload.album_id)
    if not album:
        raise NotFoundError("Album not found.")

    track_id = create_document(db, TRACKS, {
        "name": payload.name,
        "duration": payload.duration,
        "hidden": payload.hidden,
        "artist": artist["_id"],
        "album": album["_id"],
    })
    console.log(f"Track '{payload.name}' created ({track_id})")

    return envelope(
        status.HTTP_201_CREATED,
        data={"track_id": str(track_id)},
        message="Track created successfully.",
    )


@router.put("/{track_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_track(
    track_id: str,
    payload: TrackUpdate,
    _: dict = Depends(require_editor_or_admin),
    db: Database = Depends(get_db),
):
    changes = patch_fields(payload)

    track = find_by_id(db, TRACKS, track_id)
    if not track:
        raise NotFoundError("Track not found.")

    update_document(db, TRACKS, track["_id"], changes)
    console.log(f"Track {track_id} updated: {sorted(changes)}")

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{track_id}")
def delete_track(track_id: str, _: dict = Depends(require_editor_or_admin), db: Database = Depends(get_db)):
    track = find_by_id(db, TRACKS, track_id)
    if not track:
        raise NotFoundError("Track not found.")

    delete_favorite_for_item(db, track["_id"])
    db[TRACKS].delete_one({"_id": track["_id"]})
    console.log(f"Track '{track['name']}' deleted")

    return envelope(
        status.HTTP_200_OK,
        data={"track_id": track_id},
        message=f"Track:{track['name']} deleted successfully.",
    )
