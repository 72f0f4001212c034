"""
Request Schemas

Pydantic models validating request bodies before a route touches MongoDB.
Stored documents mirror these fields; collection names are the lowercase
model name:
- Artist -> "artist" collection
- Favorite -> "favorite" collection

Update models forbid unknown keys so a patch outside the allow-list is
rejected as a bad request.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional

from errors import ValidationError


class Role(str, Enum):
    ADMIN = "Admin"
    EDITOR = "Editor"
    VIEWER = "Viewer"


class Category(str, Enum):
    ARTIST = "artist"
    ALBUM = "album"
    TRACK = "track"


# Auth / users

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AddUserRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Role


class UpdatePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


# Catalog

class ArtistCreate(BaseModel):
    """
    Artists collection schema
    Collection name: "artist"
    """
    name: str = Field(..., min_length=1, description="Unique artist name")
    grammy: int = Field(..., ge=0, description="Number of grammies won")
    hidden: bool = Field(..., description="Hidden from public listings")


class ArtistUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1)
    grammy: Optional[int] = Field(None, ge=0)
    hidden: Optional[bool] = None


class AlbumCreate(BaseModel):
    """
    Albums collection schema
    Collection name: "album"
    """
    artist_id: str = Field(..., min_length=1, description="Id of an existing artist")
    name: str = Field(..., min_length=1, description="Unique album name")
    year: int = Field(..., gt=0, description="Release year")
    hidden: bool = Field(..., description="Hidden from public listings")


class AlbumUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1)
    year: Optional[int] = Field(None, gt=0)
    hidden: Optional[bool] = None


class TrackCreate(BaseModel):
    """
    Tracks collection schema
    Collection name: "track"
    """
    artist_id: str = Field(..., min_length=1, description="Id of an existing artist")
    album_id: str = Field(..., min_length=1, description="Id of an existing album")
    name: str = Field(..., min_length=1, description="Track title")
    duration: int = Field(..., gt=0, description="Length in seconds")
    hidden: bool = Field(..., description="Hidden from public listings")


class TrackUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1)
    duration: Optional[int] = Field(None, gt=0)
    hidden: Optional[bool] = None


class FavoriteCreate(BaseModel):
    """
    Favorites collection schema
    Collection name: "favorite"

    One document per bookmarked item, shared by every user holding it.
    """
    item_id: str = Field(..., min_length=1, description="Id of the artist, album or track")
    category: Category


def patch_fields(payload: BaseModel) -> dict:
    """Fields actually sent in an update body; empty or null-valued patches are rejected."""
    changes = payload.model_dump(exclude_unset=True)
    if not changes or any(value is None for value in changes.values()):
        raise ValidationError()
    return changes
