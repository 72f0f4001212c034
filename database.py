"""
Database access

Collection names follow the lowercase model name (User -> "user").
`db` is None until DATABASE_URL is configured; routes reach it through the
`get_db` dependency so tests can swap in another database.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

import config
from errors import InternalError
from logger import CustomLogger

console = CustomLogger()

USERS = "user"
ARTISTS = "artist"
ALBUMS = "album"
TRACKS = "track"
FAVORITES = "favorite"
BLACKLISTED_TOKENS = "blacklisted_token"

client: Optional[MongoClient] = None
db: Optional[Database] = None

if config.DATABASE_URL and config.DATABASE_NAME:
    client = MongoClient(config.DATABASE_URL, tz_aware=True)
    db = client[config.DATABASE_NAME]


def get_db() -> Database:
    if db is None:
        raise InternalError("Database not configured")
    return db


def ensure_indexes(database: Database) -> None:
    """Create the unique and TTL indexes the collections rely on."""
    database[USERS].create_index("email", unique=True)
    database[ARTISTS].create_index("name", unique=True)
    database[ALBUMS].create_index("name", unique=True)
    database[FAVORITES].create_index("item_id", unique=True)
    database[BLACKLISTED_TOKENS].create_index("token", unique=True)
    # MongoDB's TTL monitor drops each record once expiresAt has passed
    database[BLACKLISTED_TOKENS].create_index([("expiresAt", ASCENDING)], expireAfterSeconds=0)
    console.log("Database indexes ensured")


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id coming from a path or body; None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def find_by_id(database: Database, collection_name: str, value: Any) -> Optional[dict]:
    oid = to_object_id(value)
    if oid is None:
        return None
    return database[collection_name].find_one({"_id": oid})


def create_document(database: Database, collection_name: str, data: Dict[str, Any]) -> ObjectId:
    now = datetime.now(timezone.utc)
    doc = dict(data)
    doc.setdefault("created_at", now)
    doc.setdefault("updated_at", now)
    result = database[collection_name].insert_one(doc)
    return result.inserted_id


def get_documents(
    database: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[dict]:
    cursor = database[collection_name].find(filter_dict or {}).sort("_id", ASCENDING).skip(offset)
    if limit is not None:
        cursor = cursor.limit(limit)
    return list(cursor)


def update_document(database: Database, collection_name: str, oid: ObjectId, changes: Dict[str, Any]) -> None:
    changes = dict(changes)
    changes["updated_at"] = datetime.now(timezone.utc)
    database[collection_name].update_one({"_id": oid}, {"$set": changes})


def names_by_id(database: Database, collection_name: str, ids: List[ObjectId]) -> Dict[ObjectId, str]:
    """Resolve referenced ids to display names with a single $in query."""
    if not ids:
        return {}
    cursor = database[collection_name].find({"_id": {"$in": list(set(ids))}}, {"name": 1})
    return {doc["_id"]: doc.get("name") for doc in cursor}


def delete_favorite_for_item(database: Database, item_id: ObjectId) -> Optional[ObjectId]:
    """
    Drop the Favorite pointing at a deleted item and pull it from every user.

    The two writes are independent; a failure in between leaves the
    Favorite row behind with no user referencing it.
    """
    favorite = database[FAVORITES].find_one({"item_id": item_id})
    if not favorite:
        return None

    favorite_id = favorite["_id"]
    database[USERS].update_many(
        {"favorites": favorite_id},
        {"$pull": {"favorites": favorite_id}},
    )
    database[FAVORITES].delete_one({"_id": favorite_id})
    console.log(f"Favorite {favorite_id} removed along with item {item_id}")
    return favorite_id


def delete_unreferenced_favorites(database: Database, favorite_ids: List[ObjectId]) -> int:
    """Delete the given Favorite rows that no user holds anymore."""
    removed = 0
    for favorite_id in favorite_ids:
        if database[USERS].find_one({"favorites": favorite_id}, {"_id": 1}):
            continue
        removed += database[FAVORITES].delete_one({"_id": favorite_id}).deleted_count
    if removed:
        console.log(f"Deleted {removed} unreferenced favorite(s)")
    return removed
