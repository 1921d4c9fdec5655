"""
Database helpers

MongoDB client caching for serverless runtimes. The client is created on
first use and reused by every later invocation handled by the same process.
"""

import logging
import os
import threading
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("MONGODB_URI")
DATABASE_NAME = os.getenv("MONGODB_DB", "poetry")
SERVER_SELECTION_TIMEOUT_MS = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))

if not DATABASE_URL:
    logger.error("MONGODB_URI environment variable is not set.")

_client: Optional[MongoClient] = None
_db: Optional[Database] = None
_lock = threading.Lock()


def get_db() -> Database:
    """Return the cached database handle, connecting on first call.

    A failed connection is not cached, so the next call tries again.
    """
    global _client, _db
    if _db is not None:
        return _db
    with _lock:
        if _db is not None:
            return _db
        if not DATABASE_URL:
            raise RuntimeError("MONGODB_URI not set in environment")
        logger.info("Creating new MongoDB connection")
        client = MongoClient(
            DATABASE_URL,
            serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
            tz_aware=True,
        )
        try:
            client.admin.command("ping")
        except Exception:
            logger.error("MongoDB connection failed")
            client.close()
            raise
        _client = client
        _db = client[DATABASE_NAME]
        return _db


def reset_db() -> None:
    """Close the cached client, if any, and forget it."""
    global _client, _db
    with _lock:
        if _client is not None:
            _client.close()
            logger.info("MongoDB connection closed")
        _client = None
        _db = None


def get_collection(collection_name: str):
    return get_db()[collection_name]


def create_document(collection_name: str, data: Dict[str, Any]) -> str:
    """Insert a document and return its new id as a string."""
    result = get_collection(collection_name).insert_one(dict(data))
    return str(result.inserted_id)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort_field: Optional[str] = None,
) -> List[dict]:
    """Fetch all matching documents, newest-first on ``sort_field`` if given."""
    cursor = get_collection(collection_name).find(filter_dict or {})
    if sort_field:
        cursor = cursor.sort(sort_field, DESCENDING)
    items = list(cursor)
    for it in items:
        it["_id"] = str(it["_id"])
    return items
