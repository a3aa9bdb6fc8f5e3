from __future__ import annotations
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from typing import TypedDict

from facecomposer.app.errors import DatabaseError

class MongoHandles(TypedDict):
    db: Database
    compositions: Collection

def connect_mongo(mongo_uri: str, db_name: str) -> MongoHandles:
    try:
        client = MongoClient(
            mongo_uri,
            serverSelectionTimeoutMS=30000,
            connectTimeoutMS=20000,
            socketTimeoutMS=20000,
        )
    except PyMongoError as e:
        raise DatabaseError(f"Could not connect to MongoDB: {e}") from e
    db = client[db_name]
    return {
        "db": db,
        "compositions": db["compositions"],
    }

def ensure_indexes(handles: MongoHandles) -> None:
    compositions = handles["compositions"]

    # _id is the composition name, already unique
    compositions.create_index([("created_at", -1)])
    compositions.create_index([("session_id", 1), ("created_at", -1)])
