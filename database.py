"""
MongoDB access helpers.

One ``MongoClient`` is opened per process (see the lifespan in ``main``)
and handlers receive the ``Database`` through the ``get_db`` dependency.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from fastapi import Request
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

PRODUCTS = "produits"
USERS = "users"

# (collection, field, index name, unique)
INDEXES = [
    (PRODUCTS, "id", "uniq_product_id", True),
    (PRODUCTS, "userId", "product_user", False),
    (USERS, "email", "uniq_user_email", True),
]


def connect(uri: str) -> MongoClient:
    logger.info("Connecting to MongoDB")
    return MongoClient(uri)


def ensure_indexes(db: Database) -> None:
    """Create the unique indexes backing product ids and user emails.

    Each index is attempted on its own; one that fails (for example
    over pre-existing duplicates) is logged by name and the rest are
    still created.
    """
    for collection_name, field_name, name, unique in INDEXES:
        try:
            db[collection_name].create_index([(field_name, ASCENDING)], unique=unique, name=name)
        except PyMongoError as exc:
            logger.warning("Unable to create index %s on %s: %s", name, collection_name, exc)


def get_db(request: Request) -> Database:
    return request.app.state.db


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    """Insert a document and return it with its ``_id``."""
    doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    result = db[collection_name].insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


def get_documents(db: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    return list(db[collection_name].find(filter_dict or {}))


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Make a stored document JSON friendly (ObjectIds become strings)."""
    out = dict(doc)
    for key, value in out.items():
        if isinstance(value, ObjectId):
            out[key] = str(value)
    return out
