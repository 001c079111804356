"""
Database Schemas

Each Pydantic model describes a document in MongoDB:
- Product -> "produits" collection
- User -> "users" collection
"""
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Literal, Optional

from bson import ObjectId
from pydantic import AfterValidator, BaseModel, EmailStr, Field


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_object_id(value: str) -> str:
    if not ObjectId.is_valid(value):
        raise ValueError("userId must be a valid ObjectId")
    return value


# BSON stores integers as signed 64-bit.
INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1

ObjectIdStr = Annotated[str, AfterValidator(_check_object_id)]
ProductId = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]


class Product(BaseModel):
    """
    Products collection schema
    ``id`` is assigned by the client and is unique across the collection.
    """
    id: ProductId = Field(..., description="Application id (unique)")
    image: str
    title: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    description: str
    price: float = Field(..., ge=0)
    categorie: str = Field(..., min_length=1)
    datePoster: str = Field(default_factory=_now, description="Post date, defaults to now")
    userId: Optional[ObjectIdStr] = Field(None, description="ObjectId of the owning user")

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(exclude_none=True)
        if "userId" in doc:
            doc["userId"] = ObjectId(doc["userId"])
        return doc


class ProductUpdate(BaseModel):
    """Fields a PUT may change; anything left out keeps its stored value."""
    id: Optional[ProductId] = None
    image: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    categorie: Optional[str] = Field(None, min_length=1)
    datePoster: Optional[str] = None
    userId: Optional[ObjectIdStr] = None

    def to_update(self) -> Dict[str, Any]:
        changes = self.model_dump(exclude_unset=True, exclude_none=True)
        if "userId" in changes:
            changes["userId"] = ObjectId(changes["userId"])
        return changes


class User(BaseModel):
    """
    Users collection schema
    Passwords are stored as given; accounts are provisioned outside the API.
    """
    email: EmailStr = Field(..., description="Email address (unique)")
    password: str
    role: Literal["seller", "admin"]
    adminKey: Optional[str] = Field(None, description="Only set on admin accounts")
