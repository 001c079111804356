import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from config import settings
from database import PRODUCTS, USERS, connect, create_document, ensure_indexes, get_db, get_documents, serialize
from logging_config import setup_logging
from schemas import INT64_MAX, INT64_MIN, Product, ProductUpdate

logger = logging.getLogger(__name__)

ROLE_DESTINATIONS = {
    "admin": "/admin/dashboard",
    "seller": "/seller/dashboard",
}


class LoginRequest(BaseModel):
    email: str
    password: str


router = APIRouter()


# Utilities

def coerce_product_id(raw: str) -> Optional[int]:
    """Parse a path id the way clients send it ("7", "7.0", "1e1").

    Returns None for anything that is not a whole number BSON can store.
    """
    raw = raw.strip()
    try:
        value = int(raw)
    except ValueError:
        try:
            number = float(raw)
        except ValueError:
            return None
        if not number.is_integer():
            return None
        value = int(number)
    if not INT64_MIN <= value <= INT64_MAX:
        return None
    return value


def id_taken() -> HTTPException:
    return HTTPException(status_code=400, detail="id already exists")


def product_not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Product not found")


@router.get("/")
def read_root():
    return {"message": "Listings API ready"}


@router.get("/test")
def test_database(db: Database = Depends(get_db)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("MONGO_URI") or os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": db.name,
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        response["collections"] = db.list_collection_names()
        response["database"] = "✅ Connected"
        response["connection_status"] = "Connected"
    except PyMongoError as e:
        response["database"] = f"⚠️ {str(e)[:80]}"
    return response


# Products endpoints
@router.get("/products")
def list_products(db: Database = Depends(get_db)) -> List[dict]:
    return [serialize(d) for d in get_documents(db, PRODUCTS)]


@router.get("/produits/{product_id}")
def get_product(product_id: str, db: Database = Depends(get_db)):
    pid = coerce_product_id(product_id)
    if pid is None:
        raise HTTPException(status_code=400, detail="invalid id")
    doc = db[PRODUCTS].find_one({"id": pid})
    if not doc:
        raise product_not_found()
    return serialize(doc)


@router.post("/products", status_code=201)
def create_product(payload: Product, db: Database = Depends(get_db)):
    # The unique index on "id" catches inserts that race past this check.
    if db[PRODUCTS].find_one({"id": payload.id}):
        raise id_taken()
    try:
        doc = create_document(db, PRODUCTS, payload.to_document())
    except DuplicateKeyError:
        raise id_taken()
    logger.info("Product %s created", payload.id)
    return {"message": "Product added successfully", "product": serialize(doc)}


@router.put("/products/{product_id}")
def update_product(product_id: str, payload: ProductUpdate, db: Database = Depends(get_db)):
    pid = coerce_product_id(product_id)
    if pid is None:
        raise product_not_found()
    changes = payload.to_update()
    if not changes:
        doc = db[PRODUCTS].find_one({"id": pid})
    else:
        try:
            doc = db[PRODUCTS].find_one_and_update(
                {"id": pid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise id_taken()
    if not doc:
        raise product_not_found()
    logger.info("Product %s updated: %s", pid, ", ".join(sorted(changes)) or "no changes")
    return serialize(doc)


@router.delete("/products/{product_id}")
def delete_product(product_id: str, db: Database = Depends(get_db)):
    pid = coerce_product_id(product_id)
    if pid is None:
        raise product_not_found()
    if not db[PRODUCTS].find_one_and_delete({"id": pid}):
        raise product_not_found()
    logger.info("Product %s deleted", pid)
    return {"message": "Product deleted successfully"}


@router.get("/products/user/{user_id}")
def list_user_products(user_id: str, db: Database = Depends(get_db)) -> List[dict]:
    if not ObjectId.is_valid(user_id):
        raise HTTPException(status_code=400, detail="invalid user id")
    docs = get_documents(db, PRODUCTS, {"userId": ObjectId(user_id)})
    if not docs:
        raise HTTPException(status_code=404, detail="No products found for this user")
    return [serialize(d) for d in docs]


# Auth endpoint
@router.post("/login")
def login(payload: LoginRequest, db: Database = Depends(get_db)):
    user = db[USERS].find_one({"email": payload.email})
    if not user or user.get("password") != payload.password:
        logger.warning("Failed login for %s", payload.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    role = user.get("role")
    if role not in ROLE_DESTINATIONS:
        raise HTTPException(status_code=403, detail="Account role not permitted")
    return {
        "message": f"Welcome {role}",
        "role": role,
        "redirect": ROLE_DESTINATIONS[role],
        "user": {"_id": str(user["_id"]), "email": user["email"], "role": role},
    }


# Error mapping

def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        name = ".".join(loc) or "body"
        if name not in fields:
            fields.append(name)
    return JSONResponse(
        status_code=400,
        content={"detail": f"Missing or invalid fields: {', '.join(fields)}"},
    )


def store_error_handler(request: Request, exc: PyMongoError):
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the application.

    When ``database`` is given it is used as-is and never closed;
    otherwise a client for ``settings.mongo_uri`` is opened on startup
    and closed on shutdown.
    """
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = None
        if database is None:
            client = connect(settings.mongo_uri)
            app.state.db = client[settings.database_name]
        else:
            app.state.db = database
        ensure_indexes(app.state.db)
        yield
        if client is not None:
            client.close()
            logger.info("MongoDB connection closed")

    app = FastAPI(title="Listings API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PyMongoError, store_error_handler)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
