"""
Service configuration.

Values come from environment variables (a local ``.env`` file is loaded
first if present). Defaults are suitable for a local MongoDB.
"""
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split_origins(raw: str) -> List[str]:
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    mongo_uri: str = os.getenv("MONGO_URI") or os.getenv("DATABASE_URL") or "mongodb://localhost:27017"
    database_name: str = os.getenv("DATABASE_NAME", "listings")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT") or 8000)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_origins: List[str] = field(default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS", "*")))


settings = Settings()
