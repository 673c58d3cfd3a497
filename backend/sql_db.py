from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from core.config import DATABASE_URL, SQL_ECHO


def build_engine(url: str = DATABASE_URL, **kwargs) -> Engine:
    """Engine with the SQLite thread check disabled (sessions cross FastAPI's threadpool)."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, echo=SQL_ECHO, future=True, **kwargs)


# Default to a local SQLite file for dev; allow override via DATABASE_URL
engine = build_engine()
