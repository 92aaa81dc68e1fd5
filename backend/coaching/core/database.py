from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from coaching.core.config import settings


def _connect_args(url: str) -> dict:
    # SQLite connections are used across FastAPI's threadpool
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    pool_pre_ping=True,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
