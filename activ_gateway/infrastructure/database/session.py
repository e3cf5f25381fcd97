"""Engine and session factory for the token database"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from activ_gateway.config import settings


def make_engine(url: str) -> Engine:
    """
    Engine for DATABASE_URL.

    SQLite (local development, tests) connections are shared across threads;
    server databases get a small pre-pinged pool.
    """
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=5,
        pool_recycle=1800,
    )


engine = make_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
