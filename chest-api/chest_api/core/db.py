from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from chest_api.core.config import settings

# SQLite (local runs) needs the connection shared with the threadpool
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

class Base(DeclarativeBase):
    pass


def init_db():
    """Create the ledger tables (CREATE_TABLES=true or local runs)."""
    import chest_api.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


# Bound of the INTEGER columns (quantities, catalog ids)
INT_MAX = 2**31 - 1
