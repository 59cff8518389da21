# access_console/database.py
"""
Database connection, session management, and table creation.
Only the console's own application state lives here; suppliers, personnel
and access logs are owned by the backend. SQLite by default, any
SQLAlchemy URL (e.g. PostgreSQL) via DATABASE_URL.
"""

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from access_console.config import settings

# SQLite connections are shared between FastAPI's worker threads
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,          # Auto-reconnect if DB connection drops
    connect_args=_connect_args,
    echo=False,                  # Set True to log all SQL queries (debug only)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from access_console.models.app_state import AppStateEntry   # noqa

    Base.metadata.create_all(bind=engine)
