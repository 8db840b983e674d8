"""
db.py — Database Engine & Session Setup
----------------------------------------

This module initializes the SQLAlchemy database connection and provides
session management for the location hierarchy term store.

Features:
- Creates database engine using DATABASE_URL from project settings
- Makes SQLite SAVEPOINTs nest inside the caller's transaction
- Defines `SessionLocal` for transaction management
- Provides `init_db()` to create tables based on ORM models

Intended for:
- Centralized database connection setup
- Reusable session handling across the event trigger and the preview UI

Dependencies:
- SQLAlchemy for ORM and engine management
- Project settings for environment-based configuration

"""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from config.settings import DATABASE_URL


# --- ORM Base Class ---
Base = declarative_base()


def enable_sqlite_savepoints(engine):
    """
    Lets pysqlite honour SAVEPOINTs inside the session's transaction.

    The driver otherwise opens transactions on its own, so the first
    SAVEPOINT starts the transaction and its RELEASE commits it, which
    makes a later rollback a no-op. No-op for other dialects.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def build_engine(url: str = DATABASE_URL, **kwargs):
    return enable_sqlite_savepoints(create_engine(url, **kwargs))


# --- Database Engine ---
engine = build_engine(DATABASE_URL)


# --- Session Factory ---
SessionLocal = sessionmaker(bind=engine)


def init_db(bind=None):
    """
    Initializes the database by creating all tables defined in ORM models.
    Safe to run multiple times; only creates tables if they don't exist.
    """
    from db import location_model  # noqa: F401  (registers tables on Base)

    Base.metadata.create_all(bind or engine)
