"""
Database engine and session management.

DATABASE_URL selects the backing store (SQLite by default, PostgreSQL or
SQL Server via their SQLAlchemy URLs). Route handlers receive a session
through the get_db dependency.
"""

import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./task_management.db")
SQL_ECHO = os.environ.get("SQL_ECHO", "false").lower() == "true"

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # SQLite connections are shared across the threadpool FastAPI runs sync routes in
    connect_args = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

logger.debug(f"Database engine configured for dialect: {engine.dialect.name}")


def get_db():
    """Yield a database session and close it when the request finishes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
