"""
Database configuration and session management.
Supports both SQLite (local development) and PostgreSQL (production).
"""

import os

from dotenv import load_dotenv
from loguru import logger
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

# Load environment variables from .env file
load_dotenv()

# Database URL - defaults to SQLite if DATABASE_URL not set
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mastery.db")


def is_postgresql(url: str) -> bool:
    return "postgresql" in url or "postgres" in url


def build_engine(url: str):
    """Create an engine configured for the given database URL."""
    if is_postgresql(url):
        return create_engine(
            url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=5,
            max_overflow=10,
            pool_recycle=300,  # Recycle connections after 5 minutes
            connect_args={"sslmode": "require"},
        )
    if "sqlite" in url:
        return create_engine(
            url,
            connect_args={"check_same_thread": False},  # Required for SQLite with FastAPI
        )
    return create_engine(url)


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_database_type() -> str:
    """Return a description of the current database type."""
    if is_postgresql(DATABASE_URL):
        return "PostgreSQL"
    elif "sqlite" in DATABASE_URL:
        return "SQLite (local)"
    else:
        return "Unknown"


def init_db(bind=None):
    """Initialize database tables."""
    from . import models  # noqa: F401  Import models to register them

    bind = bind or engine
    db_type = get_database_type()
    logger.info(f"Connecting to database: {db_type}")

    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Could not verify database connection: {e}")
        raise

    Base.metadata.create_all(bind=bind)
    logger.info(f"Database tables initialized ({db_type})")
