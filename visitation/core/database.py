# File: database.py
# Path: visitation/core/database.py

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from visitation.core.config import settings

logger = logging.getLogger(__name__)

# Shared declarative base for all models
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False):
    """
    Create an engine for the given URL.
    SQLite engines get thread-sharing enabled so FastAPI's threadpool can use them.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=300,       # Recycle connections every 5 minutes
        pool_timeout=20,
        connect_args={
            "options": "-c timezone=utc",
            "connect_timeout": 5,
            "application_name": "VisitationScheduler"
        } if "postgresql" in database_url else {},
        echo=echo
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.database_echo)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)


def get_db():
    """
    Dependency function for FastAPI endpoints.
    Creates a new database session for each request.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_database_connection() -> bool:
    """
    Test database connection health.
    Returns True if connection is successful, False otherwise.
    """
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        logger.info("Database connection test successful")
        return True
    except Exception as e:
        logger.error(f"Database connection test failed: {str(e)}")
        return False
    finally:
        db.close()
