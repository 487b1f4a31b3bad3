import os
import logging
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    DATABASE_URL = "sqlite:///./ideahub.db"
    logger.warning(f"DATABASE_URL not set, falling back to: {DATABASE_URL}")
else:
    # Mask password in logs
    safe_url = DATABASE_URL
    if '@' in DATABASE_URL:
        parts = DATABASE_URL.split('@')
        safe_url = parts[0].split(':')[0] + ':****@' + parts[1]
    logger.info(f"DATABASE_URL: {safe_url}")

# Create engine with connection pool settings for production
if 'postgresql' in DATABASE_URL:
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,  # Test connections before using
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        connect_args={
            "connect_timeout": 10,
        }
    )
else:
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def check_connection() -> bool:
    """Run a trivial query against the configured database"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection: SUCCESS")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {type(e).__name__}: {e}")
        return False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
