import os
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "")

# Some hosts provide postgres:// but SQLAlchemy needs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

engine = create_engine(DATABASE_URL) if DATABASE_URL else None
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine) if engine else None
Base = declarative_base()


def init_db(bind=None) -> None:
    """Create the rate configuration tables if they do not exist."""
    from labour_engine.models import db_models  # noqa: F401 - registers the tables

    bind = bind or engine
    if bind is None:
        raise RuntimeError("DATABASE_URL not configured")
    Base.metadata.create_all(bind=bind)


def get_db_optional():
    """Yields a session when DATABASE_URL is set, otherwise None (local dev/tests use the built-in rates)."""
    if not SessionLocal:
        yield None
        return
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
