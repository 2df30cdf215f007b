"""
Database engine and sessions for the application store.

Document generation only reads from it; `init_db` exists for local setups and tests.
"""

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
import os

# Local file database unless DATABASE_URL points at the application store.
DATABASE_URL = os.getenv("DATABASE_URL") or "sqlite:///./applications.db"

if DATABASE_URL.startswith("sqlite:"):
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
else:
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a session for one request or script run, closing it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create the application, product, fund, person, legal entity and review tables."""
    from application_documents import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
