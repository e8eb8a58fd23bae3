from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from app.config import DATABASE_URL
import os

SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# SQLite (local runs and tests) needs a single shared connection across threads
engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
    engine_kwargs = {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}

# creating the SQLAlchemy engine
engine = create_engine(DATABASE_URL, echo=SQL_ECHO, future=True, pool_pre_ping=True, **engine_kwargs)

# creating a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)

# Base class for ORM models
Base = declarative_base()

# Dependency to get the database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
