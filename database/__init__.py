"""Database package for OPR Digital"""

from database.base import Base
from database.session import SessionLocal, engine, get_db, init_db

__all__ = ["Base", "get_db", "init_db", "SessionLocal", "engine"]
