"""
Database package for the video share backend.

Provides SQLAlchemy models, engine construction and session factories.
"""

from db.base import Base
from db.session import create_db_engine, create_session_factory

__all__ = ["Base", "create_db_engine", "create_session_factory"]
