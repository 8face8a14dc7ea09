"""Database package"""

from scribo.db.session import get_db, get_engine, get_session_factory

__all__ = ["get_db", "get_engine", "get_session_factory"]
