"""Declarative base for SQLAlchemy ORM models"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
