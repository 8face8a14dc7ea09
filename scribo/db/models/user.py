"""SQLAlchemy ORM model for users table"""

from sqlalchemy import Column, DateTime, String, Text

from scribo.db.base import Base
from scribo.utils.datetime_helper import utcnow


class User(Base):
    """
    SQLAlchemy ORM model for the users table.
    Rows are provisioned by the identity provider; this service only reads them.
    """
    __tablename__ = "users"

    # Primary key (auth provider user id)
    id = Column(String(36), primary_key=True, index=True)

    # User information
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(Text, nullable=True)
    role = Column(String(32), nullable=False, default="user")

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
