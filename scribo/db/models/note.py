"""SQLAlchemy ORM models for notes and note_shares tables"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, JSON, String, Text
from sqlalchemy.orm import relationship

from scribo.db.base import Base
from scribo.utils.datetime_helper import utcnow


class Note(Base):
    """
    SQLAlchemy ORM model for the notes table.
    Shares are loaded eagerly so a note is always read and written as a whole.
    """
    __tablename__ = "notes"

    # Primary key (UUID string)
    id = Column(String(36), primary_key=True, index=True)

    # Note content
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False, default="")
    category = Column(String(50), nullable=False, default="General")
    tags = Column(JSON, nullable=False, default=list)
    color = Column(String(16), nullable=False, default="default")
    priority = Column(String(16), nullable=False, default="medium")

    # Ownership
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    # State flags
    is_pinned = Column(Boolean, nullable=False, default=False)
    is_archived = Column(Boolean, nullable=False, default=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_modified = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    shares = relationship(
        "NoteShare",
        back_populates="note",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="NoteShare.shared_at",
    )

    __table_args__ = (
        Index("ix_notes_owner_deleted", "owner_id", "is_deleted"),
        Index("ix_notes_deleted_at", "is_deleted", "deleted_at"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}', owner_id={self.owner_id})>"


class NoteShare(Base):
    """
    Junction table for sharing a note with other users.
    The owner is tracked on Note.owner_id and never appears here.
    """
    __tablename__ = "note_shares"

    note_id = Column(String(36), ForeignKey("notes.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True, index=True)
    permission = Column(String(8), nullable=False, default="read")
    shared_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    note = relationship("Note", back_populates="shares")

    def __repr__(self) -> str:
        return f"<NoteShare(note_id={self.note_id}, user_id={self.user_id}, permission={self.permission})>"
