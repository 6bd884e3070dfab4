from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer,
                        SmallInteger, String, Text)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.formatting import format_age, shorten_text
from db_config import Base


class Conference(Base):
    __tablename__ = "conferences"

    id = Column(Integer, primary_key=True, index=True)
    city = Column(String(255), nullable=False)
    year = Column(String(4), nullable=False)
    is_international = Column(Boolean, default=False, nullable=False)

    # Relationships
    comments = relationship(
        "Comment", back_populates="conference", cascade="all, delete"
    )

    def __repr__(self):
        return f"<Conference(id={self.id}, city={self.city}, year={self.year})>"


class Comment(Base):
    """
    A guestbook entry left on a conference.

    created_at is stamped when the object is constructed, not when it is
    flushed, so the derived age is meaningful before persistence too.
    """

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    author = Column(String(255), nullable=False)
    text = Column(Text, nullable=False)
    email = Column(String(255), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    note = Column(SmallInteger, nullable=True)
    conference_id = Column(
        Integer, ForeignKey("conferences.id", ondelete="CASCADE"), nullable=True
    )

    # Relationships
    conference = relationship("Conference", back_populates="comments")

    def __init__(self, **kwargs):
        kwargs.setdefault("created_at", datetime.now(timezone.utc))
        super().__init__(**kwargs)

    @property
    def shorttext(self) -> str:
        return shorten_text(self.text)  # type: ignore

    @property
    def age(self) -> str:
        return format_age(self.created_at)  # type: ignore

    def __repr__(self):
        return f"<Comment(id={self.id}, author={self.author}, conference={self.conference_id})>"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(100), nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def roles(self) -> list[str]:
        roles = ["ROLE_USER"]
        if self.is_admin:
            roles.append("ROLE_ADMIN")
        return roles

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, email={self.email})>"
