"""
User Data Models and Database Schema

This module defines the user data model for the Recipes backend, including
the SQLAlchemy table definition and the schemas used in API responses.

A user row is created exactly once per email, either on the first
successful magic-link signup or by a direct signup. The email is the
identity used by magic links and is never changed by the auth flow.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlmodel import SQLModel


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all database models."""
    pass


class User(Base):
    """Registered user of the recipes application."""

    __tablename__ = "user"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)

    email: Mapped[str] = mapped_column(
        String(320),
        unique=True,
        index=True,
        nullable=False,
        comment="Login email, compared case-sensitively as stored",
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)

    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="When the user signed up",
    )

    def __repr__(self) -> str:
        return f"User(id={self.id!s}, email={self.email!r})"


class UserRead(SQLModel):
    """User data schema for API responses."""
    id: UUID
    email: str
    first_name: str
    last_name: str
