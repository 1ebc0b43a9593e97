"""Company (tenant) and user (actor) models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class Company(Base):
    """An isolated tenant account.

    ``settings`` is a free-form JSON blob; the only key the chart service
    reads is ``currency_id``, which is stored as a string (``"1"``).
    """

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    settings: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
    )

    # -- Relationships --
    users: Mapped[list[User]] = relationship(
        "User",
        back_populates="company",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<Company(id={self.id!r}, name={self.name!r})>"


class User(Base):
    """A user acting inside one company.

    Non-admin users only see records whose ``user_id`` is their own.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
    )
    company_id: Mapped[int] = mapped_column(
        ForeignKey("companies.id"),
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # -- Relationships --
    company: Mapped[Company] = relationship(
        "Company",
        back_populates="users",
        lazy="joined",
    )

    def __repr__(self) -> str:
        return (
            f"<User(id={self.id!r}, company_id={self.company_id!r}, "
            f"is_admin={self.is_admin!r})>"
        )
