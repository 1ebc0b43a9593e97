"""Invoice model."""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, Numeric, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.client import Client


class InvoiceStatus:
    """Invoice lifecycle states as stored in ``status_id``."""

    DRAFT = 1
    SENT = 2
    PARTIAL = 3
    PAID = 4
    CANCELLED = 5
    REVERSED = 6


class Invoice(Base):
    """An invoice issued to a client.

    Invoices carry no currency of their own; the client's settings decide it.
    """

    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
    )
    company_id: Mapped[int] = mapped_column(
        ForeignKey("companies.id"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )
    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id"),
        nullable=False,
    )
    status_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=InvoiceStatus.DRAFT,
        comment="1 draft | 2 sent | 3 partial | 4 paid | 5 cancelled | 6 reversed",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=0,
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=0,
    )
    date: Mapped[datetime.date] = mapped_column(
        Date,
        nullable=False,
    )
    due_date: Mapped[Optional[datetime.date]] = mapped_column(
        Date,
        nullable=True,
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    deleted_at: Mapped[Optional[datetime.datetime]] = mapped_column(
        DateTime,
        nullable=True,
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
    )

    # -- Relationships --
    client: Mapped[Client] = relationship(
        "Client",
        lazy="select",
    )

    __table_args__ = (Index("ix_invoices_company_date", "company_id", "date"),)

    def __repr__(self) -> str:
        return (
            f"<Invoice(id={self.id!r}, amount={self.amount}, "
            f"status_id={self.status_id!r})>"
        )
