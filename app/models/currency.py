"""Currency model — the global id -> ISO code lookup table."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Currency(Base):
    """A currency shared by every tenant.

    Rows are read in bulk into the in-memory currency directory; request
    handlers never query this table directly.
    """

    __tablename__ = "currencies"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
    )
    code: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        comment="ISO 4217 currency code: USD, EUR, GBP",
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    symbol: Mapped[Optional[str]] = mapped_column(
        String(10),
    )
    precision: Mapped[int] = mapped_column(
        Integer,
        default=2,
    )

    def __repr__(self) -> str:
        return f"<Currency(id={self.id!r}, code={self.code!r})>"
