"""Tenant/actor scoping for chart queries."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import and_

from app.models.company import Company, User
from app.services.charts.currency_directory import normalize_currency_id


@dataclass(frozen=True)
class ChartScope:
    """The company being reported on and the user asking.

    Admins see every record of the company; everyone else only sees
    records they own.
    """

    company: Company
    user: User
    is_admin: bool

    @classmethod
    def for_user(cls, company: Company, user: User) -> ChartScope:
        return cls(company=company, user=user, is_admin=bool(user.is_admin))

    @property
    def company_id(self) -> int:
        return self.company.id

    @property
    def default_currency_id(self) -> int:
        """The company's configured currency, cast to int."""
        settings = self.company.settings or {}
        currency_id = normalize_currency_id(settings.get("currency_id"))
        if currency_id is None:
            raise ValueError(f"Company {self.company.id} has no currency_id setting")
        return currency_id

    def owned_by(self, model):
        """Visibility predicate for rows of *model*.

        *model* must have ``company_id`` and ``user_id`` columns.
        """
        if self.is_admin:
            return model.company_id == self.company.id
        return and_(
            model.company_id == self.company.id,
            model.user_id == self.user.id,
        )
