"""SQLAlchemy models for the invoicing chart service."""

from app.models.currency import Currency
from app.models.company import Company, User
from app.models.client import Client
from app.models.invoice import Invoice, InvoiceStatus
from app.models.payment import Payment
from app.models.expense import Expense

__all__ = [
    "Currency",
    "Company",
    "User",
    "Client",
    "Invoice",
    "InvoiceStatus",
    "Payment",
    "Expense",
]
