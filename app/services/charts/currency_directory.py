"""In-memory currency directory (id -> ISO code).

The directory is a read-only snapshot loaded from the ``currencies``
table.  A single ``CurrencyDirectoryCache`` holds the current snapshot
for the whole process; refreshing builds a new snapshot and swaps the
reference, so concurrent readers always see either the old or the new
table, never a half-built one.

Query results sometimes carry the currency id as a JSON-quoted string
(``'"1"'``) because client currencies live inside a JSON settings
column.  ``normalize_currency_id`` strips those quotes before lookups.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.currency import Currency

logger = get_logger(__name__)


def normalize_currency_id(value: Any) -> Optional[int]:
    """Strip quote artifacts and coerce a currency id to ``int``.

    Returns None for missing, blank or non-numeric values.
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value
    cleaned = str(value).replace('"', "").strip()
    if not cleaned:
        return None
    try:
        return int(cleaned)
    except ValueError:
        return None


@dataclass(frozen=True)
class CurrencyEntry:
    id: int
    code: str


@dataclass(frozen=True)
class CurrencyDirectory:
    """Immutable snapshot of the currency table."""

    entries: tuple[CurrencyEntry, ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[int, str]]) -> CurrencyDirectory:
        return cls(tuple(CurrencyEntry(id=int(i), code=c) for i, c in pairs))

    def code_for(self, currency_id: Any) -> str:
        """Return the code for *currency_id*, or ``""`` when unknown.

        The first matching entry wins if the snapshot holds duplicates.
        """
        normalized = normalize_currency_id(currency_id)
        if normalized is None:
            return ""
        for entry in self.entries:
            if entry.id == normalized:
                return entry.code
        return ""

    def __len__(self) -> int:
        return len(self.entries)


class CurrencyDirectoryCache:
    """Process-wide holder of the current ``CurrencyDirectory`` snapshot."""

    def __init__(self, directory: Optional[CurrencyDirectory] = None) -> None:
        self._directory = directory or CurrencyDirectory()

    def get(self) -> CurrencyDirectory:
        return self._directory

    def replace(self, entries: Iterable[CurrencyEntry]) -> CurrencyDirectory:
        """Install a new snapshot built from *entries* and return it."""
        directory = CurrencyDirectory(tuple(entries))
        self._directory = directory
        return directory

    def refresh(self, db: Session) -> CurrencyDirectory:
        """Reload every currency row from the database."""
        rows = db.query(Currency.id, Currency.code).order_by(Currency.id).all()
        directory = self.replace(CurrencyEntry(id=r.id, code=r.code) for r in rows)
        logger.info("Currency directory refreshed: currencies=%d", len(directory))
        return directory


class CurrencyRefreshScheduler:
    """Background thread that periodically refreshes a directory cache.

    A failed refresh is logged and the previous snapshot stays in place.
    """

    def __init__(
        self,
        cache: CurrencyDirectoryCache,
        db_factory,  # callable that creates a new session
        interval_seconds: float,
    ) -> None:
        self.cache = cache
        self.db_factory = db_factory
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def refresh_once(self) -> bool:
        """Run a single refresh.  Returns False when it failed."""
        try:
            db: Session = self.db_factory()
            try:
                self.cache.refresh(db)
            finally:
                db.close()
        except Exception as e:
            logger.warning("Currency directory refresh failed: %s", e)
            return False
        return True

    def start(self) -> None:
        if self.interval_seconds <= 0:
            logger.info("Currency directory refresher disabled")
            return
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._worker, name="currency-refresh", daemon=True
        )
        self._thread.start()
        logger.info(
            "Currency directory refresh scheduled every %ss", self.interval_seconds
        )

    def stop(self) -> None:
        self._stop.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5)
        self._thread = None

    def _worker(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            self.refresh_once()
