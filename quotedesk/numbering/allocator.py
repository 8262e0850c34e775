"""Daily document numbers: PREFIX + YYYYMMDD + NNN, e.g. OPDEXPORT20250917001.

The counter is per calendar day and global across companies. Each call
increments a per-day counter row with a single
``INSERT ... ON CONFLICT DO UPDATE SET last_seq = last_seq + 1 RETURNING``
statement. PostgreSQL holds the row lock until the surrounding transaction
ends, so two concurrent allocators can never read the same value. A rolled
back transaction releases its value without reuse: gaps are possible,
duplicates are not.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import date, datetime
from zoneinfo import ZoneInfo

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.config import settings
from quotedesk.errors import SequenceExhaustedError
from quotedesk.models.sequence import DocumentDailySequence

logger = logging.getLogger(__name__)

SEQUENCE_DIGITS = 3
MAX_DAILY_SEQUENCE = 10**SEQUENCE_DIGITS - 1
LOCK_NOT_AVAILABLE = "55P03"


def format_number(prefix: str, day: str, seq: int) -> str:
    return f"{prefix}{day}{seq:0{SEQUENCE_DIGITS}d}"


def _number_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(prefix)}(\d{{4}})(\d{{2}})(\d{{2}})(\d{{{SEQUENCE_DIGITS}}})$")


def is_valid_number(number: str, prefix: str | None = None) -> bool:
    """Check `number` against ^PREFIX\\d{8}\\d{3}$."""
    return _number_pattern(prefix or settings.quotation.number_prefix).match(number) is not None


def date_from_number(number: str, prefix: str | None = None) -> date | None:
    """Extract the allocation date, or None if the number is malformed or the date impossible."""
    match = _number_pattern(prefix or settings.quotation.number_prefix).match(number)
    if match is None:
        return None
    year, month, day, _ = (int(g) for g in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


class SequenceAllocator:
    """Hands out the next document number for today."""

    def __init__(
        self,
        prefix: str | None = None,
        timezone: str | None = None,
        clock: Callable[[ZoneInfo], datetime] | None = None,
    ) -> None:
        self.prefix = prefix or settings.quotation.number_prefix
        self._tz = ZoneInfo(timezone or settings.quotation.timezone)
        self._clock = clock or (lambda tz: datetime.now(tz))

    def day_key(self, moment: datetime | None = None) -> str:
        """YYYYMMDD of `moment` (default: now) in the service's calendar."""
        moment = moment or self._clock(self._tz)
        if moment.tzinfo is not None:
            moment = moment.astimezone(self._tz)
        return moment.strftime("%Y%m%d")

    async def next_number(self, db: AsyncSession, now: datetime | None = None) -> str:
        """Allocate the next number inside the caller's transaction.

        The day is fixed from `now` (or the clock) before touching the
        database, so a transaction that commits after midnight still numbers
        against the day it started on.
        """
        day = self.day_key(now)

        stmt = (
            pg_insert(DocumentDailySequence)
            .values(prefix=self.prefix, day=day, last_seq=1)
            .on_conflict_do_update(
                constraint="uq_document_daily_sequences_prefix_day",
                set_={
                    "last_seq": DocumentDailySequence.last_seq + 1,
                    "updated_at": func.now(),
                },
            )
            .returning(DocumentDailySequence.last_seq)
        )
        try:
            result = await db.execute(stmt)
        except OperationalError as exc:
            if getattr(exc.orig, "sqlstate", None) != LOCK_NOT_AVAILABLE:
                raise
            logger.warning("Timed out waiting for sequence counter %s/%s", self.prefix, day)
            raise SequenceExhaustedError(
                "Document numbering is busy, retry shortly",
                details={"day": day},
            ) from exc
        seq = int(result.scalar_one())

        if seq > MAX_DAILY_SEQUENCE:
            raise SequenceExhaustedError(
                "Daily document number capacity reached",
                details={"day": day, "capacity": MAX_DAILY_SEQUENCE},
            )

        number = format_number(self.prefix, day, seq)
        logger.debug("Allocated document number %s", number)
        return number


# Module-level singleton
sequence_allocator = SequenceAllocator()
