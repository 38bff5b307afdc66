"""
Monthly usage meter for the metered Google Maps provider.

Counts are approximate: the increment is a read-then-write against MongoDB,
so concurrent increments can race and undercount. The meter exists for
billing awareness, not billing accuracy.

Metering runs as a detached task whose only error channel is the log. A
failing or slow meter never affects a geocoding lookup.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from db.models import UsageRecord

logger = logging.getLogger(__name__)


def current_month_key(now: datetime | None = None) -> str:
    """Return the "MM-YYYY" bucket for ``now`` in the local calendar month."""
    now = (now or datetime.now(UTC)).astimezone()
    return f"{now.month:02d}-{now.year}"


class UsageMeter:
    def __init__(self) -> None:
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def increment_usage(self) -> None:
        """Add one call to the current month's record, creating it if needed."""
        try:
            month_key = current_month_key()
            now = datetime.now(UTC)
            record = await UsageRecord.find_one(UsageRecord.month_key == month_key)
            if record is not None:
                record.request_count += 1
                record.last_request = now
                await record.save()
                logger.debug(
                    "Updated usage for %s, new count: %d",
                    month_key,
                    record.request_count,
                )
            else:
                await UsageRecord(
                    month_key=month_key,
                    request_count=1,
                    last_request=now,
                ).insert()
                logger.info("Created usage record for month %s", month_key)
        except Exception:
            logger.exception("Failed to increment geocoding usage")

    def record_usage(self) -> asyncio.Task[None] | None:
        """
        Schedule ``increment_usage`` without waiting for it.

        The task is kept referenced until it finishes so it cannot be
        garbage collected mid-flight.
        """
        try:
            task = asyncio.get_running_loop().create_task(self.increment_usage())
        except RuntimeError:
            logger.warning("No running event loop; geocoding usage not recorded")
            return None
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every scheduled increment to settle."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def get_usage(self, month_key: str | None = None) -> UsageRecord | None:
        target = month_key or current_month_key()
        try:
            return await UsageRecord.find_one(UsageRecord.month_key == target)
        except Exception:
            logger.exception("Failed to fetch geocoding usage for %s", target)
            return None

    async def get_all_usage(self) -> list[UsageRecord]:
        """All monthly records, ``month_key`` descending."""
        try:
            return await UsageRecord.find_all().sort("-month_key").to_list()
        except Exception:
            logger.exception("Failed to fetch geocoding usage history")
            return []
