import asyncio
import time
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from db.models import UsageRecord
from geocoding.usage import UsageMeter, current_month_key


def test_current_month_key_zero_pads_month() -> None:
    assert current_month_key(datetime(2025, 3, 14, tzinfo=UTC)) == "03-2025"
    assert current_month_key(datetime(2024, 11, 15, tzinfo=UTC)) == "11-2024"


@pytest.fixture
def rome_timezone(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TZ", "Europe/Rome")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_current_month_key_uses_local_calendar_month(rome_timezone) -> None:
    # 23:30 UTC on 31 March is already April in Rome
    assert current_month_key(datetime(2025, 3, 31, 23, 30, tzinfo=UTC)) == "04-2025"
    assert current_month_key(datetime(2025, 4, 1, 0, 30)) == "04-2025"


@pytest.mark.asyncio
async def test_increment_creates_record_for_new_month(beanie_db) -> None:
    meter = UsageMeter()

    await meter.increment_usage()

    record = await meter.get_usage()
    assert record is not None
    assert record.month_key == current_month_key()
    assert record.request_count == 1


@pytest.mark.asyncio
async def test_increment_updates_existing_record(beanie_db) -> None:
    meter = UsageMeter()
    earlier = datetime(2020, 1, 1, tzinfo=UTC)
    await UsageRecord(
        month_key=current_month_key(),
        request_count=41,
        last_request=earlier,
    ).insert()

    await meter.increment_usage()

    record = await meter.get_usage()
    assert record.request_count == 42
    assert record.last_request.replace(tzinfo=UTC) > earlier
    assert len(await UsageRecord.find_all().to_list()) == 1


@pytest.mark.asyncio
async def test_record_usage_is_fire_and_forget(beanie_db) -> None:
    meter = UsageMeter()

    task = meter.record_usage()

    assert task is not None
    assert meter.pending == 1
    await meter.drain()
    assert meter.pending == 0
    record = await meter.get_usage()
    assert record.request_count == 1


@pytest.mark.asyncio
async def test_increment_failure_is_logged_not_raised(
    beanie_db,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    monkeypatch.setattr(
        UsageRecord,
        "find_one",
        AsyncMock(side_effect=RuntimeError("mongo down")),
    )
    meter = UsageMeter()

    meter.record_usage()
    await meter.drain()

    assert "Failed to increment geocoding usage" in caplog.text


def test_record_usage_without_loop_is_a_no_op() -> None:
    assert UsageMeter().record_usage() is None


@pytest.mark.asyncio
async def test_slow_meter_does_not_block_caller(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    started = asyncio.Event()

    async def slow_increment() -> None:
        started.set()
        await asyncio.sleep(10)

    meter = UsageMeter()
    monkeypatch.setattr(meter, "increment_usage", slow_increment)

    meter.record_usage()
    await asyncio.sleep(0)

    assert started.is_set()
    assert meter.pending == 1
    for task in list(meter._pending):
        task.cancel()
    await meter.drain()


@pytest.mark.asyncio
async def test_get_usage_reads_specific_month(beanie_db) -> None:
    await UsageRecord(month_key="01-2025", request_count=7).insert()
    meter = UsageMeter()

    record = await meter.get_usage("01-2025")

    assert record.request_count == 7
    assert await meter.get_usage("02-2025") is None


@pytest.mark.asyncio
async def test_get_all_usage_orders_by_month_key_descending(beanie_db) -> None:
    for key in ("01-2025", "12-2024", "03-2025"):
        await UsageRecord(month_key=key, request_count=1).insert()

    records = await UsageMeter().get_all_usage()

    assert [r.month_key for r in records] == ["12-2024", "03-2025", "01-2025"]


@pytest.mark.asyncio
async def test_get_usage_errors_return_none(
    beanie_db,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(
        UsageRecord,
        "find_one",
        AsyncMock(side_effect=RuntimeError("mongo down")),
    )

    assert await UsageMeter().get_usage() is None
