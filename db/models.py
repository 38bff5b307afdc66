"""Beanie ODM document models for MongoDB collections.

Usage:
    from db.models import UsageRecord

    record = await UsageRecord.find_one(UsageRecord.month_key == "03-2025")

    record.request_count += 1
    await record.save()
"""

from __future__ import annotations

from datetime import UTC, datetime

from beanie import Document, Indexed
from pydantic import Field


class UsageRecord(Document):
    """Monthly call counter for the metered geocoding provider."""

    month_key: Indexed(str, unique=True)
    request_count: int = Field(default=0, ge=0)
    last_request: datetime = Field(default_factory=lambda: datetime.now(UTC))

    class Settings:
        name = "geocoding_usage"


ALL_DOCUMENT_MODELS = [
    UsageRecord,
]

__all__ = [
    "ALL_DOCUMENT_MODELS",
    "UsageRecord",
]
