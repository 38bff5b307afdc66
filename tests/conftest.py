import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from aiolimiter import AsyncLimiter
from beanie import init_beanie
from mongomock_motor import AsyncMongoMockClient
from network_blocker import install_network_blocker

from db.models import UsageRecord  # noqa: E402


@pytest.fixture(autouse=True)
def _default_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "test-google-key")
    monkeypatch.setenv("OPENCAGE_API_KEY", "test-opencage-key")
    monkeypatch.delenv("NOMINATIM_BASE_URL", raising=False)
    monkeypatch.delenv("PHOTON_BASE_URL", raising=False)
    install_network_blocker(monkeypatch)


@pytest.fixture(autouse=True)
def _fresh_rate_limiters(monkeypatch: pytest.MonkeyPatch) -> None:
    # Limiters hold loop-bound waiters; give every test its own
    monkeypatch.setattr(
        "geocoding.providers.google.google_rate_limiter",
        AsyncLimiter(1000, 1),
    )
    monkeypatch.setattr(
        "geocoding.providers.nominatim.nominatim_rate_limiter",
        AsyncLimiter(1000, 1),
    )


@pytest.fixture
async def beanie_db():
    client = AsyncMongoMockClient()
    database = client["test_db"]
    await init_beanie(database=database, document_models=[UsageRecord])
    return database
