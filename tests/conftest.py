from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import certissuer` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from certissuer.api.dependencies import get_service  # noqa: E402
from certissuer.core.config import Settings  # noqa: E402
from certissuer.main import app  # noqa: E402
from certissuer.repos.state_store import InMemoryStateStore  # noqa: E402
from certissuer.services import token_service  # noqa: E402
from certissuer.services.certification_service import CertificationService  # noqa: E402
from certissuer.services.clock import ManualClock  # noqa: E402

DEPLOYER = "deployer"
ADMIN = "admin_1"
VERIFIER = "verifier_1"
TEACHER_1 = "teacher_1"
TEACHER_2 = "teacher_2"

BASIC = "basic-teaching"
BASIC_ACTIVITIES = ["workshop", "online-course"]

START_HEIGHT = 1_000_000
UNITS_PER_DAY = 86400


def make_settings(**overrides) -> Settings:
    values = {
        "app_env": "test",
        "log_level": "info",
        "log_json": False,
        "port": 8000,
        "database_url": None,
        "deployer_id": DEPLOYER,
        "clock_units_per_day": UNITS_PER_DAY,
        "renewal_eligibility": "stored-status",
    }
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=START_HEIGHT)


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def service(store: InMemoryStateStore, clock: ManualClock) -> CertificationService:
    return CertificationService(store, clock, make_settings())


@pytest.fixture
def configured_service(service: CertificationService) -> CertificationService:
    """Service with a verifier and the basic-teaching requirements in place."""
    service.add_verifier(DEPLOYER, VERIFIER)
    service.set_requirements(DEPLOYER, BASIC, 40, BASIC_ACTIVITIES, 365)
    return service


@pytest.fixture
def client(service: CertificationService) -> Iterator[TestClient]:
    app.dependency_overrides[get_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def mint_token(caller: str) -> str:
    """Create a valid ES256 caller token for testing."""
    return token_service.create_access_token(sub=caller)


def auth(caller: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(caller)}"}


@pytest.fixture
def deployer_headers() -> dict[str, str]:
    return auth(DEPLOYER)


@pytest.fixture
def verifier_headers() -> dict[str, str]:
    return auth(VERIFIER)


@pytest.fixture
def outsider_headers() -> dict[str, str]:
    return auth(TEACHER_2)
