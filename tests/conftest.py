from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from vetms.config import get_settings
from vetms.db.engine import get_engine
from vetms.db.migrate import ensure_schema
from vetms.db.schema import products


def _reset_caches():
    get_settings.cache_clear()
    get_engine.cache_clear()


@pytest.fixture
def bare_engine(tmp_path, monkeypatch):
    """A fresh, empty SQLite file per test, wired in through the environment."""
    monkeypatch.setenv("VETMS_DATABASE_URL", f"sqlite:///{tmp_path / 'vetms.sqlite'}")
    monkeypatch.setenv("VETMS_INVOICE_PREFIX", "MBV")
    _reset_caches()

    engine = get_engine()
    yield engine

    engine.dispose()
    _reset_caches()


@pytest.fixture
def engine(bare_engine):
    ensure_schema(bare_engine)
    return bare_engine


@pytest.fixture
def catalog(engine):
    with engine.begin() as conn:
        conn.execute(
            products.insert(),
            [
                {"id": 1, "name": "Checkup", "price": Decimal("100")},
                {"id": 2, "name": "Vaccination", "price": Decimal("130")},
                {"id": 3, "name": "Dehinel dog", "price": Decimal("10")},
            ],
        )
    return {"checkup": 1, "vaccination": 2, "dehinel": 3}


@pytest.fixture
def client(engine):
    from vetms.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def jane_draft():
    return {
        "clientName": "Jane Doe",
        "contactInfo": "jane@example.com",
        "date": "2024-03-01",
        "pets": [
            {
                "petName": "Rex",
                "petSpecies": "Dog",
                "items": [
                    {"productId": 1, "quantity": 1, "unitPrice": 100},
                    {"customName": "Bandage", "quantity": 2, "unitPrice": 15},
                ],
            }
        ],
    }
