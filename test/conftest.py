import pytest

from herdbook.core.config import Settings, get_settings
from herdbook.core.records import Snapshot


def scenario_payload(payment_type="percentage", payment_amount=20):
    """Goat A bought for 10,000 and sold for 18,000, two goats still on the farm."""
    return {
        "animals": [
            {
                "id": "A",
                "status": "Sold",
                "purchasePrice": 10000,
                "purchaseDate": "2024-01-10",
                "salePrice": 18000,
                "saleDate": "2024-06-15",
                "caretakerId": "C",
            },
            {
                "id": "B",
                "status": "Active",
                "purchasePrice": 5000,
                "purchaseDate": "2024-01-05",
            },
            {
                "id": "D",
                "status": "Active",
                "purchasePrice": 5000,
                "purchaseDate": "2024-07-01",
                "caretakerId": "C",
            },
        ],
        "expenses": [
            {"id": "e1", "amount": 1000, "date": "2024-02-01", "category": "Feed", "goatId": "A"},
            {"id": "e2", "amount": 2000, "date": "2024-03-01", "category": "Transport"},
        ],
        "healthEvents": [
            {"id": "h1", "goatId": "A", "cost": 500, "date": "2024-04-01", "type": "Vaccination"},
        ],
        "caretakers": [{"id": "C", "name": "Chidi"}, {"id": "Z", "name": "Zara"}],
        "paymentModel": {"type": payment_type, "amount": payment_amount},
    }


@pytest.fixture
def scenario():
    return Snapshot.from_dict(scenario_payload())


@pytest.fixture
def empty_snapshot():
    return Snapshot()


@pytest.fixture
def live_settings():
    return Settings(freeze_shared_cost_at_sale=False)


@pytest.fixture
def frozen_settings():
    return Settings(freeze_shared_cost_at_sale=True)


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
