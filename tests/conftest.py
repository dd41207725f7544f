import os

# Must be set before config is imported anywhere
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("ALLOWED_USER_IDS", "")

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from models.subscription import ACTIVE, MONTHLY, Subscription
from repositories.memory_store import InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def make_subscription():
    """Factory for Subscription records with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides) -> Subscription:
        counter["n"] += 1
        fields = dict(
            id=f"rec_test{counter['n']}",
            client_name="Acme Ltd",
            client_email="billing@acme.io",
            amount=Decimal("250"),
            currency="USDC",
            job_description="Site maintenance",
            wallet_address="0xAbC123",
            frequency=MONTHLY,
            start_date=date(2024, 1, 1),
            next_invoice_date=date(2024, 1, 1),
            status=ACTIVE,
            custom_notes="Net 30",
            fiat_equivalent=Decimal("250.00"),
            created_at=datetime(2023, 12, 20, 9, 0, tzinfo=timezone.utc),
        )
        fields.update(overrides)
        return Subscription(**fields)

    return _make


@pytest.fixture
def saved_subscription(store, make_subscription):
    """Persist a subscription built by make_subscription and return it."""
    def _save(**overrides) -> Subscription:
        sub = make_subscription(**overrides)
        store.add_subscription(sub)
        return sub

    return _save
