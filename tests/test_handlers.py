import asyncio
from datetime import date
from types import SimpleNamespace

import pytest

from handlers import invoice_handler, subscription_handler
from repositories.memory_store import InMemoryStore
from services.generation_service import GenerationService
from services.invoice_service import InvoiceService
from services.subscription_service import SubscriptionService


class FakeMessage:
    def __init__(self):
        self.replies = []

    async def reply_text(self, text, **kwargs):
        self.replies.append(text)


def _update(user_id=42):
    user = SimpleNamespace(id=user_id, username="tester", first_name="Test")
    return SimpleNamespace(effective_user=user, message=FakeMessage())


def _run(handler, *args):
    update = _update()
    context = SimpleNamespace(args=list(args))
    asyncio.run(handler(update, context))
    return update.message.replies


@pytest.fixture
def wired_store(monkeypatch):
    """Point the handler modules' services at a fresh in-memory store."""
    store = InMemoryStore()
    monkeypatch.setattr(subscription_handler, "subscription_service", SubscriptionService(store))
    monkeypatch.setattr(subscription_handler, "generation_service", GenerationService(store))
    monkeypatch.setattr(invoice_handler, "invoice_service", InvoiceService(store))
    return store


class TestParseSubscription:
    def test_required_fields_only(self):
        form = subscription_handler._parse_manual(
            "Acme | a@b.io | 250 | USDC | monthly | 0xAbC | Hosting | 2024-01-01"
        )
        assert form["client_name"] == "Acme"
        assert form["start_date"] == "2024-01-01"
        assert form["end_date"] is None
        assert form["custom_notes"] == ""

    def test_notes_may_contain_pipes(self):
        form = subscription_handler._parse_manual(
            "Acme | a@b.io | 250 | USDC | monthly | 0xAbC | Hosting | 2024-01-01 | | net 30 | thanks"
        )
        assert form["end_date"] is None
        assert form["custom_notes"] == "net 30 | thanks"

    def test_too_few_fields(self):
        assert subscription_handler._parse_manual("Acme | a@b.io | 250") is None


def test_parse_invoice():
    form = invoice_handler._parse_manual("0.05 | ETH | 0xAbC | Logo | 2024-12-01 | rush job")
    assert form == {
        "amount": "0.05", "currency": "ETH", "wallet_address": "0xAbC",
        "job_description": "Logo", "due_date": "2024-12-01", "custom_notes": "rush job",
    }
    assert invoice_handler._parse_manual("0.05 | ETH") is None


def test_add_subscription_reports_validation_errors(wired_store):
    replies = _run(
        subscription_handler.add_subscription_command,
        *"Acme | nope | -1 | USDC | monthly | 0xAbC | Hosting | 2024-01-01".split(),
    )
    assert "Please enter a valid email address" in replies[0]
    assert "Please enter a valid amount" in replies[0]
    assert wired_store.list_subscriptions() == []


def test_add_then_generate(wired_store):
    _run(
        subscription_handler.add_subscription_command,
        *"Acme | a@b.io | 250 | USDC | monthly | 0xAbC | Hosting | 2099-01-01".split(),
    )
    sub = wired_store.list_subscriptions()[0]

    replies = _run(subscription_handler.generate_command, sub.id)

    assert "generated" in replies[0]
    assert len(wired_store.list_invoices()) == 1
    assert wired_store.get_subscription(sub.id).last_invoice_date == date.today()


def test_generate_unknown_subscription(wired_store):
    replies = _run(subscription_handler.generate_command, "rec_missing")
    assert "not found" in replies[0]


def test_toggle_and_delete(wired_store, make_subscription):
    wired_store.add_subscription(make_subscription(id="rec_t"))

    assert "Paused" in _run(subscription_handler.toggle_subscription_command, "rec_t")[0]
    assert "deleted" in _run(subscription_handler.delete_subscription_command, "rec_t")[0]
    assert "not found" in _run(subscription_handler.delete_subscription_command, "rec_t")[0]


def test_pay_command(wired_store):
    invoice = InvoiceService(wired_store).create(
        amount="1", currency="USDT", job_description="Job", wallet_address="0x1", due_date="2024-12-01",
    )
    assert "marked as paid" in _run(invoice_handler.pay_command, invoice.id)[0]
    assert "already paid" in _run(invoice_handler.pay_command, invoice.id)[0]
    assert "not found" in _run(invoice_handler.pay_command, "inv_missing")[0]


def test_subscription_details_list_generated_invoices(wired_store, make_subscription):
    wired_store.add_subscription(make_subscription(id="rec_d", next_invoice_date=date(2024, 1, 1)))
    result = GenerationService(wired_store).run_generation_pass(date(2024, 1, 15))
    invoice_id = result.invoices[0].id

    reply = _run(subscription_handler.subscription_command, "rec_d")[0]

    assert "Generated invoices:" in reply
    assert f"⏳ {invoice_id} - due 2024-02-15" in reply
