from datetime import date
from decimal import Decimal

import pytest

from models.invoice import PAID, PENDING_PAYMENT
from services.generation_service import GenerationService
from services.invoice_service import InvoiceService
from utils.errors import NotFoundError, ValidationError


def test_create_ad_hoc_invoice(store):
    invoice = InvoiceService(store).create(
        amount="0.05", currency="ETH", job_description="Logo design",
        wallet_address="0xAbC123", due_date="2024-12-01",
    )

    assert invoice.id.startswith("inv_")
    assert invoice.status == PENDING_PAYMENT
    assert invoice.is_recurring is False
    assert invoice.subscription_id is None
    assert invoice.due_date == date(2024, 12, 1)
    assert invoice.fiat_equivalent == Decimal("120.00")
    assert store.get_invoice(invoice.id) == invoice


def test_create_validates_fields(store):
    with pytest.raises(ValidationError) as exc:
        InvoiceService(store).create(
            amount="abc", currency="ETH", job_description="",
            wallet_address="0x1", due_date=None, client_email="nope",
        )
    assert set(exc.value.errors) == {"amount", "job_description", "due_date", "client_email"}
    assert store.list_invoices() == []


def test_mark_paid_flips_status_once(store):
    service = InvoiceService(store)
    invoice = service.create(
        amount="10", currency="USDT", job_description="Support",
        wallet_address="0x1", due_date="2024-12-01",
    )

    paid, changed = service.mark_paid(invoice.id)
    assert changed is True
    assert paid.status == PAID
    assert paid.paid_at is not None
    assert store.get_invoice(invoice.id).status == PAID

    again, changed = service.mark_paid(invoice.id)
    assert changed is False
    assert again.paid_at == paid.paid_at


def test_mark_paid_unknown_invoice(store):
    with pytest.raises(NotFoundError):
        InvoiceService(store).mark_paid("inv_missing")


def test_generated_invoice_stays_pending_until_paid(store, saved_subscription):
    saved_subscription()
    generated = GenerationService(store).run_generation_pass(date(2024, 1, 15)).invoices[0]

    service = InvoiceService(store)
    assert service.get(generated.id).status == PENDING_PAYMENT
    service.mark_paid(generated.id)
    assert service.get(generated.id).is_paid()


def test_describe_includes_payment_link(store):
    service = InvoiceService(store)
    invoice = service.create(
        amount="0.01", currency="BTC", job_description="Audit",
        wallet_address="bc1qxyz", due_date="2024-12-01",
    )
    text = service.describe(invoice)
    assert "bitcoin:bc1qxyz?amount=0.01" in text
    assert "0.01000000 BTC" in text


def test_list_summary_counts_outstanding(store):
    service = InvoiceService(store)
    assert "No invoices" in service.list_summary()

    first = service.create(amount="10", currency="USDC", job_description="A", wallet_address="0x1", due_date="2024-12-01")
    service.create(amount="5", currency="USDC", job_description="B", wallet_address="0x1", due_date="2024-12-01")
    service.mark_paid(first.id)

    text = service.list_summary()
    assert "Outstanding: 1 invoice(s), ~$5.00" in text
