"""
services/invoice_service.py
---------------------------
Business logic for ad hoc invoices and for marking invoices paid.
"""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from models.invoice import Invoice, PAID, PENDING_PAYMENT
from repositories import get_store
from repositories.base import Store
from services import validation
from utils.dates import DateLike
from utils.errors import NotFoundError
from utils.formatting import format_currency, format_fiat, mock_fiat_equivalent, payment_uri
from utils.ids import generate_invoice_id
from utils.logger import get_logger

logger = get_logger(__name__)


class InvoiceService:
    """Handles invoice creation, lookup and the paid status flip."""

    def __init__(self, store: Optional[Store] = None):
        self.store = store or get_store()

    def create(
        self,
        amount,
        currency: str,
        job_description: str,
        wallet_address: str,
        due_date: DateLike,
        custom_notes: str = "",
        client_name: Optional[str] = None,
        client_email: Optional[str] = None,
    ) -> Invoice:
        """
        Validate and save a one-off invoice (not tied to a subscription).

        Raises:
            ValidationError: With one message per bad field.
        """
        errors: dict[str, str] = {}
        parsed_amount = validation.check_amount(errors, amount)
        code = validation.check_currency(errors, currency)
        job = validation.require_text(errors, "job_description", job_description, "Job description")
        wallet = validation.require_text(errors, "wallet_address", wallet_address, "Wallet address")
        due = validation.check_date(errors, "due_date", due_date, "Due date")
        if client_email:
            validation.check_email(errors, client_email)
        validation.raise_if_errors(errors)

        invoice = Invoice(
            id=generate_invoice_id(),
            amount=parsed_amount,
            currency=code,
            job_description=job,
            wallet_address=wallet,
            due_date=due,
            custom_notes=(custom_notes or "").strip(),
            client_name=client_name,
            client_email=client_email,
            status=PENDING_PAYMENT,
            fiat_equivalent=mock_fiat_equivalent(code, parsed_amount),
            is_recurring=False,
            created_at=datetime.now(timezone.utc),
        )
        saved = self.store.insert_invoice(invoice)
        logger.info(f"Created invoice {saved.id}")
        return saved

    def list_all(self) -> list[Invoice]:
        return self.store.list_invoices()

    def get(self, invoice_id: str) -> Invoice:
        invoice = self.store.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    def mark_paid(self, invoice_id: str) -> tuple[Invoice, bool]:
        """
        Flip an invoice to Paid. This is a user assertion; nothing is verified on-chain.

        Returns:
            (invoice, changed) where `changed` is False if it was already paid.

        Raises:
            NotFoundError: Unknown id.
        """
        invoice = self.get(invoice_id)
        if invoice.is_paid():
            return invoice, False
        paid = replace(invoice, status=PAID, paid_at=datetime.now(timezone.utc))
        if not self.store.replace_invoice(paid):
            raise NotFoundError("Invoice", invoice_id)
        logger.info(f"Invoice {invoice_id} marked paid")
        return paid, True

    def list_summary(self, limit: int = 20) -> str:
        """Formatted list of the newest invoices."""
        invoices = self.list_all()
        if not invoices:
            return "📭 No invoices yet."

        lines = ["🧾 Invoices:\n"]
        for inv in invoices[:limit]:
            mark = "✅" if inv.is_paid() else "⏳"
            origin = " 🔁" if inv.is_recurring else ""
            lines.append(
                f"  {mark} {inv.id}: {format_currency(inv.amount, inv.currency)} "
                f"- due {inv.due_date}{origin}"
            )
        pending = [i for i in invoices if not i.is_paid()]
        if pending:
            outstanding = sum((i.fiat_equivalent for i in pending), Decimal(0))
            lines.append(f"\n⏳ Outstanding: {len(pending)} invoice(s), ~{format_fiat(outstanding)}")
        return "\n".join(lines)

    @staticmethod
    def describe(invoice: Invoice) -> str:
        """Multi-line detail view of one invoice, with its payment link."""
        lines = [f"🧾 {invoice.id} [{invoice.status}]"]
        if invoice.client_name:
            lines.append(f"  👤 {invoice.client_name}" + (f" <{invoice.client_email}>" if invoice.client_email else ""))
        lines += [
            f"  💰 {format_currency(invoice.amount, invoice.currency)} (~{format_fiat(invoice.fiat_equivalent)})",
            f"  📝 {invoice.job_description}",
            f"  📅 Due: {invoice.due_date}",
            f"  🔗 {payment_uri(invoice.currency, invoice.wallet_address, invoice.amount)}",
        ]
        if invoice.is_recurring:
            lines.append(f"  🔁 From subscription {invoice.subscription_id}")
        if invoice.custom_notes:
            lines.append(f"  🗒️ {invoice.custom_notes}")
        if invoice.paid_at:
            lines.append(f"  ✅ Paid at {invoice.paid_at:%Y-%m-%d %H:%M}")
        return "\n".join(lines)
