"""
services/subscription_service.py
--------------------------------
Business logic for creating and managing subscriptions.
"""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from models.invoice import Invoice
from models.subscription import (
    ACTIVE, CANCELLED, MONTHLY, PAUSED, QUARTERLY, WEEKLY, YEARLY, Subscription,
)
from repositories import get_store
from repositories.base import Store
from services import validation
from utils.dates import DateLike
from utils.errors import ConcurrentUpdateError, NotFoundError
from utils.formatting import format_currency, format_fiat, frequency_label, mock_fiat_equivalent
from utils.ids import generate_subscription_id
from utils.logger import get_logger

logger = get_logger(__name__)

# Cycles per month, for normalizing commitments
_PER_MONTH = {
    WEEKLY: Decimal(52) / Decimal(12),
    MONTHLY: Decimal(1),
    QUARTERLY: Decimal(1) / Decimal(3),
    YEARLY: Decimal(1) / Decimal(12),
}


class SubscriptionService:
    """
    Handles all business logic for subscriptions.

    Responsibilities:
        - Validate and create subscriptions.
        - Pause, resume, cancel and delete them.
        - Summarize them for display.
    """

    def __init__(self, store: Optional[Store] = None):
        self.store = store or get_store()

    def create(
        self,
        client_name: str,
        client_email: str,
        amount,
        currency: str,
        job_description: str,
        wallet_address: str,
        frequency: str,
        start_date: DateLike,
        end_date: Optional[DateLike] = None,
        custom_notes: str = "",
    ) -> Subscription:
        """
        Validate the form and save a new Active subscription.

        The first invoice is generated on `start_date`. The USD valuation is
        taken now and never refreshed.

        Raises:
            ValidationError: With one message per bad field.
        """
        errors: dict[str, str] = {}
        name = validation.require_text(errors, "client_name", client_name, "Client name")
        email = validation.check_email(errors, client_email)
        parsed_amount = validation.check_amount(errors, amount)
        code = validation.check_currency(errors, currency)
        job = validation.require_text(errors, "job_description", job_description, "Job description")
        wallet = validation.require_text(errors, "wallet_address", wallet_address, "Wallet address")
        freq = validation.check_frequency(errors, frequency)
        start = validation.check_date(errors, "start_date", start_date, "Start date")
        end = validation.check_date(errors, "end_date", end_date, "End date", required=False)
        if start and end and end < start:
            errors["end_date"] = "End date must be on or after the start date"
        validation.raise_if_errors(errors)

        sub = Subscription(
            id=generate_subscription_id(),
            client_name=name,
            client_email=email,
            amount=parsed_amount,
            currency=code,
            job_description=job,
            wallet_address=wallet,
            frequency=freq,
            start_date=start,
            end_date=end,
            next_invoice_date=start,
            custom_notes=(custom_notes or "").strip(),
            status=ACTIVE,
            total_invoices_generated=0,
            fiat_equivalent=mock_fiat_equivalent(code, parsed_amount),
            created_at=datetime.now(timezone.utc),
        )
        self.store.add_subscription(sub)
        logger.info(f"Created subscription {sub.id} ({freq}) for '{name}'")
        return sub

    def list_all(self) -> list[Subscription]:
        return self.store.list_subscriptions()

    def get(self, subscription_id: str) -> Subscription:
        """Fetch a subscription or raise NotFoundError."""
        sub = self.store.get_subscription(subscription_id)
        if sub is None:
            raise NotFoundError("Subscription", subscription_id)
        return sub

    def invoices_for(self, subscription_id: str) -> list[Invoice]:
        """Invoices generated from a subscription, found by back-reference."""
        return self.store.list_invoices_for_subscription(subscription_id)

    def toggle_status(self, subscription_id: str) -> Subscription:
        """
        Flip Active <-> Paused. Schedule fields are left as they are.

        Raises:
            NotFoundError: Unknown id.
            ValueError: The subscription is Cancelled.
        """
        sub = self.get(subscription_id)
        if sub.status == CANCELLED:
            raise ValueError(f"Subscription {subscription_id} is cancelled and cannot be resumed")
        new_status = PAUSED if sub.status == ACTIVE else ACTIVE
        return self._set_status(sub, new_status)

    def cancel(self, subscription_id: str) -> Subscription:
        """Stop a subscription for good. Already-generated invoices are kept."""
        sub = self.get(subscription_id)
        if sub.status == CANCELLED:
            return sub
        return self._set_status(sub, CANCELLED)

    def delete(self, subscription_id: str) -> bool:
        """Remove a subscription. Its invoices stay, with a dangling back-reference."""
        deleted = self.store.delete_subscription(subscription_id)
        if deleted:
            logger.info(f"Deleted subscription {subscription_id}")
        return deleted

    def monthly_commitment(self, subs: Optional[list[Subscription]] = None) -> Decimal:
        """USD billed per month across Active subscriptions, at creation-time rates."""
        subs = self.list_all() if subs is None else subs
        total = sum(
            (s.fiat_equivalent * _PER_MONTH.get(s.frequency, Decimal(1)) for s in subs if s.is_active()),
            Decimal(0),
        )
        return total.quantize(Decimal("0.01"))

    def list_summary(self) -> str:
        """
        Get a formatted list of all subscriptions.

        Returns:
            Formatted string or "no subscriptions" message.
        """
        subs = self.list_all()
        if not subs:
            return "📭 No recurring payments yet."

        lines = ["🔁 Recurring payments:\n"]
        for s in subs:
            lines.append(
                f"  {s.id} [{s.status}] {s.client_name}: "
                f"{format_currency(s.amount, s.currency)} "
                f"({frequency_label(s.frequency)}) - next: {s.next_invoice_date}"
            )
        total = self.monthly_commitment(subs)
        if total > 0:
            lines.append(f"\n💵 Monthly recurring revenue: {format_fiat(total)}")
        return "\n".join(lines)

    @staticmethod
    def describe(sub: Subscription, invoices: Optional[list[Invoice]] = None) -> str:
        """Multi-line detail view of one subscription, with its generated invoices if given."""
        lines = [
            f"🔁 {sub.id} [{sub.status}]",
            f"  👤 {sub.client_name} <{sub.client_email}>",
            f"  💰 {format_currency(sub.amount, sub.currency)} (~{format_fiat(sub.fiat_equivalent)})",
            f"  📝 {sub.job_description}",
            f"  👛 {sub.wallet_address}",
            f"  🔄 {frequency_label(sub.frequency)} from {sub.start_date}"
            + (f" until {sub.end_date}" if sub.end_date else ""),
            f"  📅 Next invoice: {sub.next_invoice_date}",
            f"  🧾 Invoices generated: {sub.total_invoices_generated}"
            + (f" (last {sub.last_invoice_date})" if sub.last_invoice_date else ""),
        ]
        if sub.custom_notes:
            lines.append(f"  🗒️ {sub.custom_notes}")
        if invoices:
            lines.append("\n  Generated invoices:")
            for inv in invoices:
                mark = "✅" if inv.is_paid() else "⏳"
                lines.append(f"    {mark} {inv.id} - due {inv.due_date}")
        return "\n".join(lines)

    def _set_status(self, sub: Subscription, status: str) -> Subscription:
        updated = replace(sub, status=status)
        if not self.store.replace_subscription(updated, expected_version=sub.version):
            raise ConcurrentUpdateError(sub.id, sub.version)
        logger.info(f"Subscription {sub.id}: {sub.status} -> {status}")
        return updated
