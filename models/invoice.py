"""
models/invoice.py
-----------------
Domain model for one-off invoices, ad hoc or generated from a subscription.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

PENDING_PAYMENT = "Pending Payment"
PAID = "Paid"
INVOICE_STATUSES = (PENDING_PAYMENT, PAID)


@dataclass
class Invoice:
    """
    Represents a single billable invoice.

    Payment terms are a snapshot: an invoice generated from a subscription
    keeps the values it was created with even if the subscription changes.

    Attributes:
        id: Opaque id ('inv_...').
        amount: Amount due, in `currency`.
        currency: One of BTC, ETH, USDT, USDC.
        job_description: Service being billed.
        wallet_address: Recipient wallet for the payment.
        due_date: Payment due date.
        status: 'Pending Payment' | 'Paid'.
        custom_notes: Free-form notes.
        client_name: Billed client, when known.
        client_email: Client email, when known.
        fiat_equivalent: USD valuation snapshot.
        subscription_id: Originating subscription, for generated invoices.
        is_recurring: True when generated from a subscription.
        created_at: Creation timestamp.
        paid_at: When the invoice was marked paid.
    """
    id: str
    amount: Decimal
    currency: str
    job_description: str
    wallet_address: str
    due_date: date
    status: str = PENDING_PAYMENT
    custom_notes: str = ""
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    fiat_equivalent: Decimal = Decimal("0")
    subscription_id: Optional[str] = None
    is_recurring: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    paid_at: Optional[datetime] = None

    def is_paid(self) -> bool:
        """Returns True once the invoice has been marked paid."""
        return self.status == PAID

    def __str__(self) -> str:
        origin = f" | from {self.subscription_id}" if self.is_recurring else ""
        return f"{self.amount} {self.currency} | {self.status} | due {self.due_date}{origin}"
