"""
models/subscription.py
----------------------
Domain model for recurring payment plans (subscriptions).
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

# Lifecycle statuses
ACTIVE = "Active"
PAUSED = "Paused"
CANCELLED = "Cancelled"
SUBSCRIPTION_STATUSES = (ACTIVE, PAUSED, CANCELLED)

# Billing frequencies
WEEKLY = "weekly"
MONTHLY = "monthly"
QUARTERLY = "quarterly"
YEARLY = "yearly"
FREQUENCIES = (WEEKLY, MONTHLY, QUARTERLY, YEARLY)


@dataclass
class Subscription:
    """
    Represents a recurring payment plan that produces one invoice per cycle.

    Attributes:
        id: Opaque id ('rec_...'), assigned at creation.
        client_name: Who is billed.
        client_email: Where the invoice goes.
        amount: Amount per cycle, in `currency`.
        currency: One of BTC, ETH, USDT, USDC.
        job_description: Service being billed.
        wallet_address: Recipient wallet for the payment.
        frequency: 'weekly' | 'monthly' | 'quarterly' | 'yearly'.
        start_date: First billing date.
        next_invoice_date: Date the next invoice becomes due for generation.
        end_date: Optional end of the plan (informational).
        last_invoice_date: Date the last invoice was generated, if any.
        total_invoices_generated: Count of invoices generated so far.
        status: 'Active' | 'Paused' | 'Cancelled'.
        custom_notes: Free-form notes copied onto every invoice.
        fiat_equivalent: USD valuation snapshot taken at creation.
        created_at: Creation timestamp.
        version: Bumped by the store on every replacement.
    """
    id: str
    client_name: str
    client_email: str
    amount: Decimal
    currency: str
    job_description: str
    wallet_address: str
    frequency: str
    start_date: date
    next_invoice_date: date
    end_date: Optional[date] = None
    last_invoice_date: Optional[date] = None
    total_invoices_generated: int = 0
    status: str = ACTIVE
    custom_notes: str = ""
    fiat_equivalent: Decimal = Decimal("0")
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = 0

    def is_active(self) -> bool:
        return self.status == ACTIVE

    def __str__(self) -> str:
        return (
            f"{self.status} {self.client_name}: {self.amount} {self.currency} "
            f"({self.frequency}) - Next: {self.next_invoice_date}"
        )
