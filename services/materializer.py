"""
services/materializer.py
------------------------
Builds the one-off invoice a subscription produces for a cycle.
"""

from datetime import datetime, timezone
from typing import Optional

from models.invoice import Invoice, PENDING_PAYMENT
from models.subscription import Subscription
from utils.dates import DateLike, add_months, to_date
from utils.ids import generate_invoice_id

# Generated invoices are due this many months after generation, whatever the
# subscription's own frequency.
INVOICE_DUE_MONTHS = 1


def materialize(
    sub: Subscription,
    generation_date: Optional[DateLike] = None,
    created_at: Optional[datetime] = None,
) -> Invoice:
    """
    Create (but do not persist) an invoice for one cycle of `sub`.

    Payment terms are copied verbatim; the fiat valuation is the
    subscription's creation-time snapshot. The caller is expected to have
    checked the subscription is due.

    Args:
        sub: The subscription being billed.
        generation_date: Calendar date of generation; defaults to `created_at`'s date.
        created_at: Creation instant; defaults to now (UTC).
    """
    created_at = created_at or datetime.now(timezone.utc)
    generated_on = to_date(generation_date if generation_date is not None else created_at, "generation_date")

    return Invoice(
        id=generate_invoice_id(),
        amount=sub.amount,
        currency=sub.currency,
        job_description=sub.job_description,
        wallet_address=sub.wallet_address,
        custom_notes=sub.custom_notes,
        client_name=sub.client_name,
        client_email=sub.client_email,
        due_date=add_months(generated_on, INVOICE_DUE_MONTHS),
        status=PENDING_PAYMENT,
        created_at=created_at,
        fiat_equivalent=sub.fiat_equivalent,
        subscription_id=sub.id,
        is_recurring=True,
    )
