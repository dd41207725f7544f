"""
services/schedule.py
--------------------
Pure scheduling rules for subscriptions: when one is due, and how its
schedule moves forward once an invoice has been generated.
"""

from dataclasses import replace
from datetime import date

from models.subscription import Subscription
from utils.dates import DateLike, add_interval, to_date


def is_due(sub: Subscription, today: DateLike) -> bool:
    """
    True if the subscription is Active and its next invoice date has arrived.

    Only calendar dates are compared; any time of day on `today` is ignored.

    Raises:
        ValueError: If `today` or the subscription's next_invoice_date is malformed.
    """
    if not sub.is_active():
        return False
    return to_date(sub.next_invoice_date, "next_invoice_date") <= to_date(today, "today")


def advance(sub: Subscription, generation_date: DateLike) -> Subscription:
    """
    Return a copy of `sub` moved on by one cycle from `generation_date`.

    The new next_invoice_date counts from the generation date, not from the
    old due date, so an overdue subscription catches up one cycle per pass.
    The input record is left untouched.
    """
    generated_on: date = to_date(generation_date, "generation_date")
    return replace(
        sub,
        last_invoice_date=generated_on,
        next_invoice_date=add_interval(generated_on, sub.frequency),
        total_invoices_generated=sub.total_invoices_generated + 1,
    )
