"""
repositories/base.py
--------------------
The persistence contract the services depend on.

Anything that implements `Store` can back the bot: the PostgreSQL store in
production, the in-memory store for local sessions and tests.
"""

from typing import ContextManager, Optional, Protocol

from models.invoice import Invoice
from models.subscription import Subscription


class Store(Protocol):
    # ── Subscriptions ─────────────────────────────────────

    def list_subscriptions(self) -> list[Subscription]: ...

    def get_subscription(self, subscription_id: str) -> Optional[Subscription]: ...

    def add_subscription(self, sub: Subscription) -> Subscription: ...

    def replace_subscription(self, updated: Subscription, expected_version: int) -> bool:
        """Replace only while the stored version equals `expected_version`."""
        ...

    def delete_subscription(self, subscription_id: str) -> bool: ...

    # ── Invoices ──────────────────────────────────────────

    def list_invoices(self) -> list[Invoice]: ...

    def list_invoices_for_subscription(self, subscription_id: str) -> list[Invoice]: ...

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]: ...

    def insert_invoice(self, invoice: Invoice) -> Invoice: ...

    def replace_invoice(self, invoice: Invoice) -> bool: ...

    # ── Transactions ──────────────────────────────────────

    def atomic(self) -> ContextManager[None]:
        """All calls made inside the block commit together or not at all."""
        ...
