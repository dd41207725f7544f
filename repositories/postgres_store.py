"""
repositories/postgres_store.py
------------------------------
PostgreSQL-backed Store built on the table repositories.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from db.connection import transaction
from models.invoice import Invoice
from models.subscription import Subscription
from repositories.invoice_repo import InvoiceRepository
from repositories.subscription_repo import SubscriptionRepository


class PostgresStore:
    """
    Store implementation over psycopg2.

    Outside `atomic()` each call commits on its own. Inside it, every call
    shares the block's connection and the block commits once at the end.
    """

    def __init__(self):
        self.subscriptions = SubscriptionRepository()
        self.invoices = InvoiceRepository()
        self._conn = None

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if self._conn is not None:
            # Nested block joins the outer transaction
            yield
            return
        with transaction() as conn:
            self._conn = conn
            try:
                yield
            finally:
                self._conn = None

    # ── Subscriptions ─────────────────────────────────────

    def list_subscriptions(self) -> list[Subscription]:
        return self.subscriptions.get_all(conn=self._conn)

    def get_subscription(self, subscription_id: str) -> Optional[Subscription]:
        return self.subscriptions.get_by_id(subscription_id, conn=self._conn)

    def add_subscription(self, sub: Subscription) -> Subscription:
        return self.subscriptions.add(sub, conn=self._conn)

    def replace_subscription(self, updated: Subscription, expected_version: int) -> bool:
        replaced = self.subscriptions.replace(updated, expected_version, conn=self._conn)
        if replaced:
            updated.version = expected_version + 1
        return replaced

    def delete_subscription(self, subscription_id: str) -> bool:
        return self.subscriptions.delete(subscription_id, conn=self._conn)

    # ── Invoices ──────────────────────────────────────────

    def list_invoices(self) -> list[Invoice]:
        return self.invoices.get_all(conn=self._conn)

    def list_invoices_for_subscription(self, subscription_id: str) -> list[Invoice]:
        return self.invoices.get_by_subscription(subscription_id, conn=self._conn)

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        return self.invoices.get_by_id(invoice_id, conn=self._conn)

    def insert_invoice(self, invoice: Invoice) -> Invoice:
        return self.invoices.add(invoice, conn=self._conn)

    def replace_invoice(self, invoice: Invoice) -> bool:
        return self.invoices.update_status(invoice, conn=self._conn)
