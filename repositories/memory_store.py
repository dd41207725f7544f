"""
repositories/memory_store.py
----------------------------
Dict-backed Store. Used for STORE_BACKEND=memory and throughout the tests.

Records are copied on the way in and on the way out, so callers never hold
a reference into the store and must replace records to change them.
"""

import copy
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator, Optional

from models.invoice import Invoice
from models.subscription import Subscription
from utils.logger import get_logger

logger = get_logger(__name__)


class InMemoryStore:
    """Store implementation keeping everything in insertion-ordered dicts."""

    def __init__(self):
        self._subscriptions: dict[str, Subscription] = {}
        self._invoices: dict[str, Invoice] = {}
        # (table, key, previous record or None, position) per write, while in atomic()
        self._undo: Optional[list[tuple]] = None

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        Undo every write made in the block if it raises.

        Only the records the block touches are remembered, so the cost
        does not grow with the size of the tables. Nested blocks join the
        outer one.
        """
        if self._undo is not None:
            yield
            return
        self._undo = []
        try:
            yield
        except Exception:
            for table, key, previous, position in reversed(self._undo):
                _restore(table, key, previous, position)
            logger.warning(f"Rolled back in-memory transaction ({len(self._undo)} write(s))")
            raise
        finally:
            self._undo = None

    def _remember(self, table: dict, key: str, position: Optional[int] = None) -> None:
        if self._undo is not None:
            self._undo.append((table, key, table.get(key), position))

    # ── Subscriptions ─────────────────────────────────────

    def list_subscriptions(self) -> list[Subscription]:
        return [copy.deepcopy(s) for s in self._subscriptions.values()]

    def get_subscription(self, subscription_id: str) -> Optional[Subscription]:
        sub = self._subscriptions.get(subscription_id)
        return copy.deepcopy(sub) if sub else None

    def add_subscription(self, sub: Subscription) -> Subscription:
        if sub.id in self._subscriptions:
            raise ValueError(f"Subscription {sub.id} already exists")
        self._remember(self._subscriptions, sub.id)
        self._subscriptions[sub.id] = copy.deepcopy(sub)
        return sub

    def replace_subscription(self, updated: Subscription, expected_version: int) -> bool:
        current = self._subscriptions.get(updated.id)
        if current is None or current.version != expected_version:
            return False
        self._remember(self._subscriptions, updated.id)
        self._subscriptions[updated.id] = replace(copy.deepcopy(updated), version=expected_version + 1)
        updated.version = expected_version + 1
        return True

    def delete_subscription(self, subscription_id: str) -> bool:
        if subscription_id not in self._subscriptions:
            return False
        self._remember(self._subscriptions, subscription_id, list(self._subscriptions).index(subscription_id))
        del self._subscriptions[subscription_id]
        return True

    # ── Invoices ──────────────────────────────────────────

    def list_invoices(self) -> list[Invoice]:
        return sorted(
            (copy.deepcopy(i) for i in self._invoices.values()),
            key=lambda i: i.created_at,
            reverse=True,
        )

    def list_invoices_for_subscription(self, subscription_id: str) -> list[Invoice]:
        return [i for i in self.list_invoices() if i.subscription_id == subscription_id]

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        inv = self._invoices.get(invoice_id)
        return copy.deepcopy(inv) if inv else None

    def insert_invoice(self, invoice: Invoice) -> Invoice:
        if invoice.id in self._invoices:
            raise ValueError(f"Invoice {invoice.id} already exists")
        self._remember(self._invoices, invoice.id)
        self._invoices[invoice.id] = copy.deepcopy(invoice)
        return invoice

    def replace_invoice(self, invoice: Invoice) -> bool:
        if invoice.id not in self._invoices:
            return False
        self._remember(self._invoices, invoice.id)
        self._invoices[invoice.id] = copy.deepcopy(invoice)
        return True


def _restore(table: dict, key: str, previous, position: Optional[int]) -> None:
    """Put one record back the way it was, keeping insertion order for deletes."""
    if previous is None:
        table.pop(key, None)
    elif key in table:
        table[key] = previous
    else:
        items = list(table.items())
        items.insert(position, (key, previous))
        table.clear()
        table.update(items)
