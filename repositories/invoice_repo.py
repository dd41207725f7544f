"""
repositories/invoice_repo.py
----------------------------
Data access layer for invoices.
All SQL queries related to the `invoices` table live here.
"""

from decimal import Decimal
from typing import Optional

from db.connection import transaction
from models.invoice import Invoice
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "id, client_name, client_email, amount, currency, job_description, "
    "wallet_address, custom_notes, due_date, status, created_at, "
    "fiat_equivalent, subscription_id, is_recurring, paid_at"
)


class InvoiceRepository:
    """Repository for CRUD operations on the invoices table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, invoice: Invoice, conn=None) -> Invoice:
        """
        Insert a new invoice.

        Returns:
            The same object with `created_at` as stored by the database.
        """
        sql = f"""
            INSERT INTO invoices ({_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING created_at;
        """
        params = (
            invoice.id, invoice.client_name, invoice.client_email,
            invoice.amount, invoice.currency, invoice.job_description,
            invoice.wallet_address, invoice.custom_notes, invoice.due_date,
            invoice.status, invoice.created_at, invoice.fiat_equivalent,
            invoice.subscription_id, invoice.is_recurring, invoice.paid_at,
        )
        try:
            with transaction(conn) as tx:
                with tx.cursor() as cur:
                    cur.execute(sql, params)
                    invoice.created_at = cur.fetchone()[0]
            logger.info(f"Added invoice {invoice.id} ({invoice.amount} {invoice.currency})")
            return invoice
        except Exception as e:
            logger.error(f"Failed to add invoice {invoice.id}: {e}")
            raise

    # ── READ ──────────────────────────────────────────────

    def get_all(self, conn=None) -> list[Invoice]:
        """Get every invoice, newest first."""
        sql = f"SELECT {_COLUMNS} FROM invoices ORDER BY created_at DESC;"
        with transaction(conn) as tx:
            with tx.cursor() as cur:
                cur.execute(sql)
                return [self._row_to_invoice(r) for r in cur.fetchall()]

    def get_by_subscription(self, subscription_id: str, conn=None) -> list[Invoice]:
        """Get the invoices generated from one subscription, newest first."""
        sql = f"""
            SELECT {_COLUMNS} FROM invoices
            WHERE subscription_id = %s
            ORDER BY created_at DESC;
        """
        with transaction(conn) as tx:
            with tx.cursor() as cur:
                cur.execute(sql, (subscription_id,))
                return [self._row_to_invoice(r) for r in cur.fetchall()]

    def get_by_id(self, invoice_id: str, conn=None) -> Optional[Invoice]:
        """Fetch a single invoice by id."""
        sql = f"SELECT {_COLUMNS} FROM invoices WHERE id = %s;"
        with transaction(conn) as tx:
            with tx.cursor() as cur:
                cur.execute(sql, (invoice_id,))
                row = cur.fetchone()
                return self._row_to_invoice(row) if row else None

    # ── UPDATE ────────────────────────────────────────────

    def update_status(self, invoice: Invoice, conn=None) -> bool:
        """Persist an invoice's status and paid_at. Other fields are immutable."""
        sql = "UPDATE invoices SET status = %s, paid_at = %s WHERE id = %s;"
        try:
            with transaction(conn) as tx:
                with tx.cursor() as cur:
                    cur.execute(sql, (invoice.status, invoice.paid_at, invoice.id))
                    updated = cur.rowcount > 0
            return updated
        except Exception as e:
            logger.error(f"Failed to update invoice {invoice.id}: {e}")
            raise

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_invoice(row: tuple) -> Invoice:
        """Convert a database row tuple to an Invoice domain object."""
        return Invoice(
            id=row[0],
            client_name=row[1],
            client_email=row[2],
            amount=Decimal(str(row[3])),
            currency=row[4],
            job_description=row[5],
            wallet_address=row[6],
            custom_notes=row[7] or "",
            due_date=row[8],
            status=row[9],
            created_at=row[10],
            fiat_equivalent=Decimal(str(row[11])),
            subscription_id=row[12],
            is_recurring=row[13],
            paid_at=row[14],
        )
