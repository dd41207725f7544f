"""
repositories/subscription_repo.py
---------------------------------
Data access layer for subscriptions.
All SQL queries related to the `subscriptions` table live here.

Every method takes an optional `conn`: pass one to join a transaction opened
by the caller (see PostgresStore.atomic), leave it out to run standalone.
"""

from decimal import Decimal
from typing import Optional

from db.connection import transaction
from models.subscription import Subscription
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "id, client_name, client_email, amount, currency, job_description, "
    "wallet_address, custom_notes, frequency, start_date, end_date, "
    "next_invoice_date, last_invoice_date, total_invoices_generated, "
    "status, fiat_equivalent, created_at, version"
)


class SubscriptionRepository:
    """Repository for CRUD operations on the subscriptions table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, sub: Subscription, conn=None) -> Subscription:
        """
        Insert a new subscription.

        Args:
            sub: The Subscription to persist. Its id is already assigned.

        Returns:
            The same object.
        """
        sql = f"""
            INSERT INTO subscriptions ({_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s);
        """
        try:
            with transaction(conn) as tx:
                with tx.cursor() as cur:
                    cur.execute(sql, self._to_params(sub))
            logger.info(f"Added subscription {sub.id} for '{sub.client_name}'")
            return sub
        except Exception as e:
            logger.error(f"Failed to add subscription {sub.id}: {e}")
            raise

    # ── READ ──────────────────────────────────────────────

    def get_all(self, conn=None) -> list[Subscription]:
        """Get every subscription, soonest next_invoice_date first."""
        sql = f"SELECT {_COLUMNS} FROM subscriptions ORDER BY next_invoice_date ASC, id ASC;"
        with transaction(conn) as tx:
            with tx.cursor() as cur:
                cur.execute(sql)
                return [self._row_to_subscription(r) for r in cur.fetchall()]

    def get_by_id(self, subscription_id: str, conn=None) -> Optional[Subscription]:
        """Fetch a single subscription by id."""
        sql = f"SELECT {_COLUMNS} FROM subscriptions WHERE id = %s;"
        with transaction(conn) as tx:
            with tx.cursor() as cur:
                cur.execute(sql, (subscription_id,))
                row = cur.fetchone()
                return self._row_to_subscription(row) if row else None

    # ── UPDATE ────────────────────────────────────────────

    def replace(self, sub: Subscription, expected_version: int, conn=None) -> bool:
        """
        Overwrite a subscription if nobody else has replaced it first.

        The row is only updated while its version still equals
        `expected_version`; the stored version is then bumped by one.

        Returns:
            True if the row was updated, False on a version mismatch
            or if the subscription no longer exists.
        """
        sql = """
            UPDATE subscriptions SET
                client_name = %s, client_email = %s, amount = %s, currency = %s,
                job_description = %s, wallet_address = %s, custom_notes = %s,
                frequency = %s, start_date = %s, end_date = %s,
                next_invoice_date = %s, last_invoice_date = %s,
                total_invoices_generated = %s, status = %s, fiat_equivalent = %s,
                version = version + 1
            WHERE id = %s AND version = %s;
        """
        params = (
            sub.client_name, sub.client_email, sub.amount, sub.currency,
            sub.job_description, sub.wallet_address, sub.custom_notes,
            sub.frequency, sub.start_date, sub.end_date,
            sub.next_invoice_date, sub.last_invoice_date,
            sub.total_invoices_generated, sub.status, sub.fiat_equivalent,
            sub.id, expected_version,
        )
        try:
            with transaction(conn) as tx:
                with tx.cursor() as cur:
                    cur.execute(sql, params)
                    updated = cur.rowcount > 0
            if updated:
                logger.info(
                    f"Replaced subscription {sub.id} (v{expected_version} -> v{expected_version + 1})"
                )
            else:
                logger.warning(f"Stale replace for subscription {sub.id} at v{expected_version}")
            return updated
        except Exception as e:
            logger.error(f"Failed to replace subscription {sub.id}: {e}")
            raise

    # ── DELETE ────────────────────────────────────────────

    def delete(self, subscription_id: str, conn=None) -> bool:
        """Delete a subscription by id. Its invoices are left alone."""
        sql = "DELETE FROM subscriptions WHERE id = %s;"
        try:
            with transaction(conn) as tx:
                with tx.cursor() as cur:
                    cur.execute(sql, (subscription_id,))
                    deleted = cur.rowcount > 0
            if deleted:
                logger.info(f"Deleted subscription {subscription_id}")
            return deleted
        except Exception as e:
            logger.error(f"Failed to delete subscription {subscription_id}: {e}")
            raise

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _to_params(sub: Subscription) -> tuple:
        return (
            sub.id, sub.client_name, sub.client_email, sub.amount, sub.currency,
            sub.job_description, sub.wallet_address, sub.custom_notes,
            sub.frequency, sub.start_date, sub.end_date,
            sub.next_invoice_date, sub.last_invoice_date,
            sub.total_invoices_generated, sub.status, sub.fiat_equivalent,
            sub.created_at, sub.version,
        )

    @staticmethod
    def _row_to_subscription(row: tuple) -> Subscription:
        """Convert a database row tuple to a Subscription domain object."""
        return Subscription(
            id=row[0],
            client_name=row[1],
            client_email=row[2],
            amount=Decimal(str(row[3])),
            currency=row[4],
            job_description=row[5],
            wallet_address=row[6],
            custom_notes=row[7] or "",
            frequency=row[8],
            start_date=row[9],
            end_date=row[10],
            next_invoice_date=row[11],
            last_invoice_date=row[12],
            total_invoices_generated=row[13],
            status=row[14],
            fiat_equivalent=Decimal(str(row[15])),
            created_at=row[16],
            version=row[17],
        )
