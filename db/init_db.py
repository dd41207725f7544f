"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Subscriptions table: recurring payment plans that generate invoices
CREATE TABLE IF NOT EXISTS subscriptions (
    id                       VARCHAR(40) PRIMARY KEY,
    client_name              VARCHAR(200) NOT NULL,
    client_email             VARCHAR(320) NOT NULL,
    amount                   NUMERIC(24,8) NOT NULL CHECK (amount > 0),
    currency                 VARCHAR(5) NOT NULL CHECK (currency IN ('BTC', 'ETH', 'USDT', 'USDC')),
    job_description          TEXT NOT NULL,
    wallet_address           VARCHAR(200) NOT NULL,
    custom_notes             TEXT NOT NULL DEFAULT '',
    frequency                VARCHAR(20) NOT NULL,
    start_date               DATE NOT NULL,
    end_date                 DATE,
    next_invoice_date        DATE NOT NULL,
    last_invoice_date        DATE,
    total_invoices_generated INT NOT NULL DEFAULT 0 CHECK (total_invoices_generated >= 0),
    status                   VARCHAR(20) NOT NULL DEFAULT 'Active'
                             CHECK (status IN ('Active', 'Paused', 'Cancelled')),
    fiat_equivalent          NUMERIC(18,2) NOT NULL DEFAULT 0,
    created_at               TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    version                  INT NOT NULL DEFAULT 0
);

-- Invoices table: one-off invoices, ad hoc or generated from a subscription
CREATE TABLE IF NOT EXISTS invoices (
    id                VARCHAR(40) PRIMARY KEY,
    client_name       VARCHAR(200),
    client_email      VARCHAR(320),
    amount            NUMERIC(24,8) NOT NULL CHECK (amount > 0),
    currency          VARCHAR(5) NOT NULL,
    job_description   TEXT NOT NULL,
    wallet_address    VARCHAR(200) NOT NULL,
    custom_notes      TEXT NOT NULL DEFAULT '',
    due_date          DATE NOT NULL,
    status            VARCHAR(20) NOT NULL DEFAULT 'Pending Payment'
                      CHECK (status IN ('Pending Payment', 'Paid')),
    created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    fiat_equivalent   NUMERIC(18,2) NOT NULL DEFAULT 0,
    -- no FK: deleting a subscription leaves its invoices untouched
    subscription_id   VARCHAR(40),
    is_recurring      BOOLEAN NOT NULL DEFAULT FALSE,
    paid_at           TIMESTAMPTZ
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_subscriptions_due ON subscriptions(next_invoice_date) WHERE status = 'Active';
CREATE INDEX IF NOT EXISTS idx_invoices_subscription ON invoices(subscription_id);
CREATE INDEX IF NOT EXISTS idx_invoices_created ON invoices(created_at);
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise
    finally:
        release_connection(conn)


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    print("Database schema created successfully.")
