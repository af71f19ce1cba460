from pathlib import Path
import logging
import sqlite3
import sys

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== CORE TABLES ======================== */
/* Money columns hold whole centavos. */

/* -------- customers -------- */
CREATE TABLE IF NOT EXISTS customers (
    customer_id        INTEGER PRIMARY KEY AUTOINCREMENT,
    name               TEXT NOT NULL CHECK (length(trim(name)) > 0),
    phone              TEXT,
    address            TEXT,
    notes              TEXT,
    credit_limit_cents INTEGER CHECK (credit_limit_cents IS NULL OR credit_limit_cents >= 0),
    created_at         TEXT NOT NULL DEFAULT (datetime('now','localtime')),
    updated_at         TEXT NOT NULL DEFAULT (datetime('now','localtime'))
);
CREATE INDEX IF NOT EXISTS idx_customers_name ON customers(name);

/* -------- credit (utang) -------- */
CREATE TABLE IF NOT EXISTS credit_transactions (
    credit_transaction_id INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_id           INTEGER NOT NULL,
    product_id            INTEGER,
    product_name          TEXT,
    quantity              INTEGER CHECK (quantity IS NULL OR quantity > 0),
    amount_cents          INTEGER NOT NULL CHECK (amount_cents > 0),
    date                  TEXT NOT NULL DEFAULT (datetime('now','localtime')),
    due_date              TEXT,
    notes                 TEXT,
    created_at            TEXT NOT NULL DEFAULT (datetime('now','localtime')),
    updated_at            TEXT NOT NULL DEFAULT (datetime('now','localtime')),
    FOREIGN KEY (customer_id) REFERENCES customers(customer_id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_credit_transactions_customer ON credit_transactions(customer_id);
CREATE INDEX IF NOT EXISTS idx_credit_transactions_date ON credit_transactions(date);

/* -------- payments -------- */
/* credit_transaction_id is the targeted credit; NULL for an untargeted (FIFO) payment. */
CREATE TABLE IF NOT EXISTS payments (
    payment_id            INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_id           INTEGER NOT NULL,
    credit_transaction_id INTEGER,
    amount_cents          INTEGER NOT NULL CHECK (amount_cents > 0),
    payment_method        TEXT NOT NULL DEFAULT 'cash'
                          CHECK (payment_method IN ('cash','bank_transfer','other')),
    date                  TEXT NOT NULL DEFAULT (datetime('now','localtime')),
    notes                 TEXT,
    created_at            TEXT NOT NULL DEFAULT (datetime('now','localtime')),
    FOREIGN KEY (customer_id) REFERENCES customers(customer_id) ON DELETE CASCADE,
    FOREIGN KEY (credit_transaction_id) REFERENCES credit_transactions(credit_transaction_id) ON DELETE SET NULL
);
CREATE INDEX IF NOT EXISTS idx_payments_customer ON payments(customer_id);
CREATE INDEX IF NOT EXISTS idx_payments_date ON payments(date);

/* -------- allocations: how much of each payment landed on which credit -------- */
CREATE TABLE IF NOT EXISTS payment_allocations (
    allocation_id         INTEGER PRIMARY KEY AUTOINCREMENT,
    payment_id            INTEGER NOT NULL,
    credit_transaction_id INTEGER NOT NULL,
    amount_cents          INTEGER NOT NULL CHECK (amount_cents > 0),
    UNIQUE (payment_id, credit_transaction_id),
    FOREIGN KEY (payment_id) REFERENCES payments(payment_id) ON DELETE CASCADE,
    FOREIGN KEY (credit_transaction_id) REFERENCES credit_transactions(credit_transaction_id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_payment_allocations_payment ON payment_allocations(payment_id);
CREATE INDEX IF NOT EXISTS idx_payment_allocations_credit ON payment_allocations(credit_transaction_id);


/* ======================== VIEWS ======================== */

DROP VIEW IF EXISTS v_credit_transaction_paid;
CREATE VIEW v_credit_transaction_paid AS
SELECT
    ct.credit_transaction_id,
    ct.customer_id,
    ct.amount_cents,
    COALESCE((
        SELECT SUM(pa.amount_cents)
          FROM payment_allocations pa
         WHERE pa.credit_transaction_id = ct.credit_transaction_id
    ), 0) AS amount_paid_cents
FROM credit_transactions ct;


/* ======================== GUARDS ======================== */

/* An allocation can never push a credit past its amount. */
DROP TRIGGER IF EXISTS trg_allocations_no_overpay;
CREATE TRIGGER trg_allocations_no_overpay
BEFORE INSERT ON payment_allocations
FOR EACH ROW
BEGIN
  SELECT CASE
    WHEN COALESCE((SELECT SUM(amount_cents) FROM payment_allocations
                    WHERE credit_transaction_id = NEW.credit_transaction_id), 0)
         + NEW.amount_cents
         > (SELECT amount_cents FROM credit_transactions
             WHERE credit_transaction_id = NEW.credit_transaction_id)
      THEN RAISE(ABORT, 'Allocation exceeds credit amount')
    ELSE 1
  END;
END;

/* Payment and credit must belong to the same customer. */
DROP TRIGGER IF EXISTS trg_allocations_same_customer;
CREATE TRIGGER trg_allocations_same_customer
BEFORE INSERT ON payment_allocations
FOR EACH ROW
BEGIN
  SELECT CASE
    WHEN (SELECT customer_id FROM payments WHERE payment_id = NEW.payment_id)
         IS NOT
         (SELECT customer_id FROM credit_transactions
           WHERE credit_transaction_id = NEW.credit_transaction_id)
      THEN RAISE(ABORT, 'Allocation crosses customers')
    ELSE 1
  END;
END;

/* Allocations are write-once; reversal deletes the payment. */
DROP TRIGGER IF EXISTS trg_allocations_no_update;
CREATE TRIGGER trg_allocations_no_update
BEFORE UPDATE ON payment_allocations
FOR EACH ROW
BEGIN
  SELECT RAISE(ABORT, 'Allocations are immutable');
END;

/* A credit's amount is frozen once anything is paid against it. */
DROP TRIGGER IF EXISTS trg_credit_amount_locked_after_payment;
CREATE TRIGGER trg_credit_amount_locked_after_payment
BEFORE UPDATE OF amount_cents ON credit_transactions
FOR EACH ROW
WHEN NEW.amount_cents <> OLD.amount_cents
 AND EXISTS (SELECT 1 FROM payment_allocations
              WHERE credit_transaction_id = OLD.credit_transaction_id)
BEGIN
  SELECT RAISE(ABORT, 'Credit amount is locked after payment');
END;
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply the (idempotent) schema on an open connection."""
    conn.executescript(SQL)


def init_schema(db_path: Path | str = "sari_store.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        apply_schema(conn)
        conn.commit()
    finally:
        conn.close()
    _log.info("schema applied to %s", db_path)


if __name__ == "__main__":
    # python -m sari_store.database.schema [db_path]
    from ..config import DB_PATH
    from ..utils.loggers import get_logger

    get_logger()
    init_schema(sys.argv[1] if len(sys.argv) > 1 else DB_PATH)
