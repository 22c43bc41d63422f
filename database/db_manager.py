import sqlite3
import os
from contextlib import contextmanager
from utils.constants import DB_FILE, DEFAULT_CATEGORIES


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            if self.db_path != ":memory:":
                self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def initialize(self):
        """Create schema and seed defaults."""
        conn = self.get_connection()
        self._create_schema(conn)
        self._seed_defaults(conn)
        conn.commit()

    @contextmanager
    def unit_of_work(self):
        """Commit everything written inside the block, or roll all of it back."""
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS bank_accounts (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                name            TEXT    NOT NULL UNIQUE,
                current_balance REAL    NOT NULL DEFAULT 0.0,
                currency        TEXT    NOT NULL DEFAULT 'ZAR',
                context         TEXT    NOT NULL DEFAULT 'business'
                                CHECK(context IN ('business','personal')),
                is_active       INTEGER NOT NULL DEFAULT 1,
                created_at      TEXT    NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS categories (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                name       TEXT NOT NULL UNIQUE,
                type       TEXT NOT NULL CHECK(type IN ('income','expense','both')),
                color_hex  TEXT NOT NULL DEFAULT '#888888'
            );

            CREATE TABLE IF NOT EXISTS recurring_items (
                id                      INTEGER PRIMARY KEY AUTOINCREMENT,
                name                    TEXT NOT NULL,
                item_type               TEXT NOT NULL
                                        CHECK(item_type IN ('expense','income','retainer')),
                amount                  REAL NOT NULL CHECK(amount > 0),
                currency                TEXT NOT NULL DEFAULT 'ZAR',
                frequency               TEXT NOT NULL CHECK(frequency IN
                                        ('weekly','biweekly','monthly','quarterly','yearly')),
                start_date              TEXT NOT NULL,
                end_date                TEXT,
                next_due_date           TEXT NOT NULL,
                category_id             INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                bank_account_id         INTEGER REFERENCES bank_accounts(id) ON DELETE SET NULL,
                payee_name              TEXT NOT NULL DEFAULT '',
                description             TEXT NOT NULL DEFAULT '',
                auto_create_transaction INTEGER NOT NULL DEFAULT 0,
                is_active               INTEGER NOT NULL DEFAULT 1,
                last_generated_at       TEXT,
                last_processed_date     TEXT,
                context                 TEXT NOT NULL DEFAULT 'business'
                                        CHECK(context IN ('business','personal')),
                created_at              TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at              TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS transactions (
                id                INTEGER PRIMARY KEY AUTOINCREMENT,
                transaction_type  TEXT NOT NULL
                                  CHECK(transaction_type IN ('income','expense','transfer')),
                status            TEXT NOT NULL DEFAULT 'completed'
                                  CHECK(status IN ('pending','completed','reconciled','void')),
                amount            REAL NOT NULL CHECK(amount > 0),
                currency          TEXT NOT NULL DEFAULT 'ZAR',
                transaction_date  TEXT NOT NULL,
                context           TEXT NOT NULL DEFAULT 'business'
                                  CHECK(context IN ('business','personal')),
                category_id       INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                bank_account_id   INTEGER REFERENCES bank_accounts(id) ON DELETE SET NULL,
                description       TEXT NOT NULL DEFAULT '',
                payee_name        TEXT NOT NULL DEFAULT '',
                recurring_item_id INTEGER REFERENCES recurring_items(id) ON DELETE SET NULL,
                created_at        TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS recurring_item_history (
                id                  INTEGER PRIMARY KEY AUTOINCREMENT,
                recurring_item_id   INTEGER NOT NULL
                                    REFERENCES recurring_items(id) ON DELETE CASCADE,
                expected_date       TEXT NOT NULL,
                expected_amount     REAL NOT NULL,
                actual_amount       REAL,
                transaction_id      INTEGER REFERENCES transactions(id) ON DELETE SET NULL,
                status              TEXT NOT NULL DEFAULT 'expected'
                                    CHECK(status IN ('expected','matched','missed','skipped')),
                variance_amount_pct REAL,
                created_at          TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS budgets (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                category_id     INTEGER NOT NULL REFERENCES categories(id) ON DELETE CASCADE,
                period_type     TEXT NOT NULL
                                CHECK(period_type IN ('monthly','quarterly','yearly')),
                period_start    TEXT NOT NULL,
                amount          REAL NOT NULL CHECK(amount >= 0),
                rollover        INTEGER NOT NULL DEFAULT 0,
                rollover_amount REAL NOT NULL DEFAULT 0,
                currency        TEXT NOT NULL DEFAULT 'ZAR',
                context         TEXT NOT NULL DEFAULT 'business'
                                CHECK(context IN ('business','personal')),
                UNIQUE(category_id, period_type, period_start, context)
            );

            CREATE TABLE IF NOT EXISTS notifications (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                title      TEXT NOT NULL,
                body       TEXT NOT NULL DEFAULT '',
                severity   TEXT NOT NULL DEFAULT 'info'
                           CHECK(severity IN ('info','warning','error')),
                key        TEXT NOT NULL DEFAULT '',
                is_read    INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE INDEX IF NOT EXISTS idx_transactions_date        ON transactions(transaction_date);
            CREATE INDEX IF NOT EXISTS idx_transactions_category_id ON transactions(category_id);
            CREATE INDEX IF NOT EXISTS idx_transactions_recurring   ON transactions(recurring_item_id);
            CREATE INDEX IF NOT EXISTS idx_recurring_items_next_due ON recurring_items(next_due_date);
            CREATE INDEX IF NOT EXISTS idx_recurring_history_item   ON recurring_item_history(recurring_item_id);
            CREATE INDEX IF NOT EXISTS idx_budgets_period           ON budgets(period_start);
        """)

    def _seed_defaults(self, conn: sqlite3.Connection):
        for cat in DEFAULT_CATEGORIES:
            conn.execute(
                """INSERT OR IGNORE INTO categories(name, type, color_hex)
                   VALUES (?, ?, ?)""",
                (cat["name"], cat["type"], cat["color_hex"]),
            )

    @staticmethod
    def open(db_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: opens (creating if needed) the database in db_folder or CWD."""
        db_path = os.path.join(db_folder, DB_FILE) if db_folder else DB_FILE
        if db_folder:
            os.makedirs(db_folder, exist_ok=True)
        db = DatabaseManager(db_path)
        db.initialize()
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
