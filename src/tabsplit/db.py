"""SQLite snapshot of a ledger store, used to keep CLI state between runs."""

import logging
import sqlite3
from decimal import Decimal
from pathlib import Path

from .models import Expense, Group
from .store import LedgerStore

logger = logging.getLogger(__name__)


class Database:
    """SQLite database manager."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS groups (
                name TEXT PRIMARY KEY,
                next_expense_id INTEGER NOT NULL DEFAULT 1
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS group_members (
                group_name TEXT NOT NULL REFERENCES groups(name),
                position INTEGER NOT NULL,
                member TEXT NOT NULL,
                PRIMARY KEY (group_name, position)
            )
        """
        )

        # Amounts are TEXT so Decimal values survive unchanged
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expenses (
                group_name TEXT NOT NULL REFERENCES groups(name),
                id INTEGER NOT NULL,
                position INTEGER NOT NULL,
                name TEXT NOT NULL,
                category TEXT NOT NULL,
                amount TEXT NOT NULL,
                payer TEXT NOT NULL,
                date TEXT NOT NULL,
                PRIMARY KEY (group_name, id)
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expense_shares (
                group_name TEXT NOT NULL,
                expense_id INTEGER NOT NULL,
                position INTEGER NOT NULL,
                member TEXT NOT NULL,
                share TEXT NOT NULL,
                PRIMARY KEY (group_name, expense_id, position)
            )
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ========================================================================
    # Snapshot operations
    # ========================================================================

    def save_store(self, store: LedgerStore):
        """Replace the stored snapshot with the store's current contents."""
        with self.conn:
            cursor = self.conn.cursor()
            for table in ("expense_shares", "expenses", "group_members", "groups"):
                cursor.execute(f"DELETE FROM {table}")

            for group in store.groups():
                cursor.execute(
                    "INSERT INTO groups (name, next_expense_id) VALUES (?, ?)",
                    (group.name, group.next_expense_id),
                )
                cursor.executemany(
                    """
                    INSERT INTO group_members (group_name, position, member)
                    VALUES (?, ?, ?)
                    """,
                    [(group.name, pos, m) for pos, m in enumerate(group.members)],
                )
                for pos, expense in enumerate(group.expenses):
                    self._insert_expense(cursor, group.name, pos, expense)

        logger.debug(f"Saved {len(store.list_groups())} groups to {self.db_path}")

    def _insert_expense(
        self, cursor: sqlite3.Cursor, group_name: str, position: int, expense: Expense
    ):
        cursor.execute(
            """
            INSERT INTO expenses (
                group_name, id, position, name, category, amount, payer, date
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                group_name,
                expense.id,
                position,
                expense.name,
                expense.category,
                str(expense.amount),
                expense.payer,
                expense.date,
            ),
        )
        cursor.executemany(
            """
            INSERT INTO expense_shares (
                group_name, expense_id, position, member, share
            ) VALUES (?, ?, ?, ?, ?)
            """,
            [
                (group_name, expense.id, pos, member, str(share))
                for pos, (member, share) in enumerate(
                    zip(expense.members, expense.shares, strict=True)
                )
            ],
        )

    def load_store(self, share_tolerance: Decimal | None = None) -> LedgerStore:
        """Rebuild a ledger store from the snapshot."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT name, next_expense_id FROM groups ORDER BY name")
        groups = [
            Group(
                name=row["name"],
                members=self._load_members(row["name"]),
                expenses=self._load_expenses(row["name"]),
                next_expense_id=row["next_expense_id"],
            )
            for row in cursor.fetchall()
        ]

        if share_tolerance is None:
            return LedgerStore(groups)
        return LedgerStore(groups, share_tolerance=share_tolerance)

    def _load_members(self, group_name: str) -> list[str]:
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT member FROM group_members
            WHERE group_name = ?
            ORDER BY position
            """,
            (group_name,),
        )
        return [row["member"] for row in cursor.fetchall()]

    def _load_expenses(self, group_name: str) -> list[Expense]:
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, name, category, amount, payer, date
            FROM expenses
            WHERE group_name = ?
            ORDER BY position
            """,
            (group_name,),
        )
        expenses = []
        for row in cursor.fetchall():
            share_cursor = self.conn.cursor()
            share_cursor.execute(
                """
                SELECT member, share FROM expense_shares
                WHERE group_name = ? AND expense_id = ?
                ORDER BY position
                """,
                (group_name, row["id"]),
            )
            share_rows = share_cursor.fetchall()
            expenses.append(
                Expense(
                    id=row["id"],
                    name=row["name"],
                    category=row["category"],
                    amount=Decimal(row["amount"]),
                    payer=row["payer"],
                    members=[r["member"] for r in share_rows],
                    shares=[Decimal(r["share"]) for r in share_rows],
                    date=row["date"],
                )
            )
        return expenses
