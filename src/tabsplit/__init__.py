"""tabsplit - Track shared expenses and settle group balances."""

__version__ = "0.1.0"

from .api import LedgerAPI
from .config import Settings, load_settings
from .db import Database
from .models import (
    Expense,
    ExpenseDraft,
    ExpenseResult,
    Group,
    MemberBalance,
    SettlementPlan,
    Transfer,
)
from .service import LedgerService
from .settlement import compute_balances, settle, simplify_debts
from .store import LedgerStore

__all__ = [
    "LedgerAPI",
    "Settings",
    "load_settings",
    "Database",
    "Expense",
    "ExpenseDraft",
    "ExpenseResult",
    "Group",
    "MemberBalance",
    "SettlementPlan",
    "Transfer",
    "LedgerService",
    "compute_balances",
    "settle",
    "simplify_debts",
    "LedgerStore",
]
