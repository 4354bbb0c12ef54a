"""Service layer that composes the ledger store and the settlement engine.

Adapters (JSON API, MCP server, CLI) talk to this class only, so the
business rules live in exactly one place.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal

from .config import Settings
from .models import Expense, ExpenseDraft, ExpenseResult, SettlementPlan
from .parsing import format_amount
from .settlement import DUST_THRESHOLD, settle
from .store import LedgerStore

logger = logging.getLogger(__name__)


class LedgerService:
    """Operations over a single ledger store."""

    def __init__(
        self,
        store: LedgerStore | None = None,
        dust_threshold: Decimal = DUST_THRESHOLD,
    ):
        """Initialize the service."""
        self.store = store if store is not None else LedgerStore()
        self.dust_threshold = dust_threshold

    @classmethod
    def from_settings(
        cls, settings: Settings, store: LedgerStore | None = None
    ) -> "LedgerService":
        """Build a service whose thresholds come from settings."""
        if store is None:
            store = LedgerStore(share_tolerance=settings.share_tolerance)
        else:
            store.share_tolerance = settings.share_tolerance
        return cls(store, dust_threshold=settings.dust_threshold)

    # Groups

    def create_group(self, name: str, members: str | Iterable[str]) -> None:
        """Create a group from a roster string or list."""
        self.store.create_group(name, members)

    def list_groups(self) -> list[str]:
        """List group names, sorted."""
        return self.store.list_groups()

    def get_group_members(self, name: str) -> list[str]:
        """Get a group's roster in stored order."""
        return self.store.get_group_members(name)

    # Expenses

    def add_expense(self, group_name: str, draft: ExpenseDraft) -> ExpenseResult:
        """Record a new expense and return its id and any warning."""
        return self.store.add_expense(group_name, draft)

    def edit_expense(
        self, group_name: str, expense_id: int, draft: ExpenseDraft
    ) -> ExpenseResult:
        """Replace an expense's fields, keeping its id."""
        return self.store.edit_expense(group_name, expense_id, draft)

    def delete_expense(self, group_name: str, expense_id: int) -> None:
        """Remove an expense by id."""
        self.store.delete_expense(group_name, expense_id)

    def list_expenses(self, group_name: str) -> list[Expense]:
        """List a group's expenses in insertion order."""
        return self.store.list_expenses(group_name)

    # Settlement

    def settle_group(self, group_name: str) -> SettlementPlan:
        """
        Compute the settlement plan for a group.

        Reads a snapshot of the group and never mutates it, so calling this
        twice on an unchanged group gives identical results.

        Raises:
            GroupNotFoundError: If the group doesn't exist
        """
        group = self.store.get_group(group_name)
        plan = settle(group, dust=self.dust_threshold)

        logger.info(
            f"Settled '{group_name}': {len(plan.transfers)} transfers, "
            f"total {format_amount(plan.total_transferred)}"
        )
        return plan
