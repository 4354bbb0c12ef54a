"""In-memory ledger store: groups, rosters and expense histories."""

import logging
from collections.abc import Iterable
from decimal import Decimal

from .exceptions import (
    DuplicateGroupError,
    ExpenseNotFoundError,
    GroupNotFoundError,
    InvalidInputError,
    InvalidMembersError,
    ShareCountMismatchError,
)
from .models import Expense, ExpenseDraft, ExpenseResult, Group
from .parsing import (
    format_amount,
    parse_amount,
    parse_shares,
    split_delimited,
    unique_members,
)

logger = logging.getLogger(__name__)

DEFAULT_SHARE_TOLERANCE = Decimal("0.01")


class LedgerStore:
    """Owns every group, keyed by name.

    Not thread-safe: callers must serialize access.
    """

    def __init__(
        self,
        groups: Iterable[Group] = (),
        share_tolerance: Decimal = DEFAULT_SHARE_TOLERANCE,
    ):
        """Initialize the store, optionally seeded with existing groups."""
        self.share_tolerance = share_tolerance
        self._groups: dict[str, Group] = {group.name: group for group in groups}

    # ========================================================================
    # Group operations
    # ========================================================================

    def create_group(self, name: str, members: str | Iterable[str]) -> Group:
        """
        Create a new group.

        Args:
            name: Unique group name
            members: Pipe-delimited roster or a sequence of names

        Returns:
            The created group

        Raises:
            InvalidInputError: If the name is empty
            DuplicateGroupError: If the name is already taken
        """
        if not name:
            raise InvalidInputError("Group name must not be empty")
        if name in self._groups:
            raise DuplicateGroupError(name)

        group = Group(name=name, members=unique_members(members))
        self._groups[name] = group

        logger.info(f"Created group '{name}' with {len(group.members)} members")
        return group

    def list_groups(self) -> list[str]:
        """All group names, sorted ascending."""
        return sorted(self._groups)

    def get_group(self, name: str) -> Group:
        """Get a group by name."""
        group = self._groups.get(name)
        if group is None:
            raise GroupNotFoundError(name)
        return group

    def get_group_members(self, name: str) -> list[str]:
        """Roster of a group in stored order."""
        return list(self.get_group(name).members)

    def groups(self) -> list[Group]:
        """All groups, sorted by name."""
        return [self._groups[name] for name in self.list_groups()]

    # ========================================================================
    # Expense operations
    # ========================================================================

    def add_expense(self, group_name: str, draft: ExpenseDraft) -> ExpenseResult:
        """
        Validate and append a new expense.

        Nothing is stored and no id is consumed when validation fails.

        Returns:
            The new id, plus a warning if the shares don't add up to the amount
        """
        group = self.get_group(group_name)
        fields, warning = self._build_fields(group, draft)

        expense = Expense(id=group.next_expense_id, **fields)
        message = (
            f"Added expense {expense.id} '{expense.name}' to '{group_name}' "
            f"({format_amount(expense.amount)} paid by {expense.payer})"
        )

        group.next_expense_id += 1
        group.expenses.append(expense)

        logger.info(message)
        return ExpenseResult(id=expense.id, warning=warning)

    def edit_expense(
        self, group_name: str, expense_id: int, draft: ExpenseDraft
    ) -> ExpenseResult:
        """
        Replace every mutable field of an expense, keeping its id.

        A failed validation leaves the stored expense unchanged.
        """
        group = self.get_group(group_name)
        idx = group.find_expense_index(expense_id)
        if idx is None:
            raise ExpenseNotFoundError(group_name, expense_id)

        fields, warning = self._build_fields(group, draft)
        group.expenses[idx] = Expense(id=expense_id, **fields)

        logger.info(f"Edited expense {expense_id} in '{group_name}'")
        return ExpenseResult(id=expense_id, warning=warning)

    def delete_expense(self, group_name: str, expense_id: int) -> Expense:
        """Remove one expense, preserving the order of the rest."""
        group = self.get_group(group_name)
        idx = group.find_expense_index(expense_id)
        if idx is None:
            raise ExpenseNotFoundError(group_name, expense_id)

        expense = group.expenses.pop(idx)
        logger.info(f"Deleted expense {expense_id} from '{group_name}'")
        return expense

    def get_expense(self, group_name: str, expense_id: int) -> Expense:
        """Get a single expense by id."""
        group = self.get_group(group_name)
        idx = group.find_expense_index(expense_id)
        if idx is None:
            raise ExpenseNotFoundError(group_name, expense_id)
        return group.expenses[idx]

    def list_expenses(self, group_name: str) -> list[Expense]:
        """Expenses of a group in insertion order."""
        return list(self.get_group(group_name).expenses)

    # ========================================================================
    # Validation
    # ========================================================================

    def _build_fields(
        self, group: Group, draft: ExpenseDraft
    ) -> tuple[dict, str | None]:
        """
        Validate a draft against the group's roster and resolve its shares.

        Returns:
            Tuple of (expense fields without id, optional warning)
        """
        members = split_delimited(draft.members)
        if not members:
            raise InvalidMembersError("Expense members must not be empty")

        outsiders = [m for m in members if m not in group.members]
        if outsiders:
            raise InvalidMembersError(
                f"Not members of group '{group.name}': {', '.join(outsiders)}"
            )
        if draft.payer not in group.members:
            raise InvalidMembersError(
                f"Payer '{draft.payer}' is not a member of group '{group.name}'"
            )

        amount = parse_amount(draft.amount)

        shares = parse_shares(draft.shares)
        if shares is None:
            equal_share = amount / len(members)
            shares = [equal_share] * len(members)
        elif len(shares) != len(members):
            raise ShareCountMismatchError(len(shares), len(members))

        warning = None
        total = sum(shares, Decimal("0"))
        if abs(total - amount) > self.share_tolerance:
            warning = (
                f"total shares ({format_amount(total)}) do not match "
                f"amount ({format_amount(amount)})"
            )
            logger.warning(f"Expense '{draft.name}' in '{group.name}': {warning}")

        fields = {
            "name": draft.name,
            "category": draft.category,
            "amount": amount,
            "payer": draft.payer,
            "members": members,
            "shares": shares,
            "date": draft.date,
        }
        return fields, warning
