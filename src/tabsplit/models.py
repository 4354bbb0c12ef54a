"""Pydantic domain models for tabsplit."""

from decimal import Decimal

from pydantic import BaseModel, Field

# ============================================================================
# Ledger Models
# ============================================================================


class Expense(BaseModel):
    """A recorded expense inside a group."""

    id: int
    name: str
    category: str = ""
    amount: Decimal
    payer: str
    members: list[str]
    shares: list[Decimal]  # parallel to members
    date: str = ""


class Group(BaseModel):
    """A named group with its roster and expense history."""

    name: str
    members: list[str] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    next_expense_id: int = 1  # never decremented, ids are not reused

    def find_expense_index(self, expense_id: int) -> int | None:
        """Position of an expense in the history, or None."""
        for idx, expense in enumerate(self.expenses):
            if expense.id == expense_id:
                return idx
        return None


# ============================================================================
# Operation Models
# ============================================================================


class ExpenseDraft(BaseModel):
    """User-supplied fields for adding or editing an expense.

    ``members`` and ``shares`` accept either a pipe-delimited string (the
    boundary format) or a list. Omitted shares mean an equal split.
    """

    name: str
    category: str = ""
    amount: Decimal | int | float | str
    payer: str
    members: str | list[str]
    shares: str | list[Decimal | int | float | str] | None = None
    date: str = ""


class ExpenseResult(BaseModel):
    """Outcome of a successful add or edit."""

    id: int
    warning: str | None = None  # set when shares don't sum to the amount


# ============================================================================
# Settlement Models
# ============================================================================


class MemberBalance(BaseModel):
    """A member's net position: positive = is owed, negative = owes."""

    member: str
    balance: Decimal


class Transfer(BaseModel):
    """A single payment from a debtor to a creditor."""

    debtor: str
    creditor: str
    amount: Decimal


class SettlementPlan(BaseModel):
    """Balances and the transfers that zero them."""

    group_name: str
    balances: list[MemberBalance]
    transfers: list[Transfer]

    @property
    def total_transferred(self) -> Decimal:
        """Total amount moved by all transfers."""
        return sum((t.amount for t in self.transfers), Decimal("0"))
