"""JSON string boundary for embedding tabsplit in another host.

Each method takes plain strings and numbers and returns a freshly built JSON
string. Failures come back as ``{"error": <message>, "code": <tag>}`` rather
than raising, so a host without Python exceptions can branch on the tag.
"""

import json
import logging
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from .exceptions import InvalidInputError, TabSplitError
from .models import Expense, ExpenseDraft, SettlementPlan
from .parsing import format_amount
from .service import LedgerService

logger = logging.getLogger(__name__)


def _dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False)


def _error(e: TabSplitError) -> str:
    logger.debug(f"Returning {e.code}: {e}")
    return _dumps({"error": str(e), "code": e.code})


def _ok(**extra: Any) -> str:
    return _dumps({"ok": True, **{k: v for k, v in extra.items() if v is not None}})


def _parse_expense_id(expense_id: int | str) -> int | str:
    """Accept ``3`` or ``"3"``; anything else is kept and won't match."""
    if isinstance(expense_id, int):
        return expense_id
    try:
        return int(expense_id)
    except (TypeError, ValueError):
        return expense_id


def _draft(**fields: Any) -> ExpenseDraft:
    """Build a draft, reporting missing or mistyped fields as invalid input."""
    try:
        return ExpenseDraft(**fields)
    except ValidationError as e:
        bad_fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise InvalidInputError(
            f"Invalid expense fields: {', '.join(bad_fields)}"
        ) from e


def expense_to_dict(expense: Expense) -> dict[str, Any]:
    """Serialize an expense with two-decimal amount and shares."""
    return {
        "id": expense.id,
        "name": expense.name,
        "category": expense.category,
        "amount": format_amount(expense.amount),
        "payer": expense.payer,
        "members": list(expense.members),
        "shares": [format_amount(share) for share in expense.shares],
        "date": expense.date,
    }


def plan_to_dict(plan: SettlementPlan) -> dict[str, Any]:
    """Serialize a settlement plan."""
    return {
        "group": plan.group_name,
        "settlements": [
            {"from": t.debtor, "to": t.creditor, "amount": format_amount(t.amount)}
            for t in plan.transfers
        ],
        "balances": [
            {"member": b.member, "balance": format_amount(b.balance)}
            for b in plan.balances
        ],
    }


class LedgerAPI:
    """JSON-in/JSON-out wrapper around a LedgerService."""

    def __init__(self, service: LedgerService | None = None):
        self.service = service if service is not None else LedgerService()

    def create_group(self, group_name: str, members: str) -> str:
        try:
            self.service.create_group(group_name, members)
        except TabSplitError as e:
            return _error(e)
        return _ok()

    def list_groups(self) -> str:
        return _dumps([{"name": name} for name in self.service.list_groups()])

    def get_group_members(self, group_name: str) -> str:
        try:
            return _dumps(self.service.get_group_members(group_name))
        except TabSplitError as e:
            return _error(e)

    def add_expense(
        self,
        group_name: str,
        name: str,
        category: str,
        amount: Decimal | float | str,
        payer: str,
        members: str,
        shares: str | None = None,
        date: str = "",
    ) -> str:
        try:
            draft = _draft(
                name=name,
                category=category,
                amount=amount,
                payer=payer,
                members=members,
                shares=shares,
                date=date,
            )
            result = self.service.add_expense(group_name, draft)
        except TabSplitError as e:
            return _error(e)
        return _ok(id=result.id, warning=result.warning)

    def edit_expense(
        self,
        group_name: str,
        expense_id: int | str,
        name: str,
        category: str,
        amount: Decimal | float | str,
        payer: str,
        members: str,
        shares: str | None = None,
        date: str = "",
    ) -> str:
        try:
            draft = _draft(
                name=name,
                category=category,
                amount=amount,
                payer=payer,
                members=members,
                shares=shares,
                date=date,
            )
            result = self.service.edit_expense(
                group_name, _parse_expense_id(expense_id), draft
            )
        except TabSplitError as e:
            return _error(e)
        return _ok(warning=result.warning)

    def delete_expense(self, group_name: str, expense_id: int | str) -> str:
        try:
            self.service.delete_expense(group_name, _parse_expense_id(expense_id))
        except TabSplitError as e:
            return _error(e)
        return _ok()

    def list_expenses(self, group_name: str) -> str:
        try:
            expenses = self.service.list_expenses(group_name)
        except TabSplitError as e:
            return _error(e)
        return _dumps(
            {
                "group": group_name,
                "expenses": [expense_to_dict(expense) for expense in expenses],
            }
        )

    def settle_group(self, group_name: str) -> str:
        try:
            plan = self.service.settle_group(group_name)
        except TabSplitError as e:
            return _error(e)
        return _dumps(plan_to_dict(plan))
