"""MCP server for tabsplit — exposes the shared-expense ledger as tools for Claude."""

import logging
from dataclasses import dataclass

from mcp.server.fastmcp import FastMCP

from .config import load_settings
from .exceptions import TabSplitError
from .models import ExpenseDraft
from .parsing import format_amount
from .service import LedgerService

logger = logging.getLogger(__name__)

mcp_app = FastMCP("tabsplit")

# ---------------------------------------------------------------------------
# Session state — one MCP server process = one Claude conversation
# ---------------------------------------------------------------------------

WORKFLOW_INSTRUCTIONS = """\
You are keeping track of shared expenses for one or more groups.

1. SETUP: Call create_group with the group name and members separated by "|".
   Call list_groups to see existing groups.

2. RECORD: For each expense, call add_expense. Omit shares for an equal split.
   If the result includes a warning, the shares don't add up to the amount:
   tell the user and offer to fix it with edit_expense.

3. REVIEW: Call list_expenses to show what has been recorded. Use the ids it
   shows for edit_expense and delete_expense.

4. SETTLE: Call settle_group and present the payments as "X pays Y amount".

Amounts are always shown with two decimals.\
"""


@dataclass
class SessionState:
    """Holds the ledger between MCP tool calls within a single conversation."""

    service: LedgerService | None = None


_state = SessionState()


def _ensure_service() -> LedgerService:
    """Lazily initialize the LedgerService (loads thresholds from settings)."""
    if _state.service is None:
        _state.service = LedgerService.from_settings(load_settings())
    return _state.service


def _draft(
    name: str,
    amount: str,
    payer: str,
    members: str,
    shares: str,
    category: str,
    date: str,
) -> ExpenseDraft:
    return ExpenseDraft(
        name=name,
        category=category,
        amount=amount,
        payer=payer,
        members=members,
        shares=shares or None,
        date=date,
    )


# ---------------------------------------------------------------------------
# MCP Tools
# ---------------------------------------------------------------------------


@mcp_app.tool()
def create_group(group_name: str, members: str) -> str:
    """Create a group.

    Args:
        group_name: Unique group name.
        members: Member names separated by "|", e.g. "Alice|Bob|Carol".
    """
    try:
        service = _ensure_service()
        service.create_group(group_name, members)
        roster = service.get_group_members(group_name)
        return f"Created group '{group_name}' with members: {', '.join(roster)}"
    except TabSplitError as e:
        return f"Error: {e}"


@mcp_app.tool()
def list_groups() -> str:
    """List all groups."""
    names = _ensure_service().list_groups()
    if not names:
        return "No groups yet."
    return "Groups:\n" + "\n".join(f"  - {name}" for name in names)


@mcp_app.tool()
def get_group_members(group_name: str) -> str:
    """List the members of a group."""
    try:
        roster = _ensure_service().get_group_members(group_name)
        return f"Members of '{group_name}': {', '.join(roster)}"
    except TabSplitError as e:
        return f"Error: {e}"


@mcp_app.tool()
def add_expense(
    group_name: str,
    name: str,
    amount: str,
    payer: str,
    members: str,
    shares: str = "",
    category: str = "",
    date: str = "",
) -> str:
    """Record an expense.

    Args:
        group_name: Group the expense belongs to.
        name: What the expense was for.
        amount: Total cost, e.g. "90.00".
        payer: Member who paid.
        members: Members sharing the cost, separated by "|".
        shares: Optional amounts per member, separated by "|", same order as
            members. Leave empty for an equal split.
        category: Optional category.
        date: Optional date.
    """
    try:
        result = _ensure_service().add_expense(
            group_name, _draft(name, amount, payer, members, shares, category, date)
        )
    except TabSplitError as e:
        return f"Error: {e}"

    text = f"Added expense {result.id} to '{group_name}'."
    if result.warning:
        text += f"\nWarning: {result.warning}"
    return text


@mcp_app.tool()
def edit_expense(
    group_name: str,
    expense_id: int,
    name: str,
    amount: str,
    payer: str,
    members: str,
    shares: str = "",
    category: str = "",
    date: str = "",
) -> str:
    """Replace all fields of an existing expense (same arguments as add_expense)."""
    try:
        result = _ensure_service().edit_expense(
            group_name,
            expense_id,
            _draft(name, amount, payer, members, shares, category, date),
        )
    except TabSplitError as e:
        return f"Error: {e}"

    text = f"Updated expense {expense_id} in '{group_name}'."
    if result.warning:
        text += f"\nWarning: {result.warning}"
    return text


@mcp_app.tool()
def delete_expense(group_name: str, expense_id: int) -> str:
    """Delete an expense by id."""
    try:
        _ensure_service().delete_expense(group_name, expense_id)
        return f"Deleted expense {expense_id} from '{group_name}'."
    except TabSplitError as e:
        return f"Error: {e}"


@mcp_app.tool()
def list_expenses(group_name: str) -> str:
    """List a group's expenses in the order they were recorded."""
    try:
        expenses = _ensure_service().list_expenses(group_name)
    except TabSplitError as e:
        return f"Error: {e}"

    if not expenses:
        return f"No expenses in '{group_name}'."

    lines = [f"Expenses in '{group_name}' ({len(expenses)} total):"]
    for exp in expenses:
        split = ", ".join(
            f"{member} {format_amount(share)}"
            for member, share in zip(exp.members, exp.shares, strict=True)
        )
        lines.append(
            f"  [{exp.id}] {exp.name} | {exp.category or '-'} | {exp.date or '-'} | "
            f"{format_amount(exp.amount)} paid by {exp.payer} | {split}"
        )
    return "\n".join(lines)


@mcp_app.tool()
def settle_group(group_name: str) -> str:
    """Compute balances and the payments that settle the group."""
    try:
        plan = _ensure_service().settle_group(group_name)
    except TabSplitError as e:
        return f"Error: {e}"

    lines = ["Balances:"]
    for entry in plan.balances:
        lines.append(f"  {entry.member}: {format_amount(entry.balance)}")

    lines.append("")
    if not plan.transfers:
        lines.append("Everyone is settled up.")
        return "\n".join(lines)

    lines.append("Payments:")
    for t in plan.transfers:
        lines.append(f"  {t.debtor} pays {t.creditor} {format_amount(t.amount)}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# MCP Prompt
# ---------------------------------------------------------------------------


@mcp_app.prompt()
def expense_workflow() -> str:
    """Instructions for recording expenses and settling a group."""
    return WORKFLOW_INSTRUCTIONS


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def run_server():
    """Start the MCP server (stdio transport)."""
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    _state.service = LedgerService.from_settings(settings)
    mcp_app.run(transport="stdio")
