"""CLI for tabsplit using Typer."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .config import load_settings
from .db import Database
from .exceptions import TabSplitError
from .mcp_server import run_server
from .models import ExpenseDraft, SettlementPlan
from .parsing import format_amount
from .service import LedgerService
from .ui import select_member_interactive

app = typer.Typer(
    name="tabsplit",
    help="Track shared expenses and work out who pays whom",
)

console = Console()

DB_OPTION = typer.Option(None, "--db", help="Ledger database (default from settings)")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose output")


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@contextmanager
def open_ledger(db_path: Path | None, save: bool = False) -> Iterator[LedgerService]:
    """
    Load the ledger snapshot, yield a service over it, and optionally save.

    The snapshot is only written back if the block finishes without error.
    """
    overrides = {"database_path": db_path} if db_path else {}
    settings = load_settings(**overrides)
    db = Database(settings.database_path)
    try:
        store = db.load_store(share_tolerance=settings.share_tolerance)
        service = LedgerService.from_settings(settings, store)
        yield service
        if save:
            db.save_store(service.store)
    finally:
        db.close()


def fail(e: Exception, verbose: bool):
    """Report an error and exit non-zero."""
    console.print(f"\n[bold red]Error:[/bold red] {e}")
    if verbose:
        raise e
    sys.exit(1)


def format_money(amount: Decimal, use_color: bool = True) -> str:
    """
    Format a balance with sign coloring.

    Negative amounts use parentheses: (30.00)
    """
    text = format_amount(abs(amount))
    if amount < 0 and format_amount(amount) != "0.00":
        return f"([red]{text}[/red])" if use_color else f"({text})"
    return f" [green]{text}[/green] " if use_color else f" {text} "


# ============================================================================
# Group commands
# ============================================================================


@app.command("create-group")
def create_group(
    name: str = typer.Argument(..., help="Group name"),
    members: str = typer.Argument(..., help="Members separated by '|'"),
    db_path: Path | None = DB_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Create a new group."""
    setup_logging(verbose)
    try:
        with open_ledger(db_path, save=True) as service:
            service.create_group(name, members)
            roster = service.get_group_members(name)
    except TabSplitError as e:
        fail(e, verbose)

    console.print(
        f"[bold green]✓ Created group '{name}'[/bold green] "
        f"with {len(roster)} members: {', '.join(roster)}"
    )


@app.command()
def groups(db_path: Path | None = DB_OPTION, verbose: bool = VERBOSE_OPTION):
    """List all groups."""
    setup_logging(verbose)
    try:
        with open_ledger(db_path) as service:
            names = service.list_groups()
    except TabSplitError as e:
        fail(e, verbose)

    if not names:
        console.print("[yellow]No groups yet.[/yellow]")
        return
    for name in names:
        console.print(name)


@app.command()
def members(
    group: str = typer.Argument(..., help="Group name"),
    db_path: Path | None = DB_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Show a group's members."""
    setup_logging(verbose)
    try:
        with open_ledger(db_path) as service:
            roster = service.get_group_members(group)
    except TabSplitError as e:
        fail(e, verbose)

    for member in roster:
        console.print(member)


# ============================================================================
# Expense commands
# ============================================================================


@app.command()
def add(
    group: str = typer.Argument(..., help="Group name"),
    name: str = typer.Option(..., "--name", "-n", help="Expense description"),
    amount: str = typer.Option(..., "--amount", "-a", help="Total cost"),
    members: str = typer.Option(
        ..., "--members", "-m", help="Members sharing the cost, separated by '|'"
    ),
    payer: str | None = typer.Option(
        None, "--payer", "-p", help="Who paid (prompted if omitted)"
    ),
    shares: str | None = typer.Option(
        None, "--shares", "-s", help="Shares separated by '|' (default: equal split)"
    ),
    category: str = typer.Option("", "--category", "-c", help="Category"),
    date: str = typer.Option("", "--date", "-d", help="Date"),
    db_path: Path | None = DB_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Record a new expense."""
    setup_logging(verbose)
    try:
        with open_ledger(db_path, save=True) as service:
            if payer is None:
                payer = select_member_interactive(service.get_group_members(group))
                if payer is None:
                    console.print("[yellow]No payer selected.[/yellow]")
                    raise typer.Exit(1)

            draft = ExpenseDraft(
                name=name,
                category=category,
                amount=amount,
                payer=payer,
                members=members,
                shares=shares,
                date=date,
            )
            result = service.add_expense(group, draft)
    except TabSplitError as e:
        fail(e, verbose)

    console.print(f"[bold green]✓ Added expense {result.id}[/bold green]")
    if result.warning:
        console.print(f"[yellow]⚠️  {result.warning}[/yellow]")


@app.command()
def edit(
    group: str = typer.Argument(..., help="Group name"),
    expense_id: int = typer.Argument(..., help="Expense id"),
    name: str = typer.Option(..., "--name", "-n", help="Expense description"),
    amount: str = typer.Option(..., "--amount", "-a", help="Total cost"),
    members: str = typer.Option(
        ..., "--members", "-m", help="Members sharing the cost, separated by '|'"
    ),
    payer: str = typer.Option(..., "--payer", "-p", help="Who paid"),
    shares: str | None = typer.Option(
        None, "--shares", "-s", help="Shares separated by '|' (default: equal split)"
    ),
    category: str = typer.Option("", "--category", "-c", help="Category"),
    date: str = typer.Option("", "--date", "-d", help="Date"),
    db_path: Path | None = DB_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Replace every field of an existing expense."""
    setup_logging(verbose)
    draft = ExpenseDraft(
        name=name,
        category=category,
        amount=amount,
        payer=payer,
        members=members,
        shares=shares,
        date=date,
    )
    try:
        with open_ledger(db_path, save=True) as service:
            result = service.edit_expense(group, expense_id, draft)
    except TabSplitError as e:
        fail(e, verbose)

    console.print(f"[bold green]✓ Updated expense {expense_id}[/bold green]")
    if result.warning:
        console.print(f"[yellow]⚠️  {result.warning}[/yellow]")


@app.command()
def delete(
    group: str = typer.Argument(..., help="Group name"),
    expense_id: int = typer.Argument(..., help="Expense id"),
    db_path: Path | None = DB_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Delete an expense."""
    setup_logging(verbose)
    try:
        with open_ledger(db_path, save=True) as service:
            service.delete_expense(group, expense_id)
    except TabSplitError as e:
        fail(e, verbose)

    console.print(f"[bold green]✓ Deleted expense {expense_id}[/bold green]")


@app.command()
def expenses(
    group: str = typer.Argument(..., help="Group name"),
    db_path: Path | None = DB_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Show a group's expenses in the order they were added."""
    setup_logging(verbose)
    try:
        with open_ledger(db_path) as service:
            items = service.list_expenses(group)
    except TabSplitError as e:
        fail(e, verbose)

    if not items:
        console.print(f"[yellow]No expenses in '{group}'.[/yellow]")
        return

    table = Table(title=f"Expenses: {group}", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", width=5)
    table.add_column("Description", style="cyan")
    table.add_column("Category", style="yellow")
    table.add_column("Date", style="dim")
    table.add_column("Amount", justify="right")
    table.add_column("Paid by")
    table.add_column("Split", no_wrap=False)

    for expense in items:
        split = ", ".join(
            f"{member} {format_amount(share)}"
            for member, share in zip(expense.members, expense.shares, strict=True)
        )
        table.add_row(
            str(expense.id),
            expense.name,
            expense.category,
            expense.date,
            format_amount(expense.amount),
            expense.payer,
            split,
        )

    console.print(table)


# ============================================================================
# Settlement commands
# ============================================================================


@app.command()
def settle(
    group: str = typer.Argument(..., help="Group name"),
    db_path: Path | None = DB_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Show balances and the payments that settle them."""
    setup_logging(verbose)
    try:
        with open_ledger(db_path) as service:
            plan = service.settle_group(group)
    except TabSplitError as e:
        fail(e, verbose)

    display_plan(plan)


def display_plan(plan: SettlementPlan):
    """Display balances and transfers as tables."""
    balances = Table(title="Balances", show_header=True, header_style="bold magenta")
    balances.add_column("Member", style="cyan")
    balances.add_column("Balance", justify="right")
    for entry in plan.balances:
        balances.add_row(entry.member, format_money(entry.balance))
    console.print(balances)

    if not plan.transfers:
        console.print("\n[green]✓ Everyone is settled up.[/green]")
        return

    transfers = Table(title="Settle Up", show_header=True, header_style="bold magenta")
    transfers.add_column("From", style="red")
    transfers.add_column("To", style="green")
    transfers.add_column("Amount", justify="right")
    for transfer in plan.transfers:
        transfers.add_row(
            transfer.debtor, transfer.creditor, format_amount(transfer.amount)
        )
    console.print(transfers)

    console.print(
        f"\n[bold]{len(plan.transfers)} payments, "
        f"total {format_amount(plan.total_transferred)}[/bold]"
    )


@app.command()
def mcp():
    """Start the MCP server for Claude integration."""
    run_server()


if __name__ == "__main__":
    app()
