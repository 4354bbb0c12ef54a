"""Core settlement logic: net balances and greedy debt simplification."""

import logging
from collections.abc import Iterable
from decimal import Decimal

from .models import Expense, Group, MemberBalance, SettlementPlan, Transfer

logger = logging.getLogger(__name__)

DUST_THRESHOLD = Decimal("0.005")


def compute_balances(
    members: Iterable[str], expenses: Iterable[Expense]
) -> dict[str, Decimal]:
    """
    Compute each member's net balance.

    Every member starts at zero. For each expense, each listed member's
    share is debited and the full amount is credited to the payer, so a
    payer who is also a member nets amount minus their own share.

    Args:
        members: Group roster
        expenses: Recorded expenses (order doesn't matter)

    Returns:
        Mapping of member -> balance, in roster order. Positive means the
        member is owed money, negative means they owe.
    """
    balances = {member: Decimal("0") for member in members}

    for expense in expenses:
        for member, share in zip(expense.members, expense.shares, strict=True):
            balances[member] = balances.get(member, Decimal("0")) - share
        balances[expense.payer] = (
            balances.get(expense.payer, Decimal("0")) + expense.amount
        )

    return balances


def simplify_debts(
    balances: dict[str, Decimal], dust: Decimal = DUST_THRESHOLD
) -> list[Transfer]:
    """
    Produce pairwise transfers that zero all balances.

    Steps:
    1. Split members into debtors (amount owed, stored positive) and
       creditors, ignoring anyone within the dust threshold of zero
    2. Sort both sides by name so pairings are deterministic
    3. Walk both lists, moving min(debt, credit) each step and advancing
       whichever side is paid off

    This is the usual greedy heuristic: at most debtors + creditors - 1
    transfers, but not necessarily the fewest possible.

    Args:
        balances: Member -> net balance
        dust: Magnitude treated as zero

    Returns:
        Transfers ordered by debtor name, then creditor name
    """
    debtors = sorted(
        [name, -balance] for name, balance in balances.items() if balance < -dust
    )
    creditors = sorted(
        [name, balance] for name, balance in balances.items() if balance > dust
    )

    transfers = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor, creditor = debtors[i], creditors[j]
        pay = min(debtor[1], creditor[1])

        if pay > dust:
            transfers.append(Transfer(debtor=debtor[0], creditor=creditor[0], amount=pay))
            logger.debug(f"{debtor[0]} pays {creditor[0]} {pay}")

        debtor[1] -= pay
        creditor[1] -= pay

        if debtor[1] <= dust:
            i += 1
        if creditor[1] <= dust:
            j += 1

    return transfers


def settle(group: Group, dust: Decimal = DUST_THRESHOLD) -> SettlementPlan:
    """
    Compute balances and the settlement plan for a group.

    This is a pure function: the group is only read.
    """
    balances = compute_balances(group.members, group.expenses)
    transfers = simplify_debts(balances, dust=dust)

    return SettlementPlan(
        group_name=group.name,
        balances=[
            MemberBalance(member=member, balance=balance)
            for member, balance in balances.items()
        ],
        transfers=transfers,
    )
