"""Tests for balance computation and greedy debt simplification."""

from decimal import Decimal

import pytest

from tabsplit.models import Expense, Group
from tabsplit.settlement import compute_balances, settle, simplify_debts


# Helper function for tests
def make_expense(
    id: int, amount: str, payer: str, members: list[str], shares: list[str] | None = None
) -> Expense:
    """Create an expense, defaulting to an equal split."""
    if shares is None:
        share = Decimal(amount) / len(members)
        share_values = [share] * len(members)
    else:
        share_values = [Decimal(s) for s in shares]
    return Expense(
        id=id,
        name=f"Test expense {id}",
        amount=Decimal(amount),
        payer=payer,
        members=members,
        shares=share_values,
    )


@pytest.fixture
def trip():
    """Group from the classic example: Alice pays 90 for three people."""
    return Group(
        name="Trip",
        members=["Alice", "Bob", "Carol"],
        expenses=[make_expense(1, "90", "Alice", ["Alice", "Bob", "Carol"])],
        next_expense_id=2,
    )


class TestComputeBalances:
    """Tests for compute_balances."""

    def test_payer_in_split_nets_own_share(self, trip):
        """Payer is credited the full amount minus their own share."""
        balances = compute_balances(trip.members, trip.expenses)

        assert balances == {
            "Alice": Decimal("60"),
            "Bob": Decimal("-30"),
            "Carol": Decimal("-30"),
        }

    def test_payer_not_in_split(self):
        """Payer outside the split is credited the whole amount."""
        expenses = [make_expense(1, "40", "Alice", ["Bob", "Carol"])]

        balances = compute_balances(["Alice", "Bob", "Carol"], expenses)

        assert balances["Alice"] == Decimal("40")
        assert balances["Bob"] == Decimal("-20")
        assert balances["Carol"] == Decimal("-20")

    def test_no_expenses_all_zero(self):
        """Members without expenses have zero balance."""
        balances = compute_balances(["Alice", "Bob"], [])

        assert balances == {"Alice": Decimal("0"), "Bob": Decimal("0")}

    def test_roster_order_preserved(self):
        """Balances come back in roster order, not sorted."""
        balances = compute_balances(["Zed", "Amy", "Mo"], [])

        assert list(balances) == ["Zed", "Amy", "Mo"]

    def test_order_independent(self):
        """Reordering expenses doesn't change balances."""
        expenses = [
            make_expense(1, "90", "Alice", ["Alice", "Bob", "Carol"]),
            make_expense(2, "45.50", "Bob", ["Alice", "Bob"]),
            make_expense(3, "12", "Carol", ["Carol", "Alice"], ["2", "10"]),
        ]
        members = ["Alice", "Bob", "Carol"]

        assert compute_balances(members, expenses) == compute_balances(
            members, list(reversed(expenses))
        )

    def test_ledger_closes(self):
        """Balances sum to zero when shares add up to amounts."""
        expenses = [
            make_expense(1, "100", "Alice", ["Alice", "Bob", "Carol"]),
            make_expense(2, "33.33", "Bob", ["Carol", "Dave"]),
            make_expense(3, "7.01", "Dave", ["Alice", "Bob", "Carol", "Dave"]),
        ]

        balances = compute_balances(["Alice", "Bob", "Carol", "Dave"], expenses)

        assert abs(sum(balances.values())) <= Decimal("0.01")


class TestSimplifyDebts:
    """Tests for simplify_debts."""

    def test_single_creditor(self):
        """Debtors pay the creditor in name order."""
        balances = {
            "Alice": Decimal("60"),
            "Carol": Decimal("-30"),
            "Bob": Decimal("-30"),
        }

        transfers = simplify_debts(balances)

        assert [(t.debtor, t.creditor, t.amount) for t in transfers] == [
            ("Bob", "Alice", Decimal("30")),
            ("Carol", "Alice", Decimal("30")),
        ]

    def test_greedy_pairing_by_name(self):
        """Debtors and creditors are matched in ascending name order."""
        balances = {
            "A": Decimal("50"),
            "B": Decimal("10"),
            "C": Decimal("-40"),
            "D": Decimal("-20"),
        }

        transfers = simplify_debts(balances)

        assert [(t.debtor, t.creditor, t.amount) for t in transfers] == [
            ("C", "A", Decimal("40")),
            ("D", "A", Decimal("10")),
            ("D", "B", Decimal("10")),
        ]

    def test_transfer_count_bound(self):
        """At most debtors + creditors - 1 transfers."""
        balances = {
            "A": Decimal("25"),
            "B": Decimal("35"),
            "C": Decimal("40"),
            "D": Decimal("-33"),
            "E": Decimal("-33"),
            "F": Decimal("-34"),
        }

        transfers = simplify_debts(balances)

        assert len(transfers) <= 3 + 3 - 1

    def test_total_matches_positive_balances(self):
        """Total moved equals the sum of credits."""
        balances = {
            "A": Decimal("12.34"),
            "B": Decimal("56.78"),
            "C": Decimal("-30.00"),
            "D": Decimal("-39.12"),
        }

        transfers = simplify_debts(balances)

        total = sum(t.amount for t in transfers)
        assert abs(total - Decimal("69.12")) <= Decimal("0.01")

    def test_dust_ignored(self):
        """Balances within the dust threshold produce no transfers."""
        balances = {"A": Decimal("0.004"), "B": Decimal("-0.004")}

        assert simplify_debts(balances) == []

    def test_all_amounts_above_dust(self):
        """Every transfer is strictly above the dust threshold."""
        third = Decimal("100") / 3
        balances = {
            "A": third * 2,
            "B": -third,
            "C": -third,
        }

        transfers = simplify_debts(balances)

        assert len(transfers) == 2
        assert all(t.amount > Decimal("0.005") for t in transfers)

    def test_empty_balances(self):
        """No members means no transfers."""
        assert simplify_debts({}) == []

    def test_custom_dust(self):
        """A larger dust threshold hides small debts."""
        balances = {"A": Decimal("0.50"), "B": Decimal("-0.50")}

        assert simplify_debts(balances, dust=Decimal("1")) == []


class TestSettle:
    """Tests for the combined settle function."""

    def test_end_to_end_trip(self, trip):
        """Classic three-person example."""
        plan = settle(trip)

        assert [(b.member, b.balance) for b in plan.balances] == [
            ("Alice", Decimal("60")),
            ("Bob", Decimal("-30")),
            ("Carol", Decimal("-30")),
        ]
        assert [(t.debtor, t.creditor) for t in plan.transfers] == [
            ("Bob", "Alice"),
            ("Carol", "Alice"),
        ]
        assert plan.total_transferred == Decimal("60")

    def test_does_not_mutate_group(self, trip):
        """Settling leaves the group untouched and is repeatable."""
        before = trip.model_dump()

        first = settle(trip)
        second = settle(trip)

        assert trip.model_dump() == before
        assert first == second

    def test_balanced_group(self):
        """Members who paid for each other equally owe nothing."""
        group = Group(
            name="Even",
            members=["A", "B"],
            expenses=[
                make_expense(1, "20", "A", ["A", "B"]),
                make_expense(2, "20", "B", ["A", "B"]),
            ],
        )

        plan = settle(group)

        assert plan.transfers == []

    def test_uneven_shares_conserve_money(self):
        """Balances net to zero and transfers move exactly what is owed."""
        group = Group(
            name="Flat",
            members=["A", "B", "C", "D"],
            expenses=[
                make_expense(1, "100", "A", ["A", "B", "C"], ["50", "30", "20"]),
                make_expense(
                    2, "45.50", "B", ["B", "C", "D"], ["10", "20.25", "15.25"]
                ),
                make_expense(3, "33.33", "D", ["A", "D"], ["20", "13.33"]),
            ],
        )

        plan = settle(group)

        owed = sum((b.balance for b in plan.balances if b.balance > 0), Decimal("0"))
        net = sum((b.balance for b in plan.balances), Decimal("0"))
        assert abs(net) <= Decimal("0.01")
        assert abs(plan.total_transferred - owed) <= Decimal("0.01")
        assert [(t.debtor, t.creditor, t.amount) for t in plan.transfers] == [
            ("C", "A", Decimal("30")),
            ("C", "B", Decimal("5.5")),
            ("C", "D", Decimal("4.75")),
        ]
