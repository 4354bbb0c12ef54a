"""Parsing and formatting helpers for delimited inputs and money amounts."""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from .exceptions import InvalidInputError, ShareParseError

DELIMITER = "|"
CENT = Decimal("0.01")


def split_delimited(value: str | Iterable[str] | None) -> list[str]:
    """
    Split a pipe-delimited string into its non-empty tokens.

    A sequence is accepted as-is (minus empty entries) so Python callers
    don't have to join and re-split.

    Example:
        "a||b" -> ["a", "b"]
    """
    if value is None:
        return []
    if isinstance(value, str):
        tokens = value.split(DELIMITER)
    else:
        tokens = [str(token) for token in value]
    return [token for token in tokens if token]


def unique_members(value: str | Iterable[str] | None) -> list[str]:
    """Parse a roster, dropping repeated names but keeping first-seen order."""
    return list(dict.fromkeys(split_delimited(value)))


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """
    Convert a user-supplied number to Decimal.

    Floats go through ``str`` so 0.1 stays 0.1 instead of its binary
    expansion.

    Raises:
        InvalidOperation: If the value isn't numeric
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(str(value).strip())


def parse_amount(value: Decimal | int | float | str) -> Decimal:
    """Parse an expense amount: must be a finite, non-negative number."""
    try:
        amount = to_decimal(value)
    except InvalidOperation as e:
        raise InvalidInputError(f"Invalid amount: '{value}'") from e

    if not amount.is_finite():
        raise InvalidInputError(f"Invalid amount: '{value}'")
    if amount < 0:
        raise InvalidInputError(f"Amount must not be negative: {value}")
    if not fits_cents(amount):
        raise InvalidInputError(f"Amount too large: {value}")
    return amount


def parse_shares(
    value: str | Iterable[Decimal | int | float | str] | None,
) -> list[Decimal] | None:
    """
    Parse explicit shares.

    Returns None when no shares were supplied (None or empty string), which
    means the caller should fall back to an equal split. A supplied value
    that yields no tokens returns an empty list, so the count check fails.

    Raises:
        ShareParseError: If any token isn't a finite number or is too large
        to hold in whole cents
    """
    if value is None or value == "":
        return None

    if isinstance(value, str):
        tokens: list = split_delimited(value)
    else:
        tokens = [token for token in value if token != ""]

    shares = []
    for token in tokens:
        try:
            share = to_decimal(token)
        except InvalidOperation as e:
            raise ShareParseError(str(token)) from e
        if not share.is_finite() or not fits_cents(share):
            raise ShareParseError(str(token))
        shares.append(share)
    return shares


def fits_cents(amount: Decimal) -> bool:
    """Whether the amount can be held to the cent in the default context."""
    try:
        amount.quantize(CENT)
    except InvalidOperation:
        return False
    return True


def quantize_cents(amount: Decimal) -> Decimal:
    """
    Round to whole cents (ROUND_HALF_UP).

    Precision is widened for the call, so sums of many large values still
    quantize instead of raising.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 4)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal) -> str:
    """Format an amount with exactly two decimal places (never "-0.00")."""
    cents = quantize_cents(amount)
    if cents.is_zero():
        cents = abs(cents)
    return f"{cents:.2f}"
