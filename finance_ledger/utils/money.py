from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
UNIT_QUANTUM = Decimal("0.00000001")


def to_money(value) -> Decimal:
    """Normalize a database or arithmetic result to two fraction digits."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_decimal_input(value):
    """
    Accept user-typed numbers such as "1000,50" or " 12.3 ".

    Anything that is not a string is returned untouched for the
    schema to validate. Strings that are not numbers raise
    ValueError, so they are rejected before reaching the ledger.
    """
    if not isinstance(value, str):
        return value
    text = value.strip().replace(",", ".")
    if not text:
        raise ValueError("a number is required")
    try:
        return Decimal(text)
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a number")
