"""
Field types shared by the request schemas.

Money is validated here, at the edge: an amount that is not a
number, not positive, or has more than two fraction digits never
reaches a service.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BeforeValidator, Field

from finance_ledger.utils.money import parse_decimal_input


PositiveAmount = Annotated[
    Decimal,
    BeforeValidator(parse_decimal_input),
    Field(gt=0, max_digits=17, decimal_places=2),
]

SignedAmount = Annotated[
    Decimal,
    BeforeValidator(parse_decimal_input),
    Field(max_digits=17, decimal_places=2),
]

QuotaValue = Annotated[
    Decimal,
    BeforeValidator(parse_decimal_input),
    Field(ge=0, max_digits=19, decimal_places=8),
]
