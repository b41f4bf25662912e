"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class TransactionType(str, enum.Enum):
    """Direction of a journal entry against its account."""
    INCOME = "income"
    EXPENSE = "expense"


class MovementType(str, enum.Enum):
    """Direction of an investment movement against its fund."""
    BUY = "buy"
    SELL = "sell"


class AlertType(str, enum.Enum):
    """Whether a recurring alert is a bill to pay or money to receive."""
    PAYABLE = "payable"
    RECEIVABLE = "receivable"
