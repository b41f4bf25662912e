"""
Error taxonomy for ledger operations.

Every failure on a money-moving path is raised as one of these.
A raised error always means the store was left unchanged by the
failing unit of work; PartialCascadeFailure is the one case where
earlier, independently committed units remain applied.
"""


class LedgerError(Exception):
    """Base class for all ledger errors."""


# --- Missing documents ---

class NotFoundError(LedgerError):
    entity = "Document"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} {entity_id} not found")


class AccountNotFound(NotFoundError):
    entity = "Account"


class TransactionNotFound(NotFoundError):
    entity = "Transaction"


class AlertNotFound(NotFoundError):
    entity = "Alert"


class FundNotFound(NotFoundError):
    entity = "Fund"


class MovementNotFound(NotFoundError):
    entity = "Movement"


class CategoryNotFound(NotFoundError):
    entity = "Category"


# --- Rejected requests ---

class InvalidInputError(LedgerError):
    """Input that cannot be applied; raised before anything is written."""


class AlertAlreadyPaid(LedgerError):
    def __init__(self, alert_id: str, month: str):
        self.alert_id = alert_id
        self.month = month
        super().__init__(f"Alert {alert_id} is already paid for {month}")


# --- Store level ---

class ConflictRetryExhausted(LedgerError):
    """Concurrent modifications kept invalidating the operation."""

    def __init__(self, operation: str, attempts: int):
        self.operation = operation
        self.attempts = attempts
        super().__init__(
            f"Operation '{operation}' conflicted with concurrent "
            f"changes {attempts} times; retry later"
        )


class PartialCascadeFailure(LedgerError):
    """
    Fund deletion stopped partway.

    The movements already reversed stay reversed. Calling
    delete_fund again resumes from remaining_movement_ids.
    """

    def __init__(
        self,
        fund_id: str,
        remaining_movement_ids: list[str],
        cause: Exception,
    ):
        self.fund_id = fund_id
        self.remaining_movement_ids = remaining_movement_ids
        self.cause = cause
        super().__init__(
            f"Deletion of fund {fund_id} stopped with "
            f"{len(remaining_movement_ids)} movement(s) left: {cause}"
        )
