from decimal import Decimal


class LedgerError(Exception):
    """Base class for every expected ledger failure."""


class AccountError(LedgerError):
    def __init__(self, account_id: str):
        super().__init__(account_id)
        self.account_id = account_id


class AccountNotFound(AccountError):
    """Raised when an account id is missing from the store."""

    def __str__(self) -> str:
        return f"Account '{self.account_id}' does not exist"


class AccountBlocked(AccountError):
    """Raised when a blocked account takes part in a transfer."""

    def __str__(self) -> str:
        return f"Account '{self.account_id}' is blocked"


class InsufficientFunds(LedgerError):
    """Raised when a transfer would drop the sender balance below zero."""

    def __init__(self, amount_requested: Decimal, amount_available: Decimal):
        super().__init__(amount_requested, amount_available)
        self.amount_requested = amount_requested
        self.amount_available = amount_available

    def __str__(self) -> str:
        return f"insufficient funds: requested {self.amount_requested}, available {self.amount_available}"


class InvalidArgument(LedgerError):
    """Raised for missing or malformed caller input."""

    def __init__(self, param_name: str):
        super().__init__(param_name)
        self.param_name = param_name

    def __str__(self) -> str:
        return f"invalid parameter '{self.param_name}'"


class TransactionError(LedgerError):
    """Raised when a transaction body fails unexpectedly; nothing was committed."""
