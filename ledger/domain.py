from decimal import Decimal, Inexact, InvalidOperation, getcontext, localcontext

from fastapi import Path
from pydantic import BaseModel, Field, field_validator

from .errors import InvalidArgument

ZERO = Decimal(0)


def AccountID(description: str = "Account identifier (1–64 chars, letters/digits/_/- only)"):
    return Path(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_\-]+$", description=description)


def is_negative(x: Decimal) -> bool:
    return x < ZERO


def _exact_prec(a: Decimal, b: Decimal) -> int:
    # digits from the highest leading digit down to the lowest exponent, plus one for a carry
    top = max(a.adjusted(), b.adjusted())
    bottom = min(a.as_tuple().exponent, b.as_tuple().exponent)
    return max(top - bottom + 2, getcontext().prec)


def exact_add(a: Decimal, b: Decimal) -> Decimal:
    """a + b with no rounding, whatever the number of digits."""
    with localcontext() as ctx:
        ctx.prec = _exact_prec(a, b)
        ctx.traps[Inexact] = True
        return a + b


def exact_sub(a: Decimal, b: Decimal) -> Decimal:
    """a - b with no rounding, whatever the number of digits."""
    with localcontext() as ctx:
        ctx.prec = _exact_prec(a, b)
        ctx.traps[Inexact] = True
        return a - b


def parse_amount(raw: str | None, param: str = "amount") -> Decimal:
    """Parse a transfer amount from external input.

    Rejects missing, empty, non-numeric, non-finite and non-positive values
    with InvalidArgument(param).
    """
    if raw is None or not raw.strip():
        raise InvalidArgument(param)
    try:
        value = Decimal(raw.strip())
    except InvalidOperation as e:
        raise InvalidArgument(param) from e
    if not value.is_finite() or value <= ZERO:
        raise InvalidArgument(param)
    return value


class Account(BaseModel):
    """Ledger entry. Never mutated in place; use with_balance() for a new value."""

    account_id: str = Field(..., min_length=1)
    balance: Decimal = ZERO
    blocked: bool = False

    model_config = {"frozen": True}

    def with_balance(self, balance: Decimal) -> "Account":
        return self.model_copy(update={"balance": balance})


class TransferRequest(BaseModel):
    sender_id: str
    receiver_id: str
    # sign and finiteness are checked by the transfer engine, which raises InvalidArgument
    amount: Decimal = Field(..., allow_inf_nan=True)

    model_config = {"frozen": True}


class TransferReceipt(BaseModel):
    sender_id: str
    receiver_id: str
    amount: Decimal

    model_config = {"frozen": True}

    @classmethod
    def from_request(cls, request: TransferRequest) -> "TransferReceipt":
        return cls(sender_id=request.sender_id, receiver_id=request.receiver_id, amount=request.amount)


class CreateAccountBody(BaseModel):
    # every field optional; id is generated and balance defaults to 0
    account_id: str | None = Field(None, max_length=64, pattern=r"^[A-Za-z0-9_\-]*$")
    balance: Decimal | None = None
    blocked: bool = False

    @field_validator("balance")
    @classmethod
    def non_negative(cls, v):
        if v is not None and (not v.is_finite() or v < 0):
            raise ValueError("balance must be a finite number >= 0")
        return v
