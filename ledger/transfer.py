"""Funds transfer between two accounts.

The whole check-and-write sequence runs inside one store transaction, so a
transfer either updates both balances or leaves both untouched.
"""

from decimal import Decimal
import logging

from .domain import ZERO, TransferReceipt, TransferRequest, exact_add, exact_sub, is_negative
from .errors import AccountBlocked, AccountNotFound, InsufficientFunds, InvalidArgument, LedgerError
from .store import AccountStore, Transaction

log = logging.getLogger("transfer")


def _check_amount(amount: Decimal) -> None:
    if not isinstance(amount, Decimal) or not amount.is_finite() or amount <= ZERO:
        raise InvalidArgument("amount")


def transfer(store: AccountStore, sender_id: str, receiver_id: str, amount: Decimal) -> TransferReceipt:
    request = TransferRequest(sender_id=sender_id, receiver_id=receiver_id, amount=amount)
    return perform_transfer(store, request)


def perform_transfer(store: AccountStore, request: TransferRequest) -> TransferReceipt:
    amount = request.amount
    _check_amount(amount)

    def _apply(tx: Transaction) -> None:
        sender = tx.get(request.sender_id)
        if sender is None:
            raise AccountNotFound(request.sender_id)
        receiver = tx.get(request.receiver_id)
        if receiver is None:
            raise AccountNotFound(request.receiver_id)

        if sender.blocked:
            raise AccountBlocked(sender.account_id)
        if receiver.blocked:
            raise AccountBlocked(receiver.account_id)

        new_sender_balance = exact_sub(sender.balance, amount)
        new_receiver_balance = exact_add(receiver.balance, amount)
        if is_negative(new_sender_balance):
            raise InsufficientFunds(amount, sender.balance)

        if sender.account_id == receiver.account_id:
            # money leaves and re-enters the same account
            tx.put(sender)
            return
        tx.put(sender.with_balance(new_sender_balance))
        tx.put(receiver.with_balance(new_receiver_balance))

    try:
        store.run_transaction(_apply)
    except LedgerError as e:
        log.info("transfer rejected %s -> %s amount=%s: %s", request.sender_id, request.receiver_id, amount, e)
        raise
    log.info("transfer done %s -> %s amount=%s", request.sender_id, request.receiver_id, amount)
    return TransferReceipt.from_request(request)
