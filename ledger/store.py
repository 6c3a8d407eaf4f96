import logging
import threading
import uuid
from decimal import Decimal
from typing import Callable, TypeVar

from .domain import Account, is_negative
from .errors import LedgerError, TransactionError

log = logging.getLogger("store")

T = TypeVar("T")


class Transaction:
    """Mutation handle passed to a run_transaction body.

    Reads see committed records overlaid with this transaction's staged writes.
    Staged writes are published by the store only if the body returns normally.
    """

    def __init__(self, store: "AccountStore"):
        self._store = store
        self._staged: dict[str, Account] = {}

    def get(self, account_id: str) -> Account | None:
        if account_id in self._staged:
            return self._staged[account_id]
        return self._store.get(account_id)

    def put(self, account: Account) -> Account:
        if is_negative(account.balance):
            raise ValueError(f"refusing to store negative balance for account '{account.account_id}'")
        self._staged[account.account_id] = account
        return account

    def generate_unique_id(self) -> str:
        return self._store._new_id(taken=self._staged)


class AccountStore:
    """In-memory account records guarded by a single transaction lock.

    Committed records live in an immutable-by-convention dict that is replaced
    wholesale on commit, so lock-free readers always see one consistent state.
    """

    def __init__(self, accounts: dict[str, Account] | None = None):
        self._records: dict[str, Account] = dict(accounts or {})
        self._lock = threading.Lock()

    def get(self, account_id: str) -> Account | None:
        return self._records.get(account_id)

    def snapshot(self) -> dict[str, Account]:
        return dict(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def generate_unique_id(self) -> str:
        return self._new_id()

    def _new_id(self, taken: dict[str, Account] | None = None) -> str:
        # uuid4 collisions are astronomically rare, but the key set is checked anyway
        while True:
            candidate = str(uuid.uuid4())
            if candidate in self._records or (taken and candidate in taken):
                log.warning("generated id collision id=%s, retrying", candidate)
                continue
            return candidate

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        """Run fn with exclusive write access; commit its writes only if it returns.

        LedgerError subclasses raised by fn propagate unchanged, anything else
        is wrapped in TransactionError. Either way no staged write survives.
        """
        with self._lock:
            tx = Transaction(self)
            try:
                result = fn(tx)
            except LedgerError:
                log.debug("transaction rolled back staged=%d", len(tx._staged))
                raise
            except Exception as e:
                log.exception("transaction failed, rolled back staged=%d", len(tx._staged))
                raise TransactionError(str(e)) from e
            if tx._staged:
                self._records = {**self._records, **tx._staged}
            return result

    def truncate_all(self) -> None:
        with self._lock:
            self._records = {}


DEMO_ACCOUNTS = [
    ("12345", Decimal("10500.00"), False),
    ("777", Decimal("12015.00"), False),
    ("a111", Decimal("5040.00"), False),
    ("007", Decimal("47000.00"), True),
]


def seed_if_empty(store: AccountStore) -> None:
    """Insert demo accounts if the store is empty (used for local dev/demo)."""

    def _seed(tx: Transaction) -> int:
        if len(store):
            return 0
        for account_id, balance, blocked in DEMO_ACCOUNTS:
            tx.put(Account(account_id=account_id, balance=balance, blocked=blocked))
        return len(DEMO_ACCOUNTS)

    n = store.run_transaction(_seed)
    if n:
        log.info("store seed inserted %d demo accounts", n)
