from decimal import Decimal
import logging

from .domain import ZERO, Account
from .errors import AccountNotFound
from .store import AccountStore, Transaction

log = logging.getLogger("repo")


def get_account(store: AccountStore, account_id: str) -> Account:
    account = store.get(account_id)
    if account is None:
        log.info("get_account: account %s not found", account_id)
        raise AccountNotFound(account_id)
    return account


def create_account(
    store: AccountStore,
    account_id: str | None = None,
    balance: Decimal | None = None,
    blocked: bool = False,
) -> Account:
    """Create (or overwrite) an account, generating an id when none is given."""

    def _create(tx: Transaction) -> Account:
        new_id = account_id or tx.generate_unique_id()
        return tx.put(Account(
            account_id=new_id,
            balance=ZERO if balance is None else balance,
            blocked=blocked,
        ))

    account = store.run_transaction(_create)
    log.info("create_account id=%s balance=%s blocked=%s", account.account_id, account.balance, account.blocked)
    return account
