import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, Path, Query, Request, Response

from .domain import AccountID, Account, CreateAccountBody, TransferReceipt, parse_amount
from .repo import create_account as repo_create_account
from .repo import get_account as repo_get_account
from .store import AccountStore
from .transfer import transfer as engine_transfer

log = logging.getLogger("api")
router = APIRouter()


def get_store(request: Request) -> AccountStore:
    return request.app.state.store


def as_json(model: Account | TransferReceipt) -> dict:
    # Decimal -> str keeps amounts exact on the wire
    return model.model_dump(mode="json")


@router.get("/")
def root():
    return {"status": "ok", "message": "Welcome to the Ledger API", "docs": "/docs"}


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/account/", status_code=201)
@router.post("/account", status_code=201, include_in_schema=False)
def create_account(body: CreateAccountBody, response: Response, store: AccountStore = Depends(get_store)):
    account = repo_create_account(
        store,
        account_id=body.account_id or None,
        balance=body.balance,
        blocked=body.blocked,
    )
    response.headers["Location"] = f"/account/{account.account_id}"
    return as_json(account)


@router.get("/account/{account_id}")
def get_account(account_id: str = AccountID(), store: AccountStore = Depends(get_store)):
    return as_json(repo_get_account(store, account_id))


@router.post("/transfer/{sender_id}/to/{receiver_id}")
def transfer(
    # any id is accepted here; unknown ones are reported as ACCOUNT_NOT_FOUND
    sender_id: str = Path(..., description="Sender account identifier"),
    receiver_id: str = Path(..., description="Receiver account identifier"),
    amount: str | None = Query(None),
    store: AccountStore = Depends(get_store),
):
    value: Decimal = parse_amount(amount)
    receipt = engine_transfer(store, sender_id, receiver_id, value)
    return as_json(receipt)
