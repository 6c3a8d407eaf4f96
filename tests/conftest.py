# tests/conftest.py
import os

os.environ.setdefault("LEDGER_LOG_FILE", "0")  # keep test runs from writing logs/

import pytest
from starlette.testclient import TestClient

from ledger.app import create_app
from ledger.store import AccountStore

@pytest.fixture()
def store():
    return AccountStore()

@pytest.fixture()
def app(store):
    return create_app(store)

@pytest.fixture(autouse=True)
def clean_store(store):
    store.truncate_all()   # isolation between tests
    yield
    store.truncate_all()

@pytest.fixture()
def client(app):
    return TestClient(app)
