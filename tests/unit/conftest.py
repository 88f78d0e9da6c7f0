"""Unit-test fixtures: a CustomerService wired to in-memory fakes."""

import pytest

from src.cs_customer.application.service import CustomerService
from tests.unit.fakes import FakeSession, InMemoryCache, InMemoryCustomerRepository


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    # Real bcrypt, minimum cost
    monkeypatch.setattr("config.settings.settings.BCRYPT_ROUNDS", 4)


@pytest.fixture
def db() -> FakeSession:
    return FakeSession()


@pytest.fixture
def repo() -> InMemoryCustomerRepository:
    return InMemoryCustomerRepository()


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def service(repo, cache) -> CustomerService:
    return CustomerService(repo=repo, cache=cache)
