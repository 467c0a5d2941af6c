from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fakes import FakeRepository
from user_service.api import routes
from user_service.api.exception_handlers import setup_exception_handlers
from user_service.domain.service import AccountService
from user_service.security.passwords import PasswordHasher
from user_service.security.tokens import TokenIssuer

TEST_SECRET = "test-signing-secret-0123456789abcdef"


@pytest.fixture
def hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast.
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET)


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def service(repository, hasher, token_issuer) -> AccountService:
    return AccountService(repository, hasher, token_issuer)


@pytest.fixture
def app(service, token_issuer) -> FastAPI:
    app = FastAPI()
    app.include_router(routes.router)
    setup_exception_handlers(app)
    app.state.account_service = service
    app.state.token_issuer = token_issuer
    return app


@pytest.fixture
def api_client(app):
    """Provide a FastAPI test client with isolated state."""
    with TestClient(app) as client:
        yield client
