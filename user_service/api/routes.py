"""HTTP route definitions for the user service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict, Field

from ..domain.account import Account
from ..domain.contracts import LoginInput, RegisterInput, UpdateAccountInput
from ..domain.errors import MalformedToken
from ..domain.service import AccountService
from ..security.tokens import TokenClaims, TokenIssuer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")

_bearer_scheme = HTTPBearer(auto_error=False)


class RegisterRequest(BaseModel):
    """Registration body; required fields are checked in order by the service."""

    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, alias="fullName")
    email: str | None = None
    password: str | None = None
    mobile: str | None = None


class LoginRequest(BaseModel):
    """Credentials submitted to obtain a bearer token."""

    email: str | None = None
    password: str | None = None


class UpdateAccountRequest(BaseModel):
    """Partial profile update; any ``password`` or ``role`` in the body is ignored."""

    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, alias="fullName")
    email: str | None = None
    mobile: str | None = None


class PublicAccountResponse(BaseModel):
    """Account view returned after registration."""

    id: str
    fullname: str | None
    email: str
    mobile: str | None

    @classmethod
    def from_domain(cls, account: Account) -> "PublicAccountResponse":
        return cls(
            id=account.account_id,
            fullname=account.full_name,
            email=account.email,
            mobile=account.mobile,
        )


class LoginResponse(PublicAccountResponse):
    """Account view plus role and the freshly issued bearer token."""

    role: str
    token: str


class AccountRecordResponse(BaseModel):
    """Stored account record as listed by ``GET /user``, hash and token included."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    full_name: str | None = Field(alias="fullName")
    email: str
    password_hash: str = Field(alias="passwordHash")
    mobile: str | None
    role: str
    token: str | None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountRecordResponse":
        """Build a response model from the domain aggregate."""
        return cls(
            id=account.account_id,
            full_name=account.full_name,
            email=account.email,
            password_hash=account.password_hash,
            mobile=account.mobile,
            role=account.role,
            token=account.token,
        )


class DeleteResponse(BaseModel):
    """Confirmation returned after an account is deleted."""

    status: bool = True
    message: str


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def get_token_issuer(request: Request) -> TokenIssuer:
    """Resolve the `TokenIssuer` holding the process signing secret."""
    issuer: TokenIssuer = request.app.state.token_issuer
    return issuer


def require_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenClaims:
    """Verify the bearer token before a protected handler runs."""
    if credentials is None or not credentials.credentials:
        raise MalformedToken("A token is required for authentication")
    return issuer.verify(credentials.credentials)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest | None = None,
    service: AccountService = Depends(get_service),
) -> LoginResponse:
    """Check credentials and return the account with a new bearer token."""
    payload = payload or LoginRequest()
    session = service.login(LoginInput(email=payload.email, password=payload.password))
    return LoginResponse(
        id=session.account_id,
        fullname=session.full_name,
        email=session.email,
        mobile=session.mobile,
        role=session.role,
        token=session.token,
    )


@router.post("/user", response_model=PublicAccountResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest | None = None,
    service: AccountService = Depends(get_service),
) -> PublicAccountResponse:
    """Register a new account; role and token are not part of the response."""
    payload = payload or RegisterRequest()
    account = service.register(
        RegisterInput(
            full_name=payload.full_name,
            email=payload.email,
            password=payload.password,
            mobile=payload.mobile,
        )
    )
    return PublicAccountResponse.from_domain(account)


@router.get("/user", response_model=list[AccountRecordResponse])
def list_accounts(
    account_id: str | None = Query(default=None, alias="id"),
    claims: TokenClaims = Depends(require_token),
    service: AccountService = Depends(get_service),
) -> list[AccountRecordResponse]:
    """List stored accounts, optionally narrowed to a single id."""
    accounts = service.list_accounts(account_id)
    return [AccountRecordResponse.from_domain(account) for account in accounts]


@router.put("/user/{account_id}", response_class=PlainTextResponse)
def update_account(
    account_id: str,
    payload: UpdateAccountRequest | None = None,
    claims: TokenClaims = Depends(require_token),
    service: AccountService = Depends(get_service),
) -> str:
    """Update profile fields of an existing account."""
    payload = payload or UpdateAccountRequest()
    service.update_account(
        account_id,
        UpdateAccountInput(
            full_name=payload.full_name,
            email=payload.email,
            mobile=payload.mobile,
        ),
    )
    logger.debug("account %s updated by %s", account_id, claims.user_id)
    return "User info updated successfully."


@router.delete("/user/{account_id}", response_model=DeleteResponse)
def delete_account(
    account_id: str,
    claims: TokenClaims = Depends(require_token),
    service: AccountService = Depends(get_service),
) -> DeleteResponse:
    """Permanently delete an account."""
    service.delete_account(account_id)
    logger.debug("account %s deleted by %s", account_id, claims.user_id)
    return DeleteResponse(message="User Info deleted successfully")
