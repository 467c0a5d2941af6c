from __future__ import annotations

import pytest

from fakes import RacingRepository
from user_service.domain.contracts import LoginInput, RegisterInput, UpdateAccountInput
from user_service.domain.errors import Conflict, InvalidCredentials, NotFound, ValidationError
from user_service.domain.service import AccountService


def _jane(**overrides) -> RegisterInput:
    fields = {"full_name": "Jane Doe", "email": "Jane@X.com", "password": "pw123", "mobile": "555-0100"}
    fields.update(overrides)
    return RegisterInput(**fields)


def test_register_normalises_email_and_hashes_password(service, repository, token_issuer):
    account = service.register(_jane())
    stored = repository.find_by_id(account.account_id)

    assert stored.email == "jane@x.com"
    assert stored.password_hash != "pw123"
    assert stored.role == "user"
    assert stored.token == account.token
    assert token_issuer.verify(account.token).user_id == account.account_id


def test_register_then_login_round_trip(service, token_issuer):
    account = service.register(_jane())
    session = service.login(LoginInput(email="JANE@X.COM", password="pw123"))

    assert session.account_id == account.account_id
    assert session.role == "user"
    claims = token_issuer.verify(session.token)
    assert claims.email == "jane@x.com"


def test_login_stores_latest_token(service, repository):
    account = service.register(_jane())
    session = service.login(LoginInput(email="jane@x.com", password="pw123"))
    assert repository.stored_tokens[-1] == (account.account_id, session.token)


def test_validation_short_circuits_before_storage(service, repository):
    with pytest.raises(ValidationError) as excinfo:
        service.register(RegisterInput(password="pw123"))
    assert excinfo.value.field == "email"
    assert excinfo.value.message == "Email is required."
    assert repository.list() == []


def test_duplicate_email_conflicts_regardless_of_other_fields(service):
    service.register(_jane())
    with pytest.raises(Conflict):
        service.register(_jane(email="JANE@x.COM", full_name="Someone", mobile="1", password="other"))


def test_storage_constraint_closes_registration_race(hasher, token_issuer):
    racing = RacingRepository()
    service = AccountService(racing, hasher, token_issuer)
    service.register(_jane())
    with pytest.raises(Conflict):
        service.register(_jane())


def test_wrong_password_is_invalid_credentials(service):
    service.register(_jane())
    with pytest.raises(InvalidCredentials) as excinfo:
        service.login(LoginInput(email="jane@x.com", password="wrong"))
    assert excinfo.value.message == "Invalid Credentials"


def test_login_unknown_email_is_not_found(service):
    with pytest.raises(NotFound):
        service.login(LoginInput(email="ghost@x.com", password="pw123"))


def test_empty_update_leaves_account_unchanged(service, repository):
    account = service.register(_jane())
    before = repository.find_by_id(account.account_id)
    after = service.update_account(account.account_id, UpdateAccountInput())
    assert after == before


def test_mobile_only_update(service, repository):
    account = service.register(_jane())
    service.update_account(account.account_id, UpdateAccountInput(mobile="555-0199"))
    stored = repository.find_by_id(account.account_id)
    assert stored.mobile == "555-0199"
    assert stored.full_name == "Jane Doe"
    assert stored.email == "jane@x.com"


def test_update_normalises_email(service, repository):
    account = service.register(_jane())
    service.update_account(account.account_id, UpdateAccountInput(email="New@X.com"))
    assert repository.find_by_id(account.account_id).email == "new@x.com"


def test_update_unknown_account(service):
    with pytest.raises(NotFound):
        service.update_account("missing", UpdateAccountInput(mobile="1"))


def test_delete_twice_fails_second_time(service, repository):
    account = service.register(_jane())
    service.delete_account(account.account_id)
    assert repository.find_by_id(account.account_id) is None
    with pytest.raises(NotFound):
        service.delete_account(account.account_id)


def test_delete_unknown_account(service):
    with pytest.raises(NotFound):
        service.delete_account("missing")


def test_list_filters_by_id(service):
    jane = service.register(_jane())
    service.register(_jane(email="john@x.com", full_name="John Roe"))
    assert len(service.list_accounts()) == 2
    assert [a.account_id for a in service.list_accounts(jane.account_id)] == [jane.account_id]
    assert service.list_accounts("missing") == []


def test_register_is_all_or_nothing_when_token_issue_fails(repository, hasher, token_issuer, monkeypatch):
    def broken_issue(**claims):
        raise RuntimeError("signer unavailable")

    service = AccountService(repository, hasher, token_issuer)
    monkeypatch.setattr(token_issuer, "issue", broken_issue)
    with pytest.raises(RuntimeError):
        service.register(_jane())
    assert repository.find_by_email("jane@x.com") is None
