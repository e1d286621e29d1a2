from __future__ import annotations

from typing import List, Optional, Sequence

import pytest

from printboard.domain.auth_models import Account, TokenResult
from printboard.domain.errors import AuthError
from printboard.usecases.auth_session import AuthTokenProvider

SCOPES = ("User.Read", "Sites.ReadWrite.All")
CARLA = Account(username="carla@contoso.com", name="Carla", home_account_id="oid.tid")


class _TokenSourceStub:
    def __init__(
        self,
        *,
        accounts: Sequence[Account] = (),
        silent: Optional[TokenResult] = None,
        interactive: Optional[TokenResult] = None,
    ) -> None:
        self._accounts = list(accounts)
        self.silent = silent or TokenResult.failure("silent not configured")
        self.interactive = interactive or TokenResult.failure("interactive not configured")
        self.calls: List[str] = []
        self.signed_out: List[Optional[Account]] = []

    def accounts(self) -> List[Account]:
        return list(self._accounts)

    def acquire_silent(self, scopes: Sequence[str], account: Account) -> TokenResult:
        assert tuple(scopes) == SCOPES
        self.calls.append("silent")
        return self.silent

    def acquire_interactive(self, scopes: Sequence[str]) -> TokenResult:
        self.calls.append("interactive")
        return self.interactive

    def sign_out(self, account: Optional[Account]) -> None:
        self.signed_out.append(account)
        self._accounts = []


def test_cached_account_makes_provider_authenticated() -> None:
    provider = AuthTokenProvider(_TokenSourceStub(accounts=[CARLA]), SCOPES)

    assert provider.is_authenticated
    assert provider.account == CARLA


def test_get_token_without_account_raises() -> None:
    source = _TokenSourceStub()
    provider = AuthTokenProvider(source, SCOPES)

    with pytest.raises(AuthError) as excinfo:
        provider.get_token()

    assert excinfo.value.reason == "no_account"
    assert source.calls == []


def test_silent_success_never_prompts() -> None:
    source = _TokenSourceStub(accounts=[CARLA], silent=TokenResult.success("tok-1"))

    assert AuthTokenProvider(source, SCOPES).get_token() == "tok-1"
    assert source.calls == ["silent"]


def test_needs_interaction_prompts_exactly_once() -> None:
    source = _TokenSourceStub(
        accounts=[CARLA],
        silent=TokenResult.needs_interaction("expired refresh token"),
        interactive=TokenResult.success("tok-2", CARLA),
    )

    assert AuthTokenProvider(source, SCOPES).get_token() == "tok-2"
    assert source.calls == ["silent", "interactive"]


def test_interactive_failure_after_silent_raises() -> None:
    source = _TokenSourceStub(
        accounts=[CARLA],
        silent=TokenResult.needs_interaction(),
        interactive=TokenResult.failure("User cancelled"),
    )

    with pytest.raises(AuthError) as excinfo:
        AuthTokenProvider(source, SCOPES).get_token()

    assert excinfo.value.reason == "User cancelled"
    assert source.calls == ["silent", "interactive"]


def test_silent_failure_does_not_prompt() -> None:
    source = _TokenSourceStub(accounts=[CARLA], silent=TokenResult.failure("network down"))

    with pytest.raises(AuthError):
        AuthTokenProvider(source, SCOPES).get_token()
    assert source.calls == ["silent"]


def test_login_records_account_and_logout_clears_it() -> None:
    source = _TokenSourceStub(interactive=TokenResult.success("tok", CARLA))
    provider = AuthTokenProvider(source, SCOPES)

    assert provider.login() == CARLA
    assert provider.is_authenticated
    assert provider.loading is False

    provider.logout()

    assert source.signed_out == [CARLA]
    assert not provider.is_authenticated


def test_login_failure_sets_error() -> None:
    provider = AuthTokenProvider(
        _TokenSourceStub(interactive=TokenResult.failure("denied")), SCOPES
    )

    with pytest.raises(AuthError):
        provider.login()

    assert provider.error == "Could not sign in. Please try again."
    assert provider.loading is False
    assert not provider.is_authenticated
