"""Token source backed by the Microsoft Authentication Library (MSAL).

Call context:
    - Constructed by ``printboard/app/controller.py`` from ``SettingsVM`` values.
    - Used only through ``TokenSourcePort`` by ``AuthTokenProvider``.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Sequence

import msal

from printboard.domain.auth_models import Account, TokenResult
from printboard.domain.ports import TokenSourcePort

log = logging.getLogger(__name__)

# MSAL error codes that mean "ask the user", not "give up".
_INTERACTION_ERRORS = frozenset({"interaction_required", "login_required", "consent_required"})


class MsalTokenSource(TokenSourcePort):
    """Wrap ``msal.PublicClientApplication`` behind tagged ``TokenResult`` values.

    With ``cache_path`` the MSAL token cache is loaded from that file on
    construction and written back whenever an acquire or sign-out changed it,
    so a sign-in outlives the process that made it.
    """

    def __init__(
        self,
        client_id: str,
        *,
        authority: Optional[str] = None,
        app: Any = None,
        cache_path: Optional[str] = None,
        token_cache: Optional[msal.SerializableTokenCache] = None,
    ) -> None:
        if not client_id and app is None:
            raise ValueError("MsalTokenSource requires a client_id")
        self.client_id = client_id
        self.authority = authority
        self.cache_path = cache_path
        self.cache = token_cache if token_cache is not None else msal.SerializableTokenCache()
        self._load_cache()
        self.app = app or msal.PublicClientApplication(
            client_id, authority=authority, token_cache=self.cache
        )

    def accounts(self) -> List[Account]:
        return [_to_account(raw) for raw in self.app.get_accounts() or []]

    def acquire_silent(self, scopes: Sequence[str], account: Account) -> TokenResult:
        raw_account = self._find_raw_account(account)
        if raw_account is None:
            return TokenResult.needs_interaction("account not in token cache")
        result = self.app.acquire_token_silent_with_error(list(scopes), account=raw_account)
        self._save_cache()
        if not result:
            return TokenResult.needs_interaction("no cached token")
        return _to_result(result, silent=True)

    def acquire_interactive(self, scopes: Sequence[str]) -> TokenResult:
        result = self.app.acquire_token_interactive(list(scopes))
        self._save_cache()
        return _to_result(result or {}, silent=False)

    def sign_out(self, account: Optional[Account]) -> None:
        targets = self.app.get_accounts() or []
        for raw in targets:
            if account is None or _matches(raw, account):
                self.app.remove_account(raw)
        self._save_cache()

    def _find_raw_account(self, account: Account) -> Optional[Dict[str, Any]]:
        for raw in self.app.get_accounts() or []:
            if _matches(raw, account):
                return raw
        return None

    # ---- Token cache file ----
    def _load_cache(self) -> None:
        if not self.cache_path or not os.path.exists(self.cache_path):
            return
        with open(self.cache_path, "r", encoding="utf-8") as f:
            self.cache.deserialize(f.read())
        log.debug("Loaded token cache from %s", self.cache_path)

    def _save_cache(self) -> None:
        if not self.cache_path or not self.cache.has_state_changed:
            return
        os.makedirs(os.path.dirname(self.cache_path) or ".", exist_ok=True)
        # Holds refresh tokens: owner read/write only.
        fd = os.open(self.cache_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(self.cache.serialize())
        log.debug("Saved token cache to %s", self.cache_path)


def _to_account(raw: Mapping[str, Any]) -> Account:
    return Account(
        username=str(raw.get("username") or ""),
        name=str(raw.get("name") or ""),
        home_account_id=str(raw.get("home_account_id") or ""),
    )


def _matches(raw: Mapping[str, Any], account: Account) -> bool:
    if account.home_account_id and raw.get("home_account_id") == account.home_account_id:
        return True
    return bool(account.username) and raw.get("username") == account.username


def _to_result(result: Mapping[str, Any], *, silent: bool) -> TokenResult:
    token = result.get("access_token")
    if token:
        claims = result.get("id_token_claims") or {}
        account = None
        if claims:
            account = Account(
                username=str(claims.get("preferred_username") or ""),
                name=str(claims.get("name") or ""),
                home_account_id=_home_account_id(claims),
            )
        return TokenResult.success(str(token), account)
    error = str(result.get("error") or "unknown_error")
    description = str(result.get("error_description") or error)
    if silent and error in _INTERACTION_ERRORS:
        return TokenResult.needs_interaction(description)
    log.info("Token acquisition failed: %s", error)
    return TokenResult.failure(description)


def _home_account_id(claims: Mapping[str, Any]) -> str:
    oid = claims.get("oid")
    tid = claims.get("tid")
    if oid and tid:
        return f"{oid}.{tid}"
    return ""


__all__ = ["MsalTokenSource"]
