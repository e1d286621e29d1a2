"""Bearer token lifecycle for the card workflow.

``AuthTokenProvider.get_token`` tries the cached session silently and falls
back to one interactive prompt only when the token source reports that user
interaction is required. There are no further retries.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from printboard.domain.auth_models import Account, TokenResult
from printboard.domain.errors import AuthError
from printboard.domain.ports import TokenSourcePort

log = logging.getLogger(__name__)


class AuthTokenProvider:
    """Owns the signed-in account and hands out access tokens.

    Attributes exposed to the presentation layer: ``account``,
    ``is_authenticated``, ``loading`` and ``error``.
    """

    def __init__(self, source: TokenSourcePort, scopes: Sequence[str]) -> None:
        self.source = source
        self.scopes = tuple(scopes)
        self.loading = False
        self.error: Optional[str] = None
        cached = list(source.accounts() or [])
        self.account: Optional[Account] = cached[0] if cached else None

    @property
    def is_authenticated(self) -> bool:
        return self.account is not None

    def get_token(self) -> str:
        """Return an access token for the signed-in account.

        Raises:
            AuthError: No account is signed in, or silent and interactive
                acquisition both failed.
        """
        if self.account is None:
            raise AuthError("No signed-in account", reason="no_account")

        result = self.source.acquire_silent(self.scopes, self.account)
        if result.outcome == "needs_interaction":
            log.info("Silent token acquisition needs interaction: %s", result.reason or "-")
            result = self.source.acquire_interactive(self.scopes)
        return self._accept(result)

    def login(self) -> Account:
        """Interactive sign-in; records the account for later silent attempts."""
        self.loading = True
        self.error = None
        try:
            result = self.source.acquire_interactive(self.scopes)
            self._accept(result)
        except AuthError:
            self.error = "Could not sign in. Please try again."
            raise
        finally:
            self.loading = False
        if self.account is None:
            # Interactive flow returned a token without identity claims.
            cached = list(self.source.accounts() or [])
            if not cached:
                self.error = "Could not sign in. Please try again."
                raise AuthError("Sign-in returned no account", reason="no_account")
            self.account = cached[0]
        log.info("Signed in as %s", self.account.username or self.account.name)
        return self.account

    def logout(self) -> None:
        self.loading = True
        try:
            self.source.sign_out(self.account)
        finally:
            self.loading = False
        self.account = None
        self.error = None

    def _accept(self, result: TokenResult) -> str:
        if result.ok:
            if result.account is not None:
                self.account = result.account
            return str(result.token)
        if result.outcome == "needs_interaction":
            raise AuthError("Interactive sign-in required", reason=result.reason or "needs_interaction")
        raise AuthError("Token acquisition failed", reason=result.reason or None)


__all__ = ["AuthTokenProvider"]
