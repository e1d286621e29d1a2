"""Typed results for token acquisition attempts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional


TokenOutcome = Literal["success", "needs_interaction", "failure"]


@dataclass(frozen=True)
class Account:
    """Signed-in identity cached by the token source."""

    username: str
    name: str = ""
    home_account_id: str = ""


@dataclass(frozen=True)
class TokenResult:
    """Outcome of one silent or interactive token attempt."""

    outcome: TokenOutcome
    token: Optional[str] = None
    account: Optional[Account] = None
    reason: str = ""

    @classmethod
    def success(cls, token: str, account: Optional[Account] = None) -> "TokenResult":
        return cls("success", token=token, account=account)

    @classmethod
    def needs_interaction(cls, reason: str = "") -> "TokenResult":
        return cls("needs_interaction", reason=reason)

    @classmethod
    def failure(cls, reason: str) -> "TokenResult":
        return cls("failure", reason=reason)

    @property
    def ok(self) -> bool:
        return self.outcome == "success" and bool(self.token)


__all__ = ["Account", "TokenOutcome", "TokenResult"]
