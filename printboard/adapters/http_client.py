"""Shared HTTP transport for the Graph REST adapter.

This module provides a thin wrapper around ``requests.Session`` so the
adapter shares timeout policy and bearer-token header construction.

Dependencies:
    - ``requests`` for network I/O.
    - ``printboard.adapters.api_errors.NetworkError`` for typed transport failures.

Call context:
    - Constructed by ``printboard/adapters/sharepoint_rest.py``.
    - Used only inside adapter methods; use cases interact through ports.

Requests are sent once. Throttling and transient failures surface as typed
errors and any retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from printboard.adapters.api_errors import NetworkError
from printboard.domain.errors import NotConfiguredError

log = logging.getLogger(__name__)


@dataclass
class HttpConfig:
    """Timeout configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Default timeout in seconds for JSON API calls.
        upload_timeout_s: Default timeout in seconds for file uploads.
    """

    request_timeout_s: int = 10
    upload_timeout_s: int = 60


class GraphSession:
    """requests wrapper that attaches ``Authorization: Bearer`` headers.

    This class is transport-only. Callers provide endpoint URLs
    and decide how to map non-2xx responses into typed errors.
    """

    def __init__(self, cfg: HttpConfig, token: Optional[str] = None) -> None:
        """Create a session.

        Args:
            cfg: Shared timeout settings.
            token: Optional bearer token; can be set later with ``set_token``.

        Side Effects:
            Creates a persistent ``requests.Session`` object.
        """
        self.session = requests.Session()
        self.cfg = cfg
        self._token: Optional[str] = token

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    def set_token(self, token: Optional[str]) -> None:
        self._token = (token or "").strip() or None

    def _headers(
        self,
        accept: str = "application/json",
        content_type: Optional[str] = None,
    ) -> Dict[str, str]:
        """Build request headers.

        Raises:
            NotConfiguredError: If no bearer token has been set.
        """
        if not self._token:
            raise NotConfiguredError("No auth token set; call set_auth_token first")
        headers = {"Accept": accept, "Authorization": f"Bearer {self._token}"}
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def _send(
        self,
        method: str,
        url: str,
        *,
        context: str,
        timeout: Optional[int] = None,
        **kwargs: Any,
    ) -> requests.Response:
        """Issue one request, converting connectivity failures to ``NetworkError``."""
        log.debug("%s %s (%s)", method, url, context)
        try:
            return self.session.request(
                method,
                url,
                timeout=timeout or self.cfg.request_timeout_s,
                **kwargs,
            )
        except (req_exc.Timeout, req_exc.ConnectionError) as exc:
            raise NetworkError(f"{context}: no response from {url} ({exc})", context=context) from exc
        except req_exc.RequestException as exc:
            raise NetworkError(f"{context}: request failed ({exc})", context=context) from exc

    def get(
        self,
        url: str,
        *,
        context: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        return self._send(
            "GET", url, context=context, params=params, headers=self._headers(), timeout=timeout
        )

    def post(
        self,
        url: str,
        *,
        context: str,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        return self._send(
            "POST",
            url,
            context=context,
            json=json_body,
            headers=self._headers(content_type="application/json"),
            timeout=timeout,
        )

    def patch(
        self,
        url: str,
        *,
        context: str,
        json_body: Dict[str, Any],
        timeout: Optional[int] = None,
    ) -> requests.Response:
        return self._send(
            "PATCH",
            url,
            context=context,
            json=json_body,
            headers=self._headers(content_type="application/json"),
            timeout=timeout,
        )

    def delete(
        self,
        url: str,
        *,
        context: str,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        return self._send("DELETE", url, context=context, headers=self._headers(), timeout=timeout)

    def put_bytes(
        self,
        url: str,
        *,
        context: str,
        data: bytes,
        content_type: str,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        """Upload raw bytes with the caller's MIME type."""
        return self._send(
            "PUT",
            url,
            context=context,
            data=data,
            headers=self._headers(content_type=content_type or "application/octet-stream"),
            timeout=timeout or self.cfg.upload_timeout_s,
        )


__all__ = ["GraphSession", "HttpConfig"]
