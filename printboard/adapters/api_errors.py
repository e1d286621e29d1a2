from __future__ import annotations

from typing import Any, Optional

from printboard.domain.errors import NotFoundError


class ApiError(RuntimeError):
    """Base class for Graph REST adapter failures.

    ``context`` names the attempted operation (``update_card[12]``) so callers
    can tell which call failed without parsing the message.
    """

    kind = "api_error"
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.hint = hint
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx from Graph."""

    kind = "client_error"

    def __init__(
        self,
        message: str,
        *,
        status: int,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            status=status,
            code=code,
            hint=hint,
            payload=payload,
            context=context,
        )


class BadRequestError(ApiClientError):
    """HTTP 400: the store rejected the payload."""

    kind = "bad_request"


class UnauthorizedError(ApiClientError):
    """HTTP 401: token missing, expired, or revoked."""

    kind = "unauthorized"


class ForbiddenError(ApiClientError):
    """HTTP 403: the account lacks permission on the site, list, or library."""

    kind = "forbidden"


class RemoteNotFoundError(ApiClientError, NotFoundError):
    """HTTP 404: the addressed item or resource is gone."""

    kind = "not_found"

    def __init__(self, message: str, *, card_id: str = "", **kwargs: Any) -> None:
        kwargs.setdefault("status", 404)
        ApiClientError.__init__(self, message, **kwargs)
        self.card_id = card_id


class RateLimitedError(ApiClientError):
    """HTTP 429: throttled. The caller may retry after ``retry_after`` seconds."""

    kind = "rate_limited"
    retryable = True

    def __init__(self, message: str, *, retry_after: Optional[float] = None, **kwargs: Any) -> None:
        kwargs.setdefault("status", 429)
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(ApiError):
    """HTTP 5xx from Graph or SharePoint."""

    kind = "server_error"

    def __init__(
        self,
        message: str,
        *,
        status: int,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            status=status,
            payload=payload,
            context=context,
        )


class NetworkError(ApiError):
    """No response received (timeout, DNS, refused connection)."""

    kind = "network_error"

    def __init__(
        self,
        message: str,
        *,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message, context=context)


_CLIENT_ERRORS = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
}


def ensure_ok(resp: Any, ctx: str, *, card_id: str = "") -> None:
    """Raise the typed error matching a non-2xx response."""
    status = resp.status_code
    if 200 <= status < 300:
        return
    payload = parse_error_payload(resp)
    message = build_error_message(ctx, status, payload)
    code = extract_error_code(payload)
    hint = extract_error_hint(payload)
    if status == 404:
        raise RemoteNotFoundError(
            message, card_id=card_id, code=code, hint=hint, payload=payload, context=ctx
        )
    if status == 429:
        raise RateLimitedError(
            message,
            retry_after=_retry_after(resp),
            code=code,
            hint=hint,
            payload=payload,
            context=ctx,
        )
    if 400 <= status < 500:
        error_cls = _CLIENT_ERRORS.get(status, ApiClientError)
        raise error_cls(
            message,
            status=status,
            code=code,
            hint=hint,
            payload=payload,
            context=ctx,
        )
    if 500 <= status < 600:
        raise ServerError(
            message,
            status=status,
            payload=payload,
            context=ctx,
        )
    raise ApiError(message, status=status, payload=payload, context=ctx)


def _retry_after(resp: Any) -> Optional[float]:
    headers = getattr(resp, "headers", None) or {}
    raw = headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def parse_error_payload(resp: Any) -> Any:
    """Best-effort extraction of error payload without raising."""
    try:
        return resp.json()
    except Exception:
        snippet = getattr(resp, "text", "")
        if not snippet:
            return None
        return snippet[:400]


def build_error_message(ctx: str, status: int, payload: Any) -> str:
    detail = first_string(payload)
    if detail:
        return f"{ctx}: {detail} (HTTP {status})"
    return f"{ctx}: HTTP {status}"


def extract_error_code(payload: Any) -> Optional[str]:
    # Graph wraps errors as {"error": {"code": ..., "message": ...}}.
    if isinstance(payload, dict):
        inner = payload.get("error")
        if isinstance(inner, dict):
            return extract_error_code(inner)
        for key in ("code", "error", "error_code"):
            value = payload.get(key)
            if value is None:
                continue
            if isinstance(value, str):
                return value
            return str(value)
    return None


def extract_error_hint(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        inner = payload.get("error")
        if isinstance(inner, dict):
            nested = inner.get("innerError") or inner.get("details")
            text = stringify(nested) if nested else None
            if text:
                return text
        for key in ("hint", "details", "errors"):
            if key not in payload:
                continue
            text = stringify(payload[key])
            if text:
                return text
    if isinstance(payload, str):
        return payload.strip() or None
    return None


def first_string(payload: Any) -> Optional[str]:
    if isinstance(payload, str):
        text = payload.strip()
        return text or None
    if isinstance(payload, dict):
        for key in ("message", "detail", "error", "title"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, (dict, list)):
                candidate = first_string(value)
                if candidate:
                    return candidate
    if isinstance(payload, list):
        for item in payload:
            candidate = first_string(item)
            if candidate:
                return candidate
    return None


def stringify(data: Any, *, limit: int = 200) -> Optional[str]:
    if data is None:
        return None
    if isinstance(data, str):
        cleaned = data.strip()
        return cleaned[:limit] if cleaned else None
    if isinstance(data, list):
        parts = []
        for item in data:
            text = stringify(item, limit=limit)
            if text:
                parts.append(text)
            if len(parts) >= 3:
                break
        if not parts:
            return None
        return "; ".join(parts)[:limit]
    if isinstance(data, dict):
        pairs = []
        for key, value in list(data.items())[:4]:
            value_text = stringify(value, limit=limit)
            if value_text:
                pairs.append(f"{key}={value_text}")
        if not pairs:
            return None
        return ", ".join(pairs)[:limit]
    text = str(data).strip()
    return text[:limit] if text else None


__all__ = [
    "ApiClientError",
    "ApiError",
    "BadRequestError",
    "ForbiddenError",
    "NetworkError",
    "RateLimitedError",
    "RemoteNotFoundError",
    "ServerError",
    "UnauthorizedError",
    "ensure_ok",
    "parse_error_payload",
]
