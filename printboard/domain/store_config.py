"""Connection settings for the SharePoint list store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlparse

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_LIST_NAME = "SolicitacoesImpressao3D"
DEFAULT_IMAGES_LIBRARY = "ImagensPecas"


@dataclass(frozen=True)
class StoreConfig:
    """Where the cards live.

    Attributes:
        site_id: Graph site id (``host,site-guid,web-guid``). Takes precedence.
        site_url: Server-relative (``/sites/Print``) or absolute site URL.
        list_name: Display name of the requests list.
        images_library: Name of the document library holding part images.
        base_url: Graph endpoint root.
        request_timeout_s: Timeout for JSON calls.
        upload_timeout_s: Timeout for image uploads.
    """

    site_id: str = ""
    site_url: str = ""
    list_name: str = DEFAULT_LIST_NAME
    images_library: str = DEFAULT_IMAGES_LIBRARY
    base_url: str = GRAPH_BASE_URL
    request_timeout_s: int = 10
    upload_timeout_s: int = 60

    def problems(self) -> List[str]:
        """Return human-readable reasons this config cannot reach the store."""
        issues: List[str] = []
        if not self.site_id.strip() and not self.site_url.strip():
            issues.append("site_id or site_url is required")
        if not self.list_name.strip():
            issues.append("list_name is empty")
        if not self.images_library.strip():
            issues.append("images_library is empty")
        parsed = urlparse(self.base_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            issues.append(f"base_url is not an http(s) URL: {self.base_url!r}")
        if self.request_timeout_s <= 0 or self.upload_timeout_s <= 0:
            issues.append("timeouts must be positive")
        return issues

    def is_valid(self) -> bool:
        return not self.problems()

    def site_path(self) -> Optional[str]:
        """Graph path segment addressing the site, or ``None`` if unset."""
        if self.site_id.strip():
            return f"/sites/{self.site_id.strip()}"
        url = self.site_url.strip()
        if not url:
            return None
        parsed = urlparse(url)
        if parsed.netloc:
            path = parsed.path.rstrip("/") or "/"
            return f"/sites/{parsed.netloc}:{path}"
        path = "/" + url.strip("/")
        return f"/sites/root:{path}"


__all__ = [
    "DEFAULT_IMAGES_LIBRARY",
    "DEFAULT_LIST_NAME",
    "GRAPH_BASE_URL",
    "StoreConfig",
]
