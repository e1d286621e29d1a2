from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..domain.store_config import (
    DEFAULT_IMAGES_LIBRARY,
    DEFAULT_LIST_NAME,
    GRAPH_BASE_URL,
    StoreConfig,
)
from ..utils.logging import env_debug

DEFAULT_AUTHORITY = "https://login.microsoftonline.com/organizations"
DEFAULT_SCOPES: Tuple[str, ...] = ("User.Read", "Sites.ReadWrite.All", "Files.ReadWrite.All")

# Environment variable -> settings key.
ENV_KEYS: Dict[str, str] = {
    "PRINTBOARD_SITE_ID": "site_id",
    "PRINTBOARD_SITE_URL": "site_url",
    "PRINTBOARD_LIST_NAME": "list_name",
    "PRINTBOARD_IMAGES_LIBRARY": "images_library",
    "PRINTBOARD_GRAPH_URL": "graph_base_url",
    "PRINTBOARD_CLIENT_ID": "client_id",
    "PRINTBOARD_AUTHORITY": "authority",
    "PRINTBOARD_REQUEST_TIMEOUT_S": "request_timeout_s",
}


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    site_id: str = ""
    site_url: str = ""
    list_name: str = DEFAULT_LIST_NAME
    images_library: str = DEFAULT_IMAGES_LIBRARY
    graph_base_url: str = GRAPH_BASE_URL
    request_timeout_s: int = 10
    upload_timeout_s: int = 60
    client_id: str = ""
    authority: str = DEFAULT_AUTHORITY
    scopes: Tuple[str, ...] = field(default_factory=lambda: DEFAULT_SCOPES)


class SettingsVM:
    """Keeps connection settings state and validation, no I/O here."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig()
        self.on_save = on_save
        self.debug_logging: bool = env_debug()

    # ------------------------------------------------------------------
    # Properties bridging to the typed config
    # ------------------------------------------------------------------
    @property
    def site_url(self) -> str:
        return self.config.site_url

    @site_url.setter
    def site_url(self, value: str) -> None:
        self.config = replace(self.config, site_url=self._coerce_optional_str(value))

    @property
    def list_name(self) -> str:
        return self.config.list_name

    @list_name.setter
    def list_name(self, value: str) -> None:
        self.config = replace(self.config, list_name=self._coerce_name(value, DEFAULT_LIST_NAME))

    @property
    def client_id(self) -> str:
        return self.config.client_id

    @property
    def authority(self) -> str:
        return self.config.authority

    @property
    def scopes(self) -> Tuple[str, ...]:
        return self.config.scopes

    # ------------------------------------------------------------------
    def store_config(self) -> StoreConfig:
        """Project the settings onto what the card store adapter needs."""
        cfg = self.config
        return StoreConfig(
            site_id=cfg.site_id,
            site_url=cfg.site_url,
            list_name=cfg.list_name,
            images_library=cfg.images_library,
            base_url=cfg.graph_base_url,
            request_timeout_s=cfg.request_timeout_s,
            upload_timeout_s=cfg.upload_timeout_s,
        )

    def is_valid(self) -> bool:
        return self.store_config().is_valid() and bool(self.client_id)

    def problems(self) -> list:
        issues = list(self.store_config().problems())
        if not self.client_id:
            issues.append("client_id is required for sign-in")
        return issues

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""

        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed_flat_keys = {*SettingsConfig.__annotations__.keys(), "debug_logging"}
        unknown = set(payload.keys()) - allowed_flat_keys
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates: Dict[str, Any] = {}
        for cfg_key in SettingsConfig.__annotations__.keys():
            if cfg_key in payload:
                updates[cfg_key] = self._coerce_config_value(cfg_key, payload[cfg_key])

        if updates:
            self.config = replace(self.config, **updates)

        if "debug_logging" in payload:
            self.debug_logging = self._coerce_bool(payload["debug_logging"])

    def apply_env(self, environ: Mapping[str, str]) -> None:
        """Apply ``PRINTBOARD_*`` environment overrides on top of current values."""
        payload = {key: environ[var] for var, key in ENV_KEYS.items() if environ.get(var, "").strip()}
        if payload:
            self.apply_dict(payload)

    def to_dict(self) -> dict:
        snapshot = asdict(self.config)
        snapshot["scopes"] = list(self.config.scopes)
        snapshot["debug_logging"] = bool(self.debug_logging)
        return snapshot

    def cmd_save(self) -> None:
        if not self.store_config().is_valid():
            raise ValueError("Settings invalid: " + "; ".join(self.store_config().problems()))
        if self.on_save:
            self.on_save(self.to_dict())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key in {"site_id", "site_url", "client_id"}:
            return self._coerce_optional_str(raw)
        if key == "list_name":
            return self._coerce_name(raw, DEFAULT_LIST_NAME)
        if key == "images_library":
            return self._coerce_name(raw, DEFAULT_IMAGES_LIBRARY)
        if key == "graph_base_url":
            return self._coerce_name(raw, GRAPH_BASE_URL).rstrip("/")
        if key == "authority":
            return self._coerce_name(raw, DEFAULT_AUTHORITY)
        if key in {"request_timeout_s", "upload_timeout_s"}:
            return self._coerce_int(key, raw, allow_negative=False)
        if key == "scopes":
            return self._coerce_scopes(raw)
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_name(value: Any, default: str) -> str:
        if value is None:
            return default
        return str(value).strip() or default

    @staticmethod
    def _coerce_optional_str(value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_int(name: str, value: Any, *, allow_negative: bool = True) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            coerced = int(value)
        elif isinstance(value, str):
            try:
                coerced = int(value.strip())
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        else:
            raise ValueError(f"{name} must be an integer.")
        if not allow_negative and coerced < 0:
            raise ValueError(f"{name} must be non-negative.")
        return coerced

    @staticmethod
    def _coerce_scopes(value: Any) -> Tuple[str, ...]:
        if value is None:
            return DEFAULT_SCOPES
        if isinstance(value, str):
            items = value.replace(",", " ").split()
        elif isinstance(value, (list, tuple)):
            items = [str(item).strip() for item in value]
        else:
            raise ValueError("scopes must be a list or a space separated string.")
        scopes = tuple(item for item in items if item)
        return scopes or DEFAULT_SCOPES


def default_settings_payload() -> dict:
    """Return a fresh snapshot containing the default settings payload."""
    return SettingsVM().to_dict()
