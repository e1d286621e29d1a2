from __future__ import annotations
import json, os
from typing import Any, Dict


class StorageLocal:
    """Local filesystem storage for connection settings (JSON)."""

    PREFS_FILE = "user_prefs.json"
    TOKEN_CACHE_FILE = "msal_token_cache.json"

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    @property
    def prefs_path(self) -> str:
        return os.path.join(self.root, self.PREFS_FILE)

    @property
    def token_cache_path(self) -> str:
        return os.path.join(self.root, self.TOKEN_CACHE_FILE)

    # ---- User prefs (JSON) ----
    def save_user_prefs(self, prefs: Dict[str, Any]) -> None:
        os.makedirs(self.root, exist_ok=True)
        with open(self.prefs_path, "w", encoding="utf-8") as f:
            json.dump(prefs, f, ensure_ascii=False, indent=2)

    def load_user_prefs(self) -> Dict[str, Any]:
        if not os.path.exists(self.prefs_path):
            return {}
        with open(self.prefs_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.prefs_path}: expected a JSON object")
        return data
