from __future__ import annotations

import json
from pathlib import Path

import pytest

from printboard.adapters.storage_local import StorageLocal
from printboard.viewmodels.settings_vm import (
    DEFAULT_SCOPES,
    SettingsVM,
    default_settings_payload,
)


def test_apply_dict_updates_flat_keys() -> None:
    vm = SettingsVM()
    vm.apply_dict(
        {
            "site_id": " host,a,b ",
            "list_name": "Pedidos",
            "images_library": "",
            "graph_base_url": "https://graph.test/v1.0/",
            "request_timeout_s": "15",
            "client_id": "app-123",
            "scopes": "User.Read, Sites.Read.All",
            "debug_logging": "yes",
        }
    )

    cfg = vm.store_config()
    assert cfg.site_id == "host,a,b"
    assert cfg.list_name == "Pedidos"
    assert cfg.images_library == "ImagensPecas"
    assert cfg.base_url == "https://graph.test/v1.0"
    assert cfg.request_timeout_s == 15
    assert vm.client_id == "app-123"
    assert vm.scopes == ("User.Read", "Sites.Read.All")
    assert vm.debug_logging is True
    assert vm.is_valid()


def test_apply_dict_rejects_unknown_keys_and_bad_values() -> None:
    vm = SettingsVM()

    with pytest.raises(ValueError, match="Unsupported settings keys: api_keys"):
        vm.apply_dict({"api_keys": {}})
    with pytest.raises(ValueError, match="non-negative"):
        vm.apply_dict({"request_timeout_s": -1})


def test_apply_env_only_uses_non_blank_values() -> None:
    vm = SettingsVM()
    vm.apply_env(
        {
            "PRINTBOARD_SITE_URL": "/sites/Print",
            "PRINTBOARD_LIST_NAME": "   ",
            "UNRELATED": "x",
        }
    )

    assert vm.site_url == "/sites/Print"
    assert vm.list_name == "SolicitacoesImpressao3D"


def test_problems_include_missing_client_id() -> None:
    vm = SettingsVM()

    assert vm.problems() == [
        "site_id or site_url is required",
        "client_id is required for sign-in",
    ]
    assert not vm.is_valid()


def test_save_roundtrip_through_storage(tmp_path: Path) -> None:
    storage = StorageLocal(root_dir=str(tmp_path / "cfg"))
    assert storage.load_user_prefs() == {}

    vm = SettingsVM(on_save=storage.save_user_prefs)
    vm.site_url = "/sites/Print"
    vm.cmd_save()

    restored = SettingsVM()
    restored.apply_dict(storage.load_user_prefs())
    assert restored.to_dict() == vm.to_dict()
    assert restored.scopes == DEFAULT_SCOPES


def test_cmd_save_refuses_invalid_store_config() -> None:
    saved = []
    vm = SettingsVM(on_save=saved.append)

    with pytest.raises(ValueError, match="Settings invalid"):
        vm.cmd_save()
    assert saved == []


def test_default_payload_is_flat_json(tmp_path: Path) -> None:
    payload = default_settings_payload()

    assert json.loads(json.dumps(payload)) == payload
    assert payload["graph_base_url"] == "https://graph.microsoft.com/v1.0"


def test_storage_rejects_non_object_prefs(tmp_path: Path) -> None:
    (tmp_path / "user_prefs.json").write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError, match="expected a JSON object"):
        StorageLocal(str(tmp_path)).load_user_prefs()
