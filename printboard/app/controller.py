"""Adapter and use-case wiring for the card workflow runtime.

This module owns lazy construction of the concrete Graph adapter, the MSAL
token source, the auth provider and the workflow engine from values in
:class:`printboard.viewmodels.settings_vm.SettingsVM`.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from ..adapters.msal_auth import MsalTokenSource
from ..adapters.sharepoint_rest import SharePointCardStore
from ..adapters.storage_local import StorageLocal
from ..domain.ports import TokenSourcePort
from ..usecases.auth_session import AuthTokenProvider
from ..viewmodels.settings_vm import SettingsVM
from .card_workflow import CardWorkflow

log = logging.getLogger(__name__)


def load_settings(
    storage: StorageLocal,
    environ: Optional[Mapping[str, str]] = None,
) -> SettingsVM:
    """Build settings from persisted prefs, then environment overrides."""
    settings_vm = SettingsVM(on_save=storage.save_user_prefs)
    prefs = storage.load_user_prefs()
    if prefs:
        settings_vm.apply_dict(prefs)
    settings_vm.apply_env(os.environ if environ is None else environ)
    return settings_vm


class AppController:
    """Create and cache runtime adapters/use-cases from settings state.

    Call chain:
        ``printboard.app.main`` creates one instance; commands call
        ``ensure_ready`` before touching ``workflow`` or ``auth``.
    """

    def __init__(
        self,
        settings_vm: SettingsVM,
        *,
        token_source: Optional[TokenSourcePort] = None,
        token_cache_path: Optional[str] = None,
    ) -> None:
        """Initialize controller with settings-backed lazy dependencies.

        Args:
            settings_vm: Settings holding site, list and sign-in values.
            token_source: Optional pre-built token source (tests, embedding);
                an MSAL source is created from settings otherwise.
            token_cache_path: File the MSAL token cache is kept in; without
                it sign-ins last only as long as the process.
        """
        self.settings_vm = settings_vm
        self._token_source = token_source
        self.token_cache_path = token_cache_path
        self._store: Optional[SharePointCardStore] = None
        self._auth: Optional[AuthTokenProvider] = None
        self._workflow: Optional[CardWorkflow] = None

    @property
    def store(self) -> Optional[SharePointCardStore]:
        return self._store

    @property
    def auth(self) -> Optional[AuthTokenProvider]:
        return self._auth

    @property
    def workflow(self) -> Optional[CardWorkflow]:
        return self._workflow

    def reset(self) -> None:
        """Drop cached objects so the next ``ensure_ready`` rebuilds from settings."""
        self._store = None
        self._auth = None
        self._workflow = None

    def ensure_ready(self) -> bool:
        """Ensure the workflow is available.

        Returns:
            ``True`` when wired, ``False`` when no token source can be built
            (client id missing). An incomplete store configuration still
            wires: reads come back empty and writes fail with
            ``NotConfiguredError``.
        """
        if self._workflow is not None:
            return True

        if self._token_source is None:
            client_id = self.settings_vm.client_id
            if not client_id:
                return False
            self._token_source = MsalTokenSource(
                client_id,
                authority=self.settings_vm.authority,
                cache_path=self.token_cache_path,
            )

        store_config = self.settings_vm.store_config()
        problems = store_config.problems()
        if problems:
            log.warning("Store configuration incomplete: %s", "; ".join(problems))

        self._auth = AuthTokenProvider(self._token_source, self.settings_vm.scopes)
        self._store = SharePointCardStore(store_config)
        self._workflow = CardWorkflow(self._store, self._auth)
        return True


__all__ = ["AppController", "load_settings"]
