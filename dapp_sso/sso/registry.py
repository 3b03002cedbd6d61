"""
dApp registry.

Entries are never removed; "deleting" a dApp means deactivating it. Callers
are responsible for the operator check, this class only keeps the table.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional, Tuple

from .errors import DappAlreadyRegistered, DappNotActive, DappNotVerified, InvalidInput
from .models import AppInfo

logger = logging.getLogger(__name__)


class AppRegistry:
    """
    Table of dApp metadata keyed by dApp id.

    With ``strict=False`` (the default) toggling an id that was never
    registered creates a default entry. ``strict=True`` rejects such calls
    with InvalidInput.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self._apps: Dict[str, AppInfo] = {}

    def __len__(self) -> int:
        return len(self._apps)

    def __iter__(self) -> Iterator[Tuple[str, AppInfo]]:
        return iter(list(self._apps.items()))

    def get(self, dapp_id: str) -> Optional[AppInfo]:
        return self._apps.get(dapp_id)

    def register(self, dapp_id: str, name: str, domain: str, owner: str) -> AppInfo:
        """
        Register (and thereby verify) a dApp.

        Only an *active* entry blocks registration; a deactivated id can be
        registered again with new metadata.
        """
        if not dapp_id:
            raise InvalidInput("dApp id must not be empty")
        existing = self._apps.get(dapp_id)
        if existing is not None and existing.is_active:
            raise DappAlreadyRegistered(dapp_id)

        info = AppInfo(
            name=name,
            domain=domain,
            owner=owner,
            is_verified=True,
            is_active=True,
        )
        self._apps[dapp_id] = info
        logger.info(f"Registered dApp {dapp_id} ({domain}) owned by {owner}")
        return info

    def set_active(self, dapp_id: str, active: bool) -> AppInfo:
        info = self._entry_for_update(dapp_id)
        info.is_active = active
        logger.info(f"dApp {dapp_id} {'reactivated' if active else 'deactivated'}")
        return info

    def set_verified(self, dapp_id: str, verified: bool) -> AppInfo:
        info = self._entry_for_update(dapp_id)
        info.is_verified = verified
        logger.info(f"dApp {dapp_id} verification set to {verified}")
        return info

    def accepts_connections(self, dapp_id: str) -> bool:
        info = self._apps.get(dapp_id)
        return info is not None and info.accepts_connections

    def require_available(self, dapp_id: str) -> AppInfo:
        """Return the entry if it is verified and active, else raise why not."""
        info = self._apps.get(dapp_id)
        if info is None or not info.is_verified:
            raise DappNotVerified(dapp_id)
        if not info.is_active:
            raise DappNotActive(dapp_id)
        return info

    def _entry_for_update(self, dapp_id: str) -> AppInfo:
        info = self._apps.get(dapp_id)
        if info is not None:
            return info
        if self.strict:
            raise InvalidInput(f"dApp {dapp_id!r} is not registered")
        logger.warning(f"Creating default registry entry for unregistered dApp {dapp_id}")
        info = AppInfo()
        self._apps[dapp_id] = info
        return info
