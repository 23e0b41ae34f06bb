"""Process-wide settings service with change notification."""

import asyncio
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from payouts.errors import InputValidationError, PayoutsError, SettingsNotReadyError
from payouts.models import AdjustmentMode, AppSettings

from ..ports.settings_store import SettingsStorePort

logger = logging.getLogger(__name__)

SettingsListener = Callable[[AppSettings], None]


def _is_amount(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float)) and value >= 0


def validate_patch(patch: Dict[str, Any]) -> Dict[str, Any]:
    """Reject unknown keys and obviously invalid values in a settings patch."""
    unknown = set(patch) - set(AppSettings.FIELDS)
    if unknown:
        raise InputValidationError(f"Unknown settings fields: {', '.join(sorted(unknown))}")

    for key in ("entryFee", "fixedProfit"):
        value = patch.get(key)
        if value is not None and not _is_amount(value):
            raise InputValidationError(f"{key} must be a non-negative number")

    mode = patch.get("adjustmentMode")
    if mode is not None and mode not in {m.value for m in AdjustmentMode}:
        raise InputValidationError("adjustmentMode must be 'auto' or 'fixed'")

    rules = patch.get("prizeRules")
    if rules is not None:
        if not isinstance(rules, dict):
            raise InputValidationError("prizeRules must be an object")
        placement = rules.get("placementPrizes")
        if placement is not None and not isinstance(placement, dict):
            raise InputValidationError("placementPrizes must be an object")
        for rank, amount in (placement or {}).items():
            if not str(rank).isdigit() or int(rank) <= 0:
                raise InputValidationError("placementPrizes keys must be positive ranks")
            if not _is_amount(amount):
                raise InputValidationError("placementPrizes amounts must be non-negative numbers")
        kill_prize = rules.get("killPrize")
        if kill_prize is not None and not _is_amount(kill_prize):
            raise InputValidationError("killPrize must be a non-negative number")
    return patch


class SettingsService:
    """Cached view of the global settings row.

    ``hydrate()`` loads the row and must run before ``save()``. Every change
    to the cached value, whether from a local save or a ``refresh()`` that
    picked up another session's write, is pushed to subscribers.
    """

    def __init__(self, store: SettingsStorePort):
        self._store = store
        self._lock = threading.Lock()
        self._cache: Optional[AppSettings] = None
        self._listeners: List[SettingsListener] = []

    @property
    def hydrated(self) -> bool:
        return self._cache is not None

    def hydrate(self) -> AppSettings:
        settings = self._store.get()
        self._replace(settings)
        logger.info("Settings hydrated from store")
        return settings

    def ensure_hydrated(self) -> AppSettings:
        if self._cache is None:
            return self.hydrate()
        return self._cache

    def get(self) -> AppSettings:
        """Stored settings as last seen; unset fields stay None."""
        return self.ensure_hydrated()

    def effective(self) -> AppSettings:
        """Stored settings with defaults filled in for unset fields."""
        return self.get().with_defaults()

    def save(self, patch: Dict[str, Any]) -> AppSettings:
        if self._cache is None:
            raise SettingsNotReadyError("Settings must be loaded before they can be changed.")
        validate_patch(patch)
        self._store.save(patch)
        updated = self._cache.merged(patch)
        self._replace(updated)
        logger.info("Settings saved: %s", ", ".join(sorted(patch)) or "no fields")
        return updated

    def refresh(self) -> bool:
        """Reload from the store; returns True when the cached value changed."""
        return self._replace(self._store.get())

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _replace(self, settings: AppSettings) -> bool:
        with self._lock:
            changed = settings != self._cache
            self._cache = settings
            listeners = list(self._listeners)
        if changed:
            for listener in listeners:
                try:
                    listener(settings)
                except Exception:
                    logger.exception("Settings listener failed")
        return changed


class SettingsPoller:
    """Background task refreshing a SettingsService on a fixed interval."""

    def __init__(self, service: SettingsService, interval_s: float):
        self._service = service
        self._interval_s = interval_s
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            await asyncio.sleep(self._interval_s)
            try:
                if await loop.run_in_executor(None, self._service.refresh):
                    logger.info("Settings changed in another session; cache refreshed")
            except PayoutsError as e:
                logger.warning(f"Settings refresh failed: {e}")
            except Exception:
                logger.exception("Unexpected error refreshing settings")

    def start(self) -> None:
        if self._interval_s <= 0 or self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
