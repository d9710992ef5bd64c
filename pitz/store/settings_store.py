"""
Settings Store

Single source of truth for current setting values.

Every mutation runs the same pipeline:
    1. Validate - every candidate, up front; any rejection aborts the whole
       batch before storage or memory is touched
    2. Persist  - all adapter writes run concurrently; the pipeline waits
       for all of them and aborts on the first failure
    3. Apply    - merge into the snapshot and notify subscribers, through
       the leading/trailing throttle (steps 1 and 2 are never throttled)

Failures in steps 1 and 2 leave the snapshot unchanged, are recorded as
`store.error`, and are re-raised to the caller.

Example:
    >>> store = SettingsStore.from_config(PitzConfig(storage_backend="json"))
    >>> await store.initialize(resolve_controllers(configuration))
    >>> unsubscribe = store.subscribe(lambda values: print(values))
    >>> await store.set_value("audio.volume", 80)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from pitz.assembly.validation import check_value
from pitz.config import PitzConfig
from pitz.errors import PersistenceError, PitzError, SettingValidationError
from pitz.storage import SettingsStorage, create_storage
from pitz.store.throttle import Throttle, ThrottleState
from pitz.types.definitions import SettingController, SettingDefinition
from pitz.types.values import SettingValue, SettingValues

logger = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[SettingValues], Any]


class SettingsStore:
    """
    Validated, persisted, observable map of setting values.

    Args:
        config: Store configuration (throttle window, persistence timeout)
        storage: Storage adapter; None keeps values in memory only

    Lifecycle:
        store = SettingsStore(config, storage)
        await store.initialize(controllers)
        # ... operations ...
        await store.close()

    Or using context manager (controllers registered beforehand):
        async with SettingsStore(config, storage) as store:
            await store.set_value("audio.enabled", False)
    """

    def __init__(
        self,
        config: PitzConfig | None = None,
        storage: SettingsStorage | None = None,
    ):
        self._config = config or PitzConfig()
        self._storage = storage
        self._values: SettingValues = {}
        self._controllers: dict[str, SettingController] = {}
        self._error: Exception | None = None
        self._is_loading = False
        self._subscribers: list[Subscriber] = []
        self._throttle = Throttle(self._apply, self._config.throttle_seconds)

    @classmethod
    def from_config(cls, config: PitzConfig | None = None) -> SettingsStore:
        """Create a store with the storage adapter the configuration selects."""
        config = config or PitzConfig()
        return cls(config, create_storage(config))

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def values(self) -> SettingValues:
        """Copy of the current snapshot."""
        return dict(self._values)

    def get_value(self, key: str, default: SettingValue | None = None) -> SettingValue | None:
        return self._values.get(key, default)

    @property
    def controllers(self) -> Mapping[str, SettingController]:
        """Read-only view of registered controllers."""
        return MappingProxyType(self._controllers)

    @property
    def error(self) -> Exception | None:
        """Last pipeline failure, cleared by the next accepted write."""
        return self._error

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def storage(self) -> SettingsStorage | None:
        return self._storage

    @property
    def config(self) -> PitzConfig:
        return self._config

    @property
    def has_pending_updates(self) -> bool:
        """True while accepted writes are waiting for the trailing notification."""
        return self._throttle.state is ThrottleState.PENDING and self._throttle.pending is not None

    # -------------------------------------------------------------------------
    # Controllers
    # -------------------------------------------------------------------------

    def register_controller(self, controller: SettingController | SettingDefinition) -> None:
        """Register (or fully replace) the controller for a key. Values are untouched."""
        if isinstance(controller, SettingDefinition):
            controller = SettingController.from_definition(controller)
        logger.debug(f"Registering controller: {controller.key}")
        self._controllers[controller.key] = controller

    def unregister_controller(self, key: str) -> None:
        """Remove a controller. Values are untouched."""
        logger.debug(f"Unregistering controller: {key}")
        self._controllers.pop(key, None)

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Call `callback(snapshot)` after every applied snapshot change.

        Returns:
            Function that removes the subscription (safe to call twice)
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _apply(self, updates: dict[str, Any]) -> None:
        self._values.update(updates)
        logger.debug(f"Applied {len(updates)} update(s): {list(updates)}")
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(dict(self._values))
            except Exception:
                logger.exception(f"Settings subscriber {callback!r} failed")

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def _validate(self, updates: Mapping[str, Any]) -> None:
        for key, value in updates.items():
            controller = self._controllers.get(key)
            if controller is None:
                raise SettingValidationError(key, value, "no controller registered")
            reason = check_value(value, controller.type, controller.validator)
            if reason is not None:
                raise SettingValidationError(key, value, reason)

    async def _storage_call(self, key: str | None, action: str, call: Awaitable[T]) -> T:
        """Await an adapter call with the configured timeout, wrapping failures."""
        timeout = self._config.persist_timeout_s
        target = key if key is not None else "storage"
        try:
            if timeout is None:
                return await call
            return await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError as e:
            raise PersistenceError(key, f"Timed out after {timeout}s trying to {action} {target}") from e
        except PitzError:
            raise
        except Exception as e:
            raise PersistenceError(key, f"Failed to {action} {target}: {e}") from e

    async def _persist(self, updates: Mapping[str, SettingValue]) -> None:
        if self._storage is None:
            return
        logger.debug(f"Saving to storage: {list(updates)}")
        await asyncio.gather(
            *(
                self._storage_call(key, "persist", self._storage.set(key, value))
                for key, value in updates.items()
            )
        )

    async def _commit(self, updates: Mapping[str, Any], operation: str) -> None:
        try:
            self._validate(updates)
            await self._persist(updates)
        except Exception as e:
            logger.error(f"Error in {operation}: {e}")
            self._error = e
            raise

        self._error = None
        self._throttle.call(updates)

    async def set_value(self, key: str, value: SettingValue) -> None:
        """
        Validate, persist and apply a single value.

        Raises:
            SettingValidationError: If the value is rejected
            PersistenceError: If the storage adapter fails or times out
        """
        logger.debug(f"Setting value for {key}: {value!r}")
        await self._commit({key: value}, f"set_value({key})")

    async def set_values(self, updates: Mapping[str, SettingValue]) -> None:
        """
        Validate, persist and apply several values as one batch.

        Every value is validated before any is persisted; a single rejection
        rejects the whole batch.
        """
        if not updates:
            return
        logger.debug(f"Setting multiple values: {list(updates)}")
        await self._commit(dict(updates), "set_values")

    async def reset_to_default(self, key: str) -> None:
        """Run the pipeline with the controller's default. No controller: no-op."""
        controller = self._controllers.get(key)
        if controller is None:
            logger.warning(f"No controller found for key: {key}")
            return
        logger.debug(f"Resetting {key} to default: {controller.default_value!r}")
        await self._commit({key: controller.default_value}, f"reset_to_default({key})")

    async def reset_all_to_defaults(self) -> None:
        """Run the pipeline with every controller's default as one batch."""
        defaults = {key: c.default_value for key, c in self._controllers.items()}
        if not defaults:
            return
        logger.debug("Resetting all values to defaults")
        await self._commit(defaults, "reset_all_to_defaults")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def _load(
        self, storage: SettingsStorage, key: str, controller: SettingController
    ) -> SettingValue | None:
        """Stored value for key if it is still valid; invalid ones are purged."""
        stored = await self._storage_call(key, "read", storage.get(key))
        if stored is None:
            return None
        reason = check_value(stored, controller.type, controller.validator)
        if reason is None:
            return stored
        logger.warning(f"Discarding stored value for {key}: {stored!r} ({reason})")
        await self._storage_call(key, "delete", storage.delete(key))
        return None

    async def initialize(
        self,
        controllers: Iterable[SettingController | SettingDefinition] | None = None,
    ) -> None:
        """
        Register controllers and load persisted values.

        Stored values that still pass validation are kept; absent or invalid
        ones fall back to their defaults, which are then written back to
        storage. The merged snapshot is applied immediately, bypassing the
        throttle.
        """
        self._is_loading = True
        try:
            for controller in controllers or ():
                self.register_controller(controller)

            loaded: SettingValues = {}
            storage = self._storage
            if storage is not None:
                await self._storage_call(None, "initialize", storage.initialize())
                keys = list(self._controllers)
                stored = await asyncio.gather(
                    *(self._load(storage, key, self._controllers[key]) for key in keys)
                )
                loaded = {key: value for key, value in zip(keys, stored) if value is not None}

            defaults = {
                key: c.default_value for key, c in self._controllers.items() if key not in loaded
            }

            self._throttle.flush()
            self._apply({**defaults, **loaded})
            logger.debug(
                f"Initialized {len(self._controllers)} settings "
                f"({len(loaded)} from storage, {len(defaults)} defaults)"
            )

            if defaults:
                await self._persist(defaults)
        except Exception as e:
            logger.error(f"Error initializing settings store: {e}")
            self._error = e
            raise
        finally:
            self._is_loading = False

    async def flush(self) -> None:
        """Apply any coalesced update now instead of waiting for the window."""
        self._throttle.flush()

    async def close(self) -> None:
        """Flush pending updates, stop the throttle timer and close storage."""
        self._throttle.flush()
        self._throttle.cancel()
        if self._storage is not None:
            await self._storage.close()

    async def __aenter__(self) -> SettingsStore:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
