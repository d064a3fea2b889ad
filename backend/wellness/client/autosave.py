"""Auto-save coordination for an editable form value.

An :class:`AutoSaver` owns one in-memory value and three triggers that all
funnel into a single save routine:

- **debounced**: every :meth:`AutoSaver.update` (re)arms a timer; the save
  fires once edits pause for ``debounce_delay`` seconds.
- **periodic**: every ``periodic_interval`` seconds, save if nothing is in
  flight and the value differs from the last saved snapshot.
- **manual** / **force**: cancel any pending debounce and save now.

Every trigger skips the save when the value matches the last saved snapshot.

State machine::

    IDLE --update--> PENDING --timer--> SAVING --ok--> IDLE
                                               \\--fail--> ERROR

Only one save runs at a time. The guard is a plain boolean, which is enough
because every trigger runs on the same event loop. A failed save leaves the
snapshot untouched, so the next trigger retries with the same data; there is
no backoff and no retry cap.

The decisions themselves (:func:`serialize`, :func:`is_dirty`,
:func:`should_save`) are pure functions so any UI layer can reuse them.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

SaveFunc = Callable[[Any, str], Awaitable[Any]]
Predicate = Callable[[Any], bool]


class SaveTrigger(str, Enum):
    DEBOUNCED = "debounced"
    PERIODIC = "periodic"
    MANUAL = "manual"
    FORCE = "force"


class AutoSaveStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"
    ERROR = "error"


@dataclass
class AutoSaveState:
    """Everything the coordinator remembers between triggers."""

    last_saved_snapshot: Optional[str] = None
    in_flight: bool = False
    debounce_timer: Optional[asyncio.TimerHandle] = None
    periodic_timer: Optional[asyncio.TimerHandle] = None
    last_saved_at: Optional[datetime] = None
    save_error: Optional[str] = None
    save_count: int = 0


def serialize(data: Any) -> str:
    """Stable string form of ``data`` used for change detection."""
    return json.dumps(data, sort_keys=True, default=str)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple)):
        return all(_is_blank(item) for item in value)
    return not str(value).strip()


def has_content(data: Any) -> bool:
    """Default emptiness check: at least one value is non-blank."""
    if not data:
        return False
    if isinstance(data, dict):
        return not all(_is_blank(value) for value in data.values())
    return not _is_blank(data)


def is_dirty(data: Any, last_saved_snapshot: Optional[str]) -> bool:
    if data is None:
        return False
    return serialize(data) != last_saved_snapshot


def should_save(
    state: AutoSaveState,
    data: Any,
    *,
    enabled: bool = True,
    predicate: Predicate = has_content,
) -> bool:
    """Decide whether a trigger may start a save right now."""
    if not enabled or state.in_flight or data is None:
        return False
    if not predicate(data):
        return False
    if not is_dirty(data, state.last_saved_snapshot):
        return False
    return True


def format_last_saved(
    saved_at: Optional[datetime], now: Optional[datetime] = None
) -> Optional[str]:
    """Human-readable age of the last save ("Just now", "5 minutes ago", ...)."""
    if saved_at is None:
        return None
    now = now or datetime.now(timezone.utc)
    diff = int((now - saved_at).total_seconds())

    if diff < 30:
        return "Just now"
    if diff < 60:
        return f"{diff} seconds ago"
    if diff < 3600:
        return f"{diff // 60} minutes ago"
    if diff < 86400:
        return f"{diff // 3600} hours ago"
    return saved_at.strftime("%Y-%m-%d %H:%M")


class AutoSaver:
    """Debounced, periodic and manual saving of a single form value.

    Args:
        save: coroutine function called as ``save(data, trigger)``; raising
            marks the save as failed.
        initial: starting value. It seeds the snapshot, so an untouched form
            is never saved.
        debounce_delay: seconds of quiet after an edit before saving.
        periodic_interval: seconds between periodic checks; 0 disables them.
        enabled: master switch for every trigger.
        predicate: returns False for values too empty to be worth saving.
    """

    def __init__(
        self,
        save: SaveFunc,
        *,
        initial: Any = None,
        debounce_delay: float = 5.0,
        periodic_interval: float = 30.0,
        enabled: bool = True,
        predicate: Predicate = has_content,
    ) -> None:
        self._save = save
        self.debounce_delay = debounce_delay
        self.periodic_interval = periodic_interval
        self.enabled = enabled
        self.predicate = predicate
        self.state = AutoSaveState()
        self._data = initial
        self._tasks: set[asyncio.Task[bool]] = set()
        if initial is not None:
            self.state.last_saved_snapshot = serialize(initial)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Arm the periodic timer. Must be called from a running loop."""
        if not self.enabled or self.periodic_interval <= 0:
            return
        if self.state.periodic_timer is None:
            self._arm_periodic()

    async def stop(self) -> None:
        """Cancel timers and wait for any save already in flight."""
        self._cancel_debounce()
        if self.state.periodic_timer is not None:
            self.state.periodic_timer.cancel()
            self.state.periodic_timer = None
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def __aenter__(self) -> "AutoSaver":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    @property
    def data(self) -> Any:
        return self._data

    def update(self, data: Any) -> None:
        """Replace the form value and (re)arm the debounce timer."""
        self._data = data
        if not self.enabled or data is None:
            return
        self._cancel_debounce()
        loop = asyncio.get_running_loop()
        self.state.debounce_timer = loop.call_later(
            self.debounce_delay, self._on_debounce
        )

    async def manual_save(self) -> bool:
        """Save now if the value changed; cancels any pending debounce."""
        self._cancel_debounce()
        return await self._perform_save(SaveTrigger.MANUAL)

    async def force_save(self) -> bool:
        """Flush pending edits before navigating away. Unchanged values are skipped."""
        self._cancel_debounce()
        return await self._perform_save(SaveTrigger.FORCE)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def status(self) -> AutoSaveStatus:
        if self.state.in_flight:
            return AutoSaveStatus.SAVING
        if self.state.debounce_timer is not None:
            return AutoSaveStatus.PENDING
        if self.state.save_error is not None:
            return AutoSaveStatus.ERROR
        return AutoSaveStatus.IDLE

    @property
    def has_unsaved_changes(self) -> bool:
        return is_dirty(self._data, self.state.last_saved_snapshot)

    @property
    def can_save(self) -> bool:
        return (
            self.enabled
            and not self.state.in_flight
            and self._data is not None
            and self.predicate(self._data)
        )

    @property
    def last_saved_formatted(self) -> Optional[str]:
        return format_last_saved(self.state.last_saved_at)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _perform_save(self, trigger: SaveTrigger) -> bool:
        data = self._data
        if not should_save(
            self.state,
            data,
            enabled=self.enabled,
            predicate=self.predicate,
        ):
            return False

        snapshot = serialize(data)
        self.state.in_flight = True
        self.state.save_error = None
        try:
            await self._save(data, trigger.value)
        except Exception as exc:
            # Snapshot stays put so the next trigger retries the same data
            logger.error("Auto-save (%s) failed: %s", trigger.value, exc)
            self.state.save_error = str(exc) or "Save failed"
            return False
        finally:
            self.state.in_flight = False

        self.state.last_saved_snapshot = snapshot
        self.state.last_saved_at = datetime.now(timezone.utc)
        self.state.save_count += 1
        logger.debug(
            "Auto-save (%s) #%d done", trigger.value, self.state.save_count
        )
        return True

    def _spawn(self, trigger: SaveTrigger) -> None:
        task = asyncio.ensure_future(self._perform_save(trigger))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_debounce(self) -> None:
        self.state.debounce_timer = None
        self._spawn(SaveTrigger.DEBOUNCED)

    def _arm_periodic(self) -> None:
        loop = asyncio.get_running_loop()
        self.state.periodic_timer = loop.call_later(
            self.periodic_interval, self._on_periodic
        )

    def _on_periodic(self) -> None:
        self._arm_periodic()
        if not self.state.in_flight:
            self._spawn(SaveTrigger.PERIODIC)

    def _cancel_debounce(self) -> None:
        if self.state.debounce_timer is not None:
            self.state.debounce_timer.cancel()
            self.state.debounce_timer = None


def simple_auto_saver(
    save: SaveFunc, delay: float = 5.0, initial: Any = None
) -> AutoSaver:
    """Debounce-only saver with periodic saves disabled."""
    return AutoSaver(save, initial=initial, debounce_delay=delay, periodic_interval=0)


def validated_auto_saver(
    save: SaveFunc, validator: Predicate, **options: Any
) -> AutoSaver:
    """Saver that only saves values accepted by ``validator``."""
    return AutoSaver(save, predicate=validator, **options)
