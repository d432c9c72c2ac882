"""
Wiederkehrende Timer: Liste, Prioritaets-Index und Umsortieren
"""
import asyncio
import logging
from typing import Optional

import aiohttp

from nextpvr_api import NextPVRAPI, NextPVRError, RecurringTimer
from placement_resolver import resolve_placement
from priority_index import EXCLUDED_PRIORITY, PriorityIndex, PriorityTier, Selection
from priority_reconciler import reconcile

logger = logging.getLogger(__name__)

DEFAULT_RECONCILE_TIMEOUT = 60.0


class ScheduleRefreshError(Exception):
    """Zeitplan konnte nicht aktualisiert werden"""


class TimerReorderError(Exception):
    """Timer konnte nicht umsortiert werden"""


class TimerManager:

    def __init__(self, api: NextPVRAPI, reconcile_timeout: float = DEFAULT_RECONCILE_TIMEOUT):
        self.api = api
        self.reconcile_timeout = reconcile_timeout
        self.timers: list[RecurringTimer] = []
        self._index: Optional[PriorityIndex] = None
        self._refresh_lock = asyncio.Lock()
        self._timer_locks: dict[int, asyncio.Lock] = {}

    @property
    def index(self) -> Optional[PriorityIndex]:
        return self._index

    def get_all(self) -> list[RecurringTimer]:
        return self.timers.copy()

    def tier_of(self, timer_id: int) -> Optional[PriorityTier]:
        return self._index.tier_of(timer_id) if self._index else None

    async def refresh(self) -> list[RecurringTimer]:
        """Holt die Timer neu und ersetzt den Index komplett"""
        async with self._refresh_lock:
            try:
                timers = await self.api.list_recurring_timers()
            except (aiohttp.ClientError, asyncio.TimeoutError, NextPVRError) as e:
                self._index = None
                self.timers = []
                logger.error("Timer-Liste konnte nicht geladen werden: %s", e)
                raise ScheduleRefreshError("Zeitplan konnte nicht aktualisiert werden") from e
            index = PriorityIndex.build(timers)
            self.timers = [t for t in timers if t.priority < EXCLUDED_PRIORITY]
            self._index = index
        return self.get_all()

    async def _ensure_index(self) -> PriorityIndex:
        if self._index is None:
            await self.refresh()
        return self._index

    def _lock_for(self, timer_id: int) -> asyncio.Lock:
        return self._timer_locks.setdefault(timer_id, asyncio.Lock())

    def _find_timer(self, timer_id: int) -> RecurringTimer:
        for timer in self.timers:
            if timer.id == timer_id:
                return timer
        raise TimerReorderError(f"Timer {timer_id} ist nicht priorisiert")

    async def _refresh_after_failure(self):
        try:
            await self.refresh()
        except ScheduleRefreshError as e:
            logger.error("Aktualisieren nach Umsortier-Fehler fehlgeschlagen: %s", e)

    async def _move(self, timer_id: int, current: int, target: int):
        """Einzelschritte bis `target` (belegter Wert). Lock muss gehalten werden."""
        index = self._index
        max_steps = len(index) + 1 if index else None
        try:
            ok = await asyncio.wait_for(
                reconcile(self.api, timer_id, current, target, max_steps=max_steps),
                timeout=self.reconcile_timeout,
            )
        except asyncio.TimeoutError:
            logger.error("Umsortieren von Timer %s abgebrochen (Zeitlimit)", timer_id)
            ok = False
        except (aiohttp.ClientError, NextPVRError) as e:
            self._index = None
            raise TimerReorderError("Timer konnte nicht umsortiert werden") from e

        # Nach jedem Tausch ist der Index veraltet
        if not ok:
            await self._refresh_after_failure()
            raise TimerReorderError("Timer konnte nicht umsortiert werden")
        await self.api.reschedule()
        await self.refresh()

    async def _place_direct(self, timer: RecurringTimer, target: int):
        """Freier Zielwert: per Speichern setzen, ein Tausch landet nie auf einer Luecke"""
        try:
            await self.api.save_recurring(timer, priority=target)
        except (aiohttp.ClientError, NextPVRError) as e:
            self._index = None
            raise TimerReorderError("Timer konnte nicht umsortiert werden") from e
        await self.api.reschedule()
        await self.refresh()

    async def set_priority(self, timer_id: int, selection: Selection) -> bool:
        """Sortiert einen bestehenden Timer um. False wenn nichts zu tun war."""
        async with self._lock_for(timer_id):
            index = await self._ensure_index()
            placement = resolve_placement(index, selection, timer_id)
            if not placement.requires_move:
                return False
            current = index.priority_of(timer_id)
            if current is None:
                raise TimerReorderError(f"Timer {timer_id} ist nicht priorisiert")
            if placement.target in index:
                await self._move(timer_id, current, placement.target)
            else:
                await self._place_direct(self._find_timer(timer_id), placement.target)
        return True

    async def save_timer(self, timer: RecurringTimer,
                         selection: Selection = PriorityTier.DEFAULT) -> int:
        """Legt einen Timer an oder aktualisiert ihn, inklusive Prioritaet.

        Ein freier Zielwert wird direkt mitgespeichert, ein belegter per
        Einzelschritten angesteuert. Neue Timer (id 0) teilen sich einen Lock.
        """
        async with self._lock_for(timer.id):
            index = await self._ensure_index()
            is_new = not timer.id
            placement = resolve_placement(index, selection, timer.id or None, is_new=is_new)

            direct = placement.target is not None and placement.target not in index
            priority = placement.target if direct else None
            timer_id = await self.api.save_recurring(timer, priority=priority)

            if placement.requires_move and not direct:
                await self.refresh()
                current = self._index.priority_of(timer_id)
                if current is None:
                    raise TimerReorderError(f"Timer {timer_id} ist nicht priorisiert")
                await self._move(timer_id, current, placement.target)
            else:
                if priority is not None:
                    await self.api.reschedule()
                await self.refresh()
        return timer_id

    async def delete_timer(self, timer_id: int):
        async with self._lock_for(timer_id):
            await self.api.delete_recurring(timer_id)
            await self.refresh()
        self._timer_locks.pop(timer_id, None)
