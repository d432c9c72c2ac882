"""
NextPVR API Client
Wiederkehrende Timer lesen, speichern und per Einzelschritt umsortieren
"""
import asyncio
import hashlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)


class NextPVRError(Exception):
    """Fehlerantwort oder unlesbare Daten vom NextPVR-Server"""


@dataclass
class NextPVRCredentials:
    host: str
    port: int = 8866
    pin: str = "0000"
    name: str = ""

    @property
    def base_url(self) -> str:
        host = self.host.rstrip('/')
        if not host.startswith(("http://", "https://")):
            host = f"http://{host}"
        return f"{host}:{self.port}/service"

    @classmethod
    def from_settings(cls, settings) -> "NextPVRCredentials":
        return cls(
            host=settings.get("host", "127.0.0.1"),
            port=int(settings.get("port", 8866)),
            pin=str(settings.get("pin", "0000")),
            name=settings.get("name", ""),
        )


class StepDirection(Enum):
    HIGHER = "higher"  # Richtung kleinerer Prioritaetswert
    LOWER = "lower"


@dataclass
class RecurringTimer:
    id: int
    priority: int
    name: str
    enabled: bool = True
    channel_id: int = 0
    keep: int = 0
    pre_padding: int = 0
    post_padding: int = 0
    days: str = ""


@dataclass
class PriorityStep:
    id: int
    priority: int


def _parse_recurring(data: dict) -> RecurringTimer:
    try:
        rules = data.get("matchrules") or {}
        return RecurringTimer(
            id=int(data["id"]),
            priority=int(data.get("priority", 0) or 0),
            name=data.get("name", "") or "",
            enabled=bool(rules.get("enabled", data.get("enabled", True))),
            channel_id=int(data.get("channel_id", 0) or 0),
            keep=int(data.get("keep", 0) or 0),
            pre_padding=int(data.get("pre_padding", 0) or 0),
            post_padding=int(data.get("post_padding", 0) or 0),
            days=data.get("days", "") or "",
        )
    except (KeyError, TypeError, ValueError) as e:
        raise NextPVRError(f"Ungueltiger Timer-Eintrag: {data!r}") from e


def _parse_step(data: dict) -> PriorityStep:
    try:
        return PriorityStep(id=int(data["recurring_id"]), priority=int(data["priority"]))
    except (KeyError, TypeError, ValueError) as e:
        raise NextPVRError(f"Ungueltige Antwort auf Prioritaetsschritt: {data!r}") from e


def _check_response(method: str, data) -> dict:
    if not isinstance(data, dict):
        raise NextPVRError(f"{method}: unerwartete Antwort {data!r}")
    if data.get("stat", "ok") != "ok":
        raise NextPVRError(f"{method}: {data.get('message') or data.get('stat')}")
    return data


class NextPVRAPI:
    def __init__(self, credentials: NextPVRCredentials):
        self.creds = credentials
        self._sid: Optional[str] = None

    async def _send(self, params: dict, retries: int) -> dict:
        timeout = aiohttp.ClientTimeout(total=15)
        method = params.get("method", "")
        for attempt in range(retries):
            try:
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    async with session.get(self.creds.base_url, params=params) as resp:
                        resp.raise_for_status()
                        data = await resp.json(content_type=None)
                        return _check_response(method, data)
            except (aiohttp.ClientError, asyncio.TimeoutError):
                if attempt == retries - 1:
                    raise
                logger.debug("%s fehlgeschlagen, Versuch %s", method, attempt + 1)
                await asyncio.sleep(1 + attempt)

    async def login(self):
        """Meldet sich per PIN an (session.initiate + session.login)"""
        init = await self._send({"method": "session.initiate", "ver": "1.0",
                                 "device": "nextpvr-timers", "format": "json"}, retries=3)
        try:
            sid, salt = init["sid"], init["salt"]
        except KeyError as e:
            raise NextPVRError("session.initiate ohne sid/salt") from e
        pin_md5 = hashlib.md5(self.creds.pin.encode("utf-8")).hexdigest()
        digest = hashlib.md5(f":{pin_md5}:{salt}".encode("utf-8")).hexdigest()
        await self._send({"method": "session.login", "sid": sid, "md5": digest,
                          "format": "json"}, retries=3)
        self._sid = sid
        logger.info("Angemeldet bei %s", self.creds.base_url)

    async def _get(self, method: str, retries: int = 3, **params) -> dict:
        if self._sid is None:
            await self.login()
        all_params = {"method": method, "format": "json", "sid": self._sid}
        all_params.update({k: v for k, v in params.items() if v is not None})
        return await self._send(all_params, retries)

    async def list_recurring_timers(self) -> list[RecurringTimer]:
        """Holt alle wiederkehrenden Timer in Prioritaetsreihenfolge"""
        data = await self._get("recording.recurring.list")
        recurrings = data.get("recurrings")
        if not isinstance(recurrings, list):
            raise NextPVRError("recording.recurring.list ohne 'recurrings'")
        return [_parse_recurring(r) for r in recurrings]

    async def step_priority(self, recurring_id: int, direction: StepDirection) -> PriorityStep:
        """Verschiebt einen Timer um genau einen Platz. Keine Wiederholung."""
        data = await self._get("recording.recurring.priority", retries=1,
                               recurring_id=recurring_id, direction=direction.value)
        return _parse_step(data)

    async def save_recurring(self, timer: RecurringTimer, priority: Optional[int] = None) -> int:
        """Legt einen Timer an (id == 0) oder aktualisiert ihn. Gibt die id zurueck."""
        params = dict(
            recurring_id=timer.id,
            name=timer.name,
            channel_id=timer.channel_id,
            keep=timer.keep,
            pre_padding=timer.pre_padding,
            post_padding=timer.post_padding,
            day_mask=timer.days or None,
            enabled="true" if timer.enabled else "false",
        )
        if priority is not None:
            params["priority"] = priority
            params["reschedule"] = "false"
        data = await self._get("recording.recurring.save", retries=1, **params)
        node = data.get("recurring") if isinstance(data.get("recurring"), dict) else data
        try:
            returned_id = int(node["id"])
        except (KeyError, TypeError, ValueError) as e:
            raise NextPVRError("recording.recurring.save ohne id") from e
        if timer.id and timer.id != returned_id:
            logger.warning("Unerwartete Timer-id %s:%s", timer.id, returned_id)
        return returned_id

    async def delete_recurring(self, recurring_id: int):
        await self._get("recording.recurring.delete", retries=1, recurring_id=recurring_id)

    async def reschedule(self):
        """Laesst den Server die Aufnahmekonflikte neu berechnen"""
        await self._get("system.reschedule", retries=1)
