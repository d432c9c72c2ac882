"""
Prioritaets-Index fuer wiederkehrende Timer
Ordnet die flache NextPVR-Prioritaetsliste fuenf Stufen zu und merkt sich
pro Stufe den ersten Prioritaetswert (Anker) fuer spaetere Einfuegungen.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Union

logger = logging.getLogger(__name__)

# Ab diesem Wert nimmt der Timer nicht an der Priorisierung teil
EXCLUDED_PRIORITY = 500000


class PriorityTier(Enum):
    DEFAULT = "default"
    IMPORTANT = "important"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"
    UNIMPORTANT = "unimportant"


# Reihenfolge der echten Stufen (ohne DEFAULT)
TIER_ORDER = (
    PriorityTier.IMPORTANT,
    PriorityTier.HIGH,
    PriorityTier.NORMAL,
    PriorityTier.LOW,
    PriorityTier.UNIMPORTANT,
)

TIER_LABELS = {
    PriorityTier.DEFAULT: "Standard",
    PriorityTier.IMPORTANT: "Wichtig",
    PriorityTier.HIGH: "Hoch",
    PriorityTier.NORMAL: "Normal",
    PriorityTier.LOW: "Niedrig",
    PriorityTier.UNIMPORTANT: "Unwichtig",
}

_GROUP_TIERS = (PriorityTier.HIGH, PriorityTier.NORMAL, PriorityTier.LOW)


@dataclass(frozen=True)
class ExplicitPriority:
    """Einfuegen direkt vor dem Timer, der aktuell diese Prioritaet hat"""
    value: int


Selection = Union[PriorityTier, ExplicitPriority]


@dataclass(frozen=True)
class PriorityEntry:
    priority: int
    owner_id: int
    tier: PriorityTier
    label: str


@dataclass(frozen=True)
class TierBoundaries:
    """Anker je Stufe: Prioritaet des ersten Mitglieds (aufsteigend)"""
    anchors: Mapping[PriorityTier, int] = field(default_factory=dict)

    def __post_init__(self):
        # Eigene, schreibgeschuetzte Kopie
        object.__setattr__(self, "anchors", MappingProxyType(dict(self.anchors)))

    def anchor(self, tier: PriorityTier) -> Optional[int]:
        return self.anchors.get(tier)

    def previous_anchor(self, tier: PriorityTier) -> int:
        """Naechster belegter Anker oberhalb der Stufe, 0 wenn keiner existiert"""
        pos = TIER_ORDER.index(tier)
        for prev in reversed(TIER_ORDER[:pos]):
            value = self.anchors.get(prev)
            if value is not None:
                return value
        return 0


def classify_rank(rank: int, rows: int) -> PriorityTier:
    """Stufe eines Timers anhand seines Rangs (0-basiert) unter `rows` Timern"""
    if rank == 0:
        return PriorityTier.IMPORTANT
    if rank == rows - 1 and rows >= 4:
        return PriorityTier.UNIMPORTANT
    return _GROUP_TIERS[3 * rank // rows]


class PriorityIndex:
    """Unveraenderlicher Schnappschuss der Prioritaeten.

    Wird nach jedem Listenabruf komplett neu gebaut und nie nachtraeglich
    veraendert. Nach einem Tausch auf dem Server ist er veraltet.
    """

    def __init__(self, entries: Iterable[PriorityEntry] = (),
                 boundaries: Optional[TierBoundaries] = None):
        self._entries: dict[int, PriorityEntry] = {e.priority: e for e in entries}
        self._by_owner: dict[int, PriorityEntry] = {}
        for entry in self._entries.values():
            self._by_owner.setdefault(entry.owner_id, entry)
        self.boundaries = boundaries or TierBoundaries()

    @classmethod
    def build(cls, records: Iterable) -> "PriorityIndex":
        """Baut den Index aus einer Liste von Timern (id, priority, name)."""
        retained = []
        for rec in records:
            if rec.priority >= EXCLUDED_PRIORITY:
                logger.info("Timer wegen Prioritaet uebersprungen: %s %s %s",
                            rec.name, rec.priority, rec.id)
                continue
            retained.append(rec)

        # Stabil sortiert: bei gleicher Prioritaet gewinnt der zuerst gelistete
        retained.sort(key=lambda r: r.priority)
        unique = []
        seen: set[int] = set()
        for rec in retained:
            if rec.priority in seen:
                logger.warning("Doppelte Prioritaet %s, Timer %s (%s) ignoriert",
                               rec.priority, rec.id, rec.name)
                continue
            seen.add(rec.priority)
            unique.append(rec)

        rows = len(unique)
        entries = []
        anchors: dict[PriorityTier, int] = {}
        for rank, rec in enumerate(unique):
            tier = classify_rank(rank, rows)
            anchors.setdefault(tier, rec.priority)
            entries.append(PriorityEntry(
                priority=rec.priority,
                owner_id=rec.id,
                tier=tier,
                label=f"{rec.priority} [{rec.name}]",
            ))
        return cls(entries, TierBoundaries(anchors))

    def __contains__(self, priority: int) -> bool:
        return priority in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PriorityEntry]:
        for priority in sorted(self._entries):
            yield self._entries[priority]

    def get(self, priority: int) -> Optional[PriorityEntry]:
        return self._entries.get(priority)

    def owner_at(self, priority: int) -> Optional[int]:
        entry = self._entries.get(priority)
        return entry.owner_id if entry else None

    def tier_of(self, owner_id: Optional[int]) -> Optional[PriorityTier]:
        entry = self._by_owner.get(owner_id)
        return entry.tier if entry else None

    def priority_of(self, owner_id: Optional[int]) -> Optional[int]:
        entry = self._by_owner.get(owner_id)
        return entry.priority if entry else None

    @property
    def max_priority(self) -> int:
        return max(self._entries) if self._entries else 0

    def search_gap(self, priority: int) -> int:
        """Sucht oberhalb von `priority` die naechste Luecke.

        Es wird nur die halbe Luecke verbraucht, damit fuer spaetere
        Einfuegungen noch Platz bleibt. Ohne Luecke kommt `priority` zurueck.
        """
        gap = priority
        i = priority - 1
        while i > 0 and i not in self._entries:
            gap = i
            i -= 1
        if gap < priority:
            return gap + (priority - gap) // 2
        return priority

    def choices(self) -> list[tuple[Selection, str]]:
        """Auswahlliste fuer die Oberflaeche: Stufen und 'vor Timer X einfuegen'"""
        items: list[tuple[Selection, str]] = [
            (tier, TIER_LABELS[tier]) for tier in (
                PriorityTier.DEFAULT,
                PriorityTier.IMPORTANT,
                PriorityTier.HIGH,
                PriorityTier.NORMAL,
                PriorityTier.LOW,
            )
        ]
        for entry in self:
            items.append((ExplicitPriority(entry.priority), entry.label))
        items.append((PriorityTier.UNIMPORTANT, TIER_LABELS[PriorityTier.UNIMPORTANT]))
        return items
