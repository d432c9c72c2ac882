"""
Zielprioritaet fuer eine Stufen- oder 'Einfuegen vor'-Auswahl bestimmen
"""
import logging
from dataclasses import dataclass
from typing import Optional

from priority_index import (
    ExplicitPriority,
    PriorityIndex,
    PriorityTier,
    Selection,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    requires_move: bool
    target: Optional[int] = None


NO_CHANGE = Placement(requires_move=False)


def resolve_placement(index: PriorityIndex, selection: Selection,
                      owner_id: Optional[int], is_new: bool = False) -> Placement:
    """Ermittelt die Zielprioritaet mit moeglichst wenig Verschiebungen.

    `owner_id` ist der Timer, der verschoben wird (None bei neuen Timern).
    Nicht gefundene Auswahl und 'keine Aenderung' sind gueltige Ergebnisse,
    es wird nie eine Exception geworfen.
    """
    # Unwichtig ist bei neuen Timern ohnehin das Ende der Liste
    if is_new and selection is PriorityTier.UNIMPORTANT:
        selection = PriorityTier.DEFAULT

    if isinstance(selection, ExplicitPriority):
        value = selection.value
        if value not in index:
            logger.debug("Ausgewaehlte Prioritaet nicht gefunden: %s", value)
            return Placement(requires_move=False, target=value)
        if index.owner_at(value) == owner_id:
            return NO_CHANGE
        target = value - 1 if value > 1 else 1
        return Placement(requires_move=True, target=index.search_gap(target))

    if selection is PriorityTier.DEFAULT:
        return NO_CHANGE
    if index.tier_of(owner_id) is selection:
        return NO_CHANGE

    anchor = index.boundaries.anchor(selection)
    if anchor is None:
        # Stufe leer: der Server haengt den Timer selbst hinten an
        return NO_CHANGE

    if selection is PriorityTier.IMPORTANT:
        target = anchor - 1 if anchor > 1 else 1
    elif selection is PriorityTier.UNIMPORTANT:
        target = index.max_priority
    else:
        target = anchor
        lower = index.boundaries.previous_anchor(selection)
        for i in range(anchor, lower, -1):
            if i not in index:
                target = i
                break

    return Placement(requires_move=True, target=index.search_gap(target))
