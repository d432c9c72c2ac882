"""
Timer per Einzelschritt-Tausch auf die Zielprioritaet bringen
"""
import logging
from typing import Optional

from nextpvr_api import StepDirection

logger = logging.getLogger(__name__)


async def reconcile(api, timer_id: int, current: int, target: int,
                    max_steps: Optional[int] = None) -> bool:
    """Tauscht den Timer schrittweise, bis der Server `target` meldet.

    Gibt False zurueck, wenn der Server nicht mehr tauscht (gleiche
    Prioritaet wie zuvor) oder `max_steps` erreicht ist. Fehler beim
    Abruf werden nicht abgefangen.
    """
    if current == target:
        return True

    direction = StepDirection.HIGHER if target < current else StepDirection.LOWER
    previous = current
    steps = 0
    while True:
        step = await api.step_priority(timer_id, direction)
        steps += 1
        priority = step.priority
        if priority == target:
            logger.debug("Timer %s nach %s Schritten auf %s", timer_id, steps, target)
            return True
        if priority == previous:
            logger.error("Prioritaet nicht getauscht %s %s %s", timer_id, priority, target)
            return False
        # Nahe an Stufengrenzen springt der Server manchmal weiter als einen Platz
        if direction is StepDirection.HIGHER and priority < target:
            return True
        if max_steps is not None and steps >= max_steps:
            logger.error("Timer %s nach %s Schritten nicht auf %s (zuletzt %s)",
                         timer_id, steps, target, priority)
            return False
        previous = priority
