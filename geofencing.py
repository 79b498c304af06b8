# geofencing.py
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from store_map import Cell, StoreMap

logger = logging.getLogger(__name__)


class ZoneEventKind(enum.Enum):
    ENTERED = 'entered'
    EXITED = 'exited'


@dataclass(frozen=True)
class ZoneEvent:
    kind: ZoneEventKind
    zone: str

    def describe(self):
        if self.kind is ZoneEventKind.ENTERED:
            return f"Entered {self.zone}"
        return f"Exited {self.zone}"


class GeofenceTracker:
    """Decides zone transitions from containment of the current cell.

    A zone of ``None`` means the cell lies in no geofence. Moving straight
    from one zone into another reports only the entry into the new one.
    """

    def __init__(self, store_map: StoreMap):
        self.store_map = store_map

    def zone_at(self, cell: Cell) -> Optional[str]:
        fence = self.store_map.geofence_containing(cell)
        return fence.label if fence is not None else None

    def update(self, cell: Cell, previous_zone: Optional[str]) -> Tuple[Optional[str], Optional[ZoneEvent]]:
        candidate = self.zone_at(cell)
        if candidate == previous_zone:
            return previous_zone, None
        if candidate is not None:
            event = ZoneEvent(ZoneEventKind.ENTERED, candidate)
        else:
            event = ZoneEvent(ZoneEventKind.EXITED, previous_zone)
        logger.info("%s at %s", event.describe(), cell)
        return candidate, event
