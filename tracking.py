# tracking.py
import logging
import numbers
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

import config
from geofencing import GeofenceTracker, ZoneEvent
from localization import WifiSample, estimate_position
from store_map import Cell, StoreMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackingUpdate:
    position: Cell
    zone: Optional[str]
    event: Optional[ZoneEvent]
    localized: bool   # False when the cycle kept the last known position
    source: str       # 'scan' or 'manual'


class TrackingSession:
    """Last known position and current zone of one shopper.

    Scan cycles and manual overrides are serialized on one lock, so an
    override never lands in the middle of a cycle.
    """

    def __init__(self, store_map: StoreMap, initial_position: Cell = config.ENTRANCE_CELL):
        if not store_map.is_passable(initial_position):
            raise ValueError(f"initial position {initial_position} is not walkable")
        self.store_map = store_map
        self.tracker = GeofenceTracker(store_map)
        self._lock = threading.Lock()
        self._position = tuple(initial_position)
        self._zone, _ = self.tracker.update(self._position, None)

    @property
    def position(self) -> Cell:
        with self._lock:
            return self._position

    @property
    def zone(self) -> Optional[str]:
        with self._lock:
            return self._zone

    def _move_to(self, cell, source) -> TrackingUpdate:
        self._position = cell
        self._zone, event = self.tracker.update(cell, self._zone)
        return TrackingUpdate(cell, self._zone, event, True, source)

    def unlocalized_update(self) -> TrackingUpdate:
        """Update for a cycle that kept the last known position."""
        with self._lock:
            return TrackingUpdate(self._position, self._zone, None, False, 'scan')

    def run_cycle(self, samples: Iterable[WifiSample]) -> TrackingUpdate:
        """One scan -> estimate -> geofence update."""
        with self._lock:
            cell = estimate_position(samples, self.store_map.access_points, self.store_map)
            if cell is None:
                logger.debug("Could not localize; keeping %s", self._position)
                return TrackingUpdate(self._position, self._zone, None, False, 'scan')
            return self._move_to(cell, 'scan')

    def set_manual_position(self, cell: Cell) -> Optional[TrackingUpdate]:
        """Operator override. Returns None, leaving state untouched, if the cell is invalid."""
        if (not isinstance(cell, (tuple, list)) or len(cell) != 2
                or any(isinstance(v, bool) or not isinstance(v, numbers.Integral) for v in cell)):
            logger.warning("Rejected manual position %r", cell)
            return None
        cell = (int(cell[0]), int(cell[1]))
        if not self.store_map.is_passable(cell):
            logger.warning("Rejected manual position %s: invalid or not walkable", cell)
            return None
        with self._lock:
            logger.info("Position set manually to %s", cell)
            return self._move_to(cell, 'manual')


class TrackingLoop:
    """Runs one tracking cycle every ``interval`` seconds on a background thread.

    The wait for the next tick starts only after the previous cycle has
    finished, so cycles never overlap. Every update is put on each
    subscriber queue.
    """

    def __init__(self, session: TrackingSession, scanner: Callable[[], Iterable[WifiSample]],
                 interval: float = config.SCAN_INTERVAL_S):
        self.session = session
        self.scanner = scanner
        self.interval = interval
        self._subscribers = []
        self._subscribers_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread = None

    def subscribe(self) -> queue.Queue:
        q = queue.Queue()
        with self._subscribers_lock:
            self._subscribers.append(q)
        return q

    def unsubscribe(self, q):
        with self._subscribers_lock:
            if q in self._subscribers:
                self._subscribers.remove(q)

    def publish(self, update: TrackingUpdate):
        with self._subscribers_lock:
            subscribers = list(self._subscribers)
        for q in subscribers:
            q.put(update)

    def tick(self) -> TrackingUpdate:
        try:
            samples = list(self.scanner())
        except Exception:
            logger.exception("Wi-Fi scan failed")
            samples = []
        try:
            update = self.session.run_cycle(samples)
        except Exception:
            logger.exception("Tracking cycle failed")
            update = self.session.unlocalized_update()
        self.publish(update)
        return update

    def set_manual_position(self, cell: Cell) -> Optional[TrackingUpdate]:
        update = self.session.set_manual_position(cell)
        if update is not None:
            self.publish(update)
        return update

    def _run(self):
        logger.info("Tracking loop started (interval %.2fs)", self.interval)
        while not self._stop.is_set():
            self.tick()
            self._stop.wait(self.interval)
        logger.info("Tracking loop stopped")

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='tracking-loop', daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()
        return False
