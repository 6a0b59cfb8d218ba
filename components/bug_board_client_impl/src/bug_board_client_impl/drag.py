"""Drag/drop coordination for moving bug cards between status columns.

Three sensors (pointer, touch, keyboard) feed one activation decision; once a
drag is active the coordinator tracks the hovered column with a closest-corners
collision test and, on drop, asks the gateway for a status-only patch.

Phases:
    IDLE      no press in progress
    PENDING   a press was seen but its activation constraint is not met yet
              (still idle as far as the board is concerned: no session, no overlay)
    DRAGGING  a session exists and its card follows the pointer
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from enum import Enum

from bug_board_interface.bug import Bug, BugUpdate, Status
from bug_board_interface.errors import BugTrackerError

from bug_board_client_impl.formatters import humanize_status
from bug_board_client_impl.gateway import MutationGateway

__all__ = [
    "ActivationConstraint",
    "DragCoordinator",
    "DragOverlay",
    "DragPhase",
    "DragSession",
    "DropOutcome",
    "DropResult",
    "KeyboardSensor",
    "PointerSensor",
    "Rect",
    "SensorKind",
    "TouchSensor",
    "change_status",
    "closest_corners",
]

logger = logging.getLogger(__name__)

Point = tuple[float, float]


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> Point:
        return (self.left + self.width / 2, self.top + self.height / 2)

    @property
    def corners(self) -> tuple[Point, Point, Point, Point]:
        return (
            (self.left, self.top),
            (self.right, self.top),
            (self.left, self.bottom),
            (self.right, self.bottom),
        )

    def translated(self, dx: float, dy: float) -> Rect:
        return replace(self, left=self.left + dx, top=self.top + dy)

    @classmethod
    def around(cls, point: Point) -> Rect:
        return cls(point[0], point[1], 0.0, 0.0)


def _distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def closest_corners(dragged: Rect, zones: dict[str, Rect]) -> str | None:
    """Return the id of the zone whose corners are, on average, nearest the dragged rect's corners."""
    best_id = None
    best_score = math.inf
    for zone_id, zone in zones.items():
        score = sum(_distance(a, b) for a, b in zip(dragged.corners, zone.corners)) / 4
        if score < best_score:
            best_id, best_score = zone_id, score
    return best_id


# ---------------------------------------------------------------------------
# Sensors
# ---------------------------------------------------------------------------

class SensorKind(str, Enum):
    POINTER = "pointer"
    TOUCH = "touch"
    KEYBOARD = "keyboard"


class _Activation(Enum):
    WAIT = "wait"
    START = "start"
    ABORT = "abort"


@dataclass(frozen=True)
class ActivationConstraint:
    """When a press becomes a drag.

    ``distance`` (px): start once the pointer has travelled at least this far.
    ``delay`` (s) with ``tolerance`` (px): start once the press has been held this long,
    unless it moved further than ``tolerance`` first, in which case it is a scroll.
    No constraint at all means immediate activation.
    """

    distance: float | None = None
    delay: float | None = None
    tolerance: float | None = None

    def evaluate(self, travelled: float, elapsed: float) -> _Activation:
        if self.delay is not None:
            if self.tolerance is not None and travelled > self.tolerance:
                return _Activation.ABORT
            return _Activation.START if elapsed >= self.delay else _Activation.WAIT
        if self.distance is not None:
            return _Activation.START if travelled >= self.distance else _Activation.WAIT
        return _Activation.START


@dataclass(frozen=True)
class PointerSensor:
    kind: SensorKind = SensorKind.POINTER
    constraint: ActivationConstraint = ActivationConstraint(distance=8)


@dataclass(frozen=True)
class TouchSensor:
    kind: SensorKind = SensorKind.TOUCH
    constraint: ActivationConstraint = ActivationConstraint(delay=0.25, tolerance=5)


@dataclass(frozen=True)
class KeyboardSensor:
    """Space/Enter picks a card up and puts it down, Escape cancels, arrows move it."""

    kind: SensorKind = SensorKind.KEYBOARD
    constraint: ActivationConstraint = ActivationConstraint()
    start_keys: frozenset[str] = frozenset({"Space", "Enter"})
    end_keys: frozenset[str] = frozenset({"Space", "Enter"})
    cancel_keys: frozenset[str] = frozenset({"Escape"})
    step: float = 25.0

    def next_point(self, key: str, point: Point, zones: dict[str, Rect]) -> Point | None:
        """Where an arrow key moves the virtual pointer; None for keys that do not move it."""
        x, y = point
        if key == "ArrowDown":
            return (x, y + self.step)
        if key == "ArrowUp":
            return (x, y - self.step)
        if key not in ("ArrowLeft", "ArrowRight"):
            return None

        centers = [zone.center for zone in zones.values()]
        if key == "ArrowRight":
            ahead = [c for c in centers if c[0] > x]
            return min(ahead, key=lambda c: c[0]) if ahead else point
        behind = [c for c in centers if c[0] < x]
        return max(behind, key=lambda c: c[0]) if behind else point


Sensor = PointerSensor | TouchSensor | KeyboardSensor


# ---------------------------------------------------------------------------
# Session and results
# ---------------------------------------------------------------------------

class DragPhase(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class DragSession:
    active_bug_id: str
    sensor_kind: SensorKind
    origin: Point
    point: Point
    card_rect: Rect
    over_column_id: str | None = None

    @property
    def dragged_rect(self) -> Rect:
        return self.card_rect.translated(self.point[0] - self.origin[0], self.point[1] - self.origin[1])


@dataclass(frozen=True)
class _Press:
    sensor: Sensor
    bug_id: str
    origin: Point
    card_rect: Rect
    started_at: float


@dataclass(frozen=True)
class DragOverlay:
    """The floating copy of the dragged card."""

    bug: Bug
    opacity: float = 0.5
    rotation: float = 3.0
    scale: float = 1.05


class DropOutcome(str, Enum):
    NOT_ACTIVATED = "not-activated"
    NO_TARGET = "no-target"
    MISSING_BUG = "missing-bug"
    NO_OP = "no-op"
    MOVED = "moved"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class DropResult:
    outcome: DropOutcome
    bug_id: str | None = None
    status: Status | None = None
    bug: Bug | None = None


def change_status(gateway: MutationGateway, bug: Bug, status: Status) -> DropResult:
    """Move ``bug`` to ``status`` through the gateway, shared by drops and the mobile selector.

    Moving to the column the bug is already shown in sends nothing. On failure the
    gateway has already told the user, so nothing more is reported here.
    """
    if bug.effective_status == status:
        return DropResult(DropOutcome.NO_OP, bug.id, status, bug)
    try:
        updated = gateway.patch_bug(
            bug.id,
            BugUpdate(status=status),
            success_message=f"Bug moved to {humanize_status(status)}",
            failure_message="Failed to update bug status",
        )
    except BugTrackerError:
        logger.info("Bug %s stays in %s after a failed move", bug.id, bug.effective_status.value)
        return DropResult(DropOutcome.FAILED, bug.id, status, bug)
    return DropResult(DropOutcome.MOVED, bug.id, status, updated)


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------

class DragCoordinator:
    """
    Args:
        gateway: Used for the status patch when a drop lands on a new column
        bugs:    Returns the current collection; read at drop time so a bug deleted
                 mid-drag is noticed
        clock:   Seconds, monotonic. Injected by tests
    """

    def __init__(self, gateway: MutationGateway, bugs: Callable[[], Sequence[Bug]], *, clock: Callable[[], float] = time.monotonic) -> None:
        self._gateway = gateway
        self._bugs = bugs
        self._clock = clock
        self._zones: dict[str, Rect] = {}
        self._pending: _Press | None = None
        self._session: DragSession | None = None
        self.keyboard = KeyboardSensor()

    # ------------------------------------------------------------------
    # Drop zones
    # ------------------------------------------------------------------

    def register_drop_zone(self, zone_id: str, rect: Rect) -> None:
        self._zones[zone_id] = rect

    def clear_drop_zones(self) -> None:
        self._zones.clear()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def phase(self) -> DragPhase:
        if self._session is not None:
            return DragPhase.DRAGGING
        if self._pending is not None:
            return DragPhase.PENDING
        return DragPhase.IDLE

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def over_column_id(self) -> str | None:
        return self._session.over_column_id if self._session else None

    @property
    def overlay(self) -> DragOverlay | None:
        if self._session is None:
            return None
        bug = self._find(self._session.active_bug_id)
        return DragOverlay(bug) if bug is not None else None

    def _find(self, bug_id: str) -> Bug | None:
        return next((bug for bug in self._bugs() if bug.id == bug_id), None)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def press(self, sensor: Sensor, bug_id: str, point: Point, card_rect: Rect | None = None, now: float | None = None) -> DragPhase:
        """Start watching a press on a card. Ignored while another press or drag is in progress."""
        if self.phase is not DragPhase.IDLE:
            return self.phase
        now = self._clock() if now is None else now
        self._pending = _Press(sensor, bug_id, point, card_rect or Rect.around(point), now)
        #constraints that are already met (keyboard) start right away
        self._evaluate(point, now)
        return self.phase

    def move(self, point: Point, now: float | None = None) -> DragPhase:
        now = self._clock() if now is None else now
        if self._pending is not None:
            self._evaluate(point, now)
        if self._session is not None:
            self._hover(point)
        return self.phase

    def tick(self, now: float | None = None) -> DragPhase:
        """Let a held touch press activate without moving."""
        if self._pending is not None:
            self._evaluate(self._pending.origin, self._clock() if now is None else now)
        return self.phase

    def release(self, now: float | None = None) -> DropResult:
        if self._pending is not None:
            self.tick(now)
        if self._pending is not None:
            bug_id = self._pending.bug_id
            self._pending = None
            return DropResult(DropOutcome.NOT_ACTIVATED, bug_id)
        if self._session is None:
            return DropResult(DropOutcome.NOT_ACTIVATED)
        return self._drop()

    def cancel(self) -> DropResult:
        session, self._session, self._pending = self._session, None, None
        return DropResult(DropOutcome.CANCELLED, session.active_bug_id if session else None)

    def key_down(self, key: str, bug_id: str | None = None, card_rect: Rect | None = None) -> DropResult | None:
        """Keyboard input. Returns a result when the key ended the drag, otherwise None."""
        if key in self.keyboard.cancel_keys and self._pending is not None:
            return self.cancel()
        if self._session is None:
            if key in self.keyboard.start_keys and bug_id is not None:
                rect = card_rect or Rect(0.0, 0.0, 0.0, 0.0)
                self.press(self.keyboard, bug_id, rect.center, rect)
            return None

        if key in self.keyboard.cancel_keys:
            return self.cancel()
        if self._session.sensor_kind is not SensorKind.KEYBOARD:
            return None
        if key in self.keyboard.end_keys:
            return self._drop()

        target = self.keyboard.next_point(key, self._session.point, self._zones)
        if target is not None:
            self._hover(target)
        return None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _evaluate(self, point: Point, now: float) -> None:
        press = self._pending
        decision = press.sensor.constraint.evaluate(_distance(press.origin, point), now - press.started_at)
        if decision is _Activation.ABORT:
            logger.debug("Press on %s abandoned: moved before the hold delay", press.bug_id)
            self._pending = None
        elif decision is _Activation.START:
            self._pending = None
            self._session = DragSession(
                active_bug_id=press.bug_id,
                sensor_kind=press.sensor.kind,
                origin=press.origin,
                point=press.origin,
                card_rect=press.card_rect,
            )
            logger.debug("Drag started for %s via %s", press.bug_id, press.sensor.kind.value)
            self._hover(point)

    def _hover(self, point: Point) -> None:
        moved = replace(self._session, point=point)
        self._session = replace(moved, over_column_id=closest_corners(moved.dragged_rect, self._zones))

    def _drop(self) -> DropResult:
        #the session ends before any network work starts
        session, self._session = self._session, None
        bug_id = session.active_bug_id

        if session.over_column_id is None:
            return DropResult(DropOutcome.NO_TARGET, bug_id)
        try:
            status = Status(session.over_column_id)
        except ValueError:
            return DropResult(DropOutcome.NO_TARGET, bug_id)

        bug = self._find(bug_id)
        if bug is None:
            logger.debug("Dropped bug %s is no longer on the board", bug_id)
            return DropResult(DropOutcome.MISSING_BUG, bug_id, status)

        return change_status(self._gateway, bug, status)
