"""Click-and-drag slot selection on the booking calendar grid."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
from typing import Sequence, Union

from ..core.config import settings
from ..core.constants import RANGE_NOT_AVAILABLE_MESSAGE
from ..core.enums import DragPhase, RejectionCode
from ..schemas.availability import BookingSlot
from ..utils.time_utils import minutes_to_time_str, round_up_to_step
from .booking_validator import is_range_available

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridCell:
    """One calendar cell: a time of day in one of the displayed day columns."""

    hour: int
    minute: int
    day_index: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise ValueError(f"Invalid grid time {self.hour}:{self.minute:02d}")

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute


@dataclass(frozen=True)
class Idle:
    phase: DragPhase = DragPhase.IDLE


@dataclass(frozen=True)
class Dragging:
    drag_start: GridCell
    drag_end: GridCell
    phase: DragPhase = DragPhase.DRAGGING


@dataclass(frozen=True)
class Committed:
    slot: BookingSlot
    phase: DragPhase = DragPhase.COMMITTED


@dataclass(frozen=True)
class Cancelled:
    reason: str
    code: RejectionCode = RejectionCode.RANGE_NOT_AVAILABLE
    phase: DragPhase = DragPhase.CANCELLED


DragState = Union[Idle, Dragging, Committed, Cancelled]


class DragSelection:
    """
    State machine translating pointer gestures into one validated slot.

    Idle -> Dragging on a pointer-down over an available cell. Moves update
    the drag end only within the same day column and only over available
    cells. Release normalizes the range, rounds the end up, clamps it to the
    containing slot and verifies every grid step; the result is Committed or
    Cancelled. Both terminal states return to Idle on the next pointer-down.
    """

    def __init__(
        self,
        days: Sequence[date],
        slots: Sequence[BookingSlot],
        *,
        step_minutes: int | None = None,
        round_minutes: int | None = None,
        initial_minutes: int | None = None,
    ):
        self.days = list(days)
        self.slots = list(slots)
        self.step_minutes = step_minutes or settings.grid_step_minutes
        self.round_minutes = round_minutes or settings.drag_round_minutes
        self.initial_minutes = initial_minutes or settings.initial_selection_minutes
        self._state: DragState = Idle()

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def phase(self) -> DragPhase:
        return self._state.phase

    def refresh(self, slots: Sequence[BookingSlot]) -> None:
        """Replace the slot snapshot; an in-progress drag is verified against it on release."""
        self.slots = list(slots)

    def reset(self) -> DragState:
        self._state = Idle()
        return self._state

    def _day_for(self, day_index: int) -> date | None:
        if 0 <= day_index < len(self.days):
            return self.days[day_index]
        return None

    def _slot_at(self, day: date, minute: int) -> BookingSlot | None:
        for slot in self.slots:
            if slot.day == day and slot.available and slot.contains_minute(minute):
                return slot
        return None

    def is_cell_available(self, cell: GridCell) -> bool:
        day = self._day_for(cell.day_index)
        return day is not None and self._slot_at(day, cell.minute_of_day) is not None

    def pointer_down(self, cell: GridCell) -> DragState:
        if isinstance(self._state, (Committed, Cancelled)):
            self._state = Idle()
        if self.is_cell_available(cell):
            self._state = Dragging(drag_start=cell, drag_end=cell)
        return self._state

    def pointer_move(self, cell: GridCell) -> DragState:
        state = self._state
        if not isinstance(state, Dragging):
            return state
        if cell.day_index != state.drag_start.day_index or not self.is_cell_available(cell):
            return state
        self._state = Dragging(drag_start=state.drag_start, drag_end=cell)
        return self._state

    def _normalized_range(self, state: Dragging) -> tuple[date, int, int, BookingSlot | None]:
        day = self.days[state.drag_start.day_index]
        start = state.drag_start.minute_of_day
        end = state.drag_end.minute_of_day
        if start > end:
            start, end = end, start

        if start == end:
            end = start + self.initial_minutes
        else:
            end = round_up_to_step(end, self.round_minutes)

        containing = self._slot_at(day, start)
        if containing is not None and end > containing.end_minutes:
            end = containing.end_minutes
        return day, start, end, containing

    @property
    def current_selection(self) -> BookingSlot | None:
        """Live preview of the range a release would commit."""
        state = self._state
        if isinstance(state, Committed):
            return state.slot
        if not isinstance(state, Dragging):
            return None
        day, start, end, containing = self._normalized_range(state)
        if containing is None:
            return None
        return BookingSlot(
            tutor_id=containing.tutor_id,
            day=day,
            start=minutes_to_time_str(start),
            end=minutes_to_time_str(end),
        )

    def pointer_up(self) -> DragState:
        state = self._state
        if not isinstance(state, Dragging):
            return state

        day, start, end, containing = self._normalized_range(state)
        if containing is None or not is_range_available(
            self.slots, day, start, end, step=self.step_minutes
        ):
            logger.info(
                f"Drag selection on {day} from {minutes_to_time_str(start)} rejected: "
                f"range not fully available"
            )
            self._state = Cancelled(reason=RANGE_NOT_AVAILABLE_MESSAGE)
            return self._state

        self._state = Committed(
            slot=BookingSlot(
                tutor_id=containing.tutor_id,
                day=day,
                start=minutes_to_time_str(start),
                end=minutes_to_time_str(end),
                available=True,
            )
        )
        return self._state
