"""
Timetable editing: move validation, move application and result checks.

All functions take the timetable as an explicit argument and never mutate
it. An accepted move produces a fresh Timetable value, so a reader still
holding the previous value never observes a half-applied move.
"""

from collections import Counter
from typing import Any, Dict, List, Optional, Tuple
import logging

from models.schemas import (
    ClassAssignment, DropTarget, GridCell, GridRow, MoveResult, RoomGrid,
    ScheduleParameters, SlotRef, Timetable
)
from service.exceptions import ContentValidationError, MoveConsistencyError
from service.prompt_builder import expected_class_names

logger = logging.getLogger(__name__)

# Pairs of grades that may never share a slot.
EXCLUSIVE_GRADE_PAIRS: List[Tuple[int, int]] = [(1, 2), (3, 4)]


# ===========================
# Conversion
# ===========================

def ingest_timetable(data: Dict[str, Any]) -> Timetable:
    """
    Convert a provider result (room -> day -> slot -> names) into a Timetable.

    The grade of every class is read from its name here, once. Anything that
    is not the nested object/list-of-strings shape is rejected.
    """
    timetable: Timetable = {}
    for room, days in data.items():
        if not isinstance(days, dict):
            raise ContentValidationError(f"Expected an object of days for {room}.")
        timetable[room] = {}
        for day, slots in days.items():
            if not isinstance(slots, dict):
                raise ContentValidationError(f"Expected an object of slots for {room} on {day}.")
            timetable[room][day] = {}
            for slot, names in slots.items():
                if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
                    raise ContentValidationError(
                        f"Expected a list of class names for {room}, {day}, {slot}."
                    )
                timetable[room][day][slot] = [ClassAssignment.from_name(n) for n in names]
    return timetable


def count_classes(timetable: Timetable) -> int:
    return sum(
        len(classes)
        for days in timetable.values()
        for slots in days.values()
        for classes in slots.values()
    )


def _copy_timetable(timetable: Timetable) -> Timetable:
    # ClassAssignment is frozen, so copying the containers is enough.
    return {
        room: {
            day: {slot: list(classes) for slot, classes in slots.items()}
            for day, slots in days.items()
        }
        for room, days in timetable.items()
    }


def _lookup(timetable: Timetable, ref: SlotRef) -> Optional[List[ClassAssignment]]:
    return timetable.get(ref.room, {}).get(ref.day, {}).get(ref.slot)


def _index_of(classes: List[ClassAssignment], class_name: str) -> int:
    for i, assignment in enumerate(classes):
        if assignment.name == class_name:
            return i
    return -1


def _find_assignment(timetable: Timetable, class_name: str, from_: SlotRef) -> ClassAssignment:
    source = _lookup(timetable, from_) or []
    index = _index_of(source, class_name)
    if index > -1:
        return source[index]
    return ClassAssignment.from_name(class_name)


# ===========================
# Rules
# ===========================

def grade_conflict(moved_grade: Optional[int], occupant_grades: List[Optional[int]]) -> Optional[str]:
    """Return the conflict message if the moved grade cannot join these occupants."""
    if moved_grade is None:
        return None
    for first, second in EXCLUSIVE_GRADE_PAIRS:
        if (moved_grade == first and second in occupant_grades) or \
                (moved_grade == second and first in occupant_grades):
            return f"Cannot move: Grade {first} and Grade {second} classes cannot be in the same slot."
    return None


def validate_move(timetable: Timetable, class_name: str, from_: SlotRef, to: SlotRef,
                  max_concurrent_classes: int) -> MoveResult:
    """
    Check whether class_name may move from one slot to another.

    Moving onto the same slot and dropping a class on a slot that already
    holds it are both rejected silently.
    """
    if from_ == to:
        return MoveResult(accepted=False, silent=True)

    destination = _lookup(timetable, to)
    if destination is None:
        logger.error(f"Destination slot not found: {to.room} / {to.day} / {to.slot}")
        return MoveResult(
            accepted=False,
            reason=f'Cannot move "{class_name}". {to.room} has no "{to.slot}" slot on {to.day}.'
        )

    if _index_of(destination, class_name) > -1:
        return MoveResult(accepted=False, silent=True)

    if len(destination) >= max_concurrent_classes:
        return MoveResult(
            accepted=False,
            reason=(
                f'Cannot move "{class_name}". The "{to.slot}" slot in {to.room} on {to.day} '
                f"is full (max {max_concurrent_classes} classes)."
            )
        )

    moved = _find_assignment(timetable, class_name, from_)
    conflict = grade_conflict(moved.grade, [c.grade for c in destination])
    if conflict:
        return MoveResult(accepted=False, reason=conflict)

    return MoveResult(accepted=True)


def apply_move(timetable: Timetable, class_name: str, from_: SlotRef, to: SlotRef) -> Timetable:
    """
    Return a new timetable with class_name relocated from one slot to another.

    Raises MoveConsistencyError, leaving nothing applied, when either slot is
    missing or the source slot does not hold the class.
    """
    updated = _copy_timetable(timetable)

    source = _lookup(updated, from_)
    if source is None:
        raise MoveConsistencyError(f"Source slot not found: {from_.room} / {from_.day} / {from_.slot}")
    destination = _lookup(updated, to)
    if destination is None:
        raise MoveConsistencyError(f"Destination slot not found: {to.room} / {to.day} / {to.slot}")

    index = _index_of(source, class_name)
    if index == -1:
        raise MoveConsistencyError(f'"{class_name}" is not in {from_.room} / {from_.day} / {from_.slot}')

    moved = source.pop(index)
    destination.append(moved)
    updated[to.room][to.day][to.slot] = sorted(destination, key=lambda c: c.name)
    return updated


def move_class(timetable: Timetable, class_name: str, from_: SlotRef, to: SlotRef,
               max_concurrent_classes: int) -> Tuple[Timetable, MoveResult]:
    """Validate and, when accepted, apply a move. Rejections return the timetable untouched."""
    result = validate_move(timetable, class_name, from_, to, max_concurrent_classes)
    if not result.accepted:
        if result.reason:
            logger.info(f"Move rejected: {result.reason}")
        return timetable, result
    return apply_move(timetable, class_name, from_, to), result


# ===========================
# Views and checks
# ===========================

def evaluate_drop_targets(timetable: Timetable, class_name: str, from_: SlotRef,
                          max_concurrent_classes: int) -> List[DropTarget]:
    """Validity of dropping the dragged class on every other slot of the timetable."""
    targets = []
    for room, days in timetable.items():
        for day, slots in days.items():
            for slot in slots:
                to = SlotRef(room=room, day=day, slot=slot)
                if to == from_:
                    continue
                result = validate_move(timetable, class_name, from_, to, max_concurrent_classes)
                targets.append(DropTarget(
                    room=room, day=day, slot=slot,
                    valid=result.accepted, reason=result.reason
                ))
    return targets


def render_room_grid(timetable: Timetable, room: str, days: List[str], slots: List[str]) -> RoomGrid:
    room_table = timetable[room]
    rows = []
    for slot in slots:
        cells = [
            GridCell(day=day, classes=list(room_table.get(day, {}).get(slot, [])))
            for day in days
        ]
        rows.append(GridRow(slot=slot, cells=cells))
    return RoomGrid(room=room, days=list(days), rows=rows)


def check_timetable(timetable: Timetable, params: ScheduleParameters) -> List[str]:
    """
    List every rule the timetable breaks.

    Used on provider output: the result is still accepted, the list is only
    reported back as warnings.
    """
    warnings = []
    seen: Counter = Counter()

    for room, days in timetable.items():
        for day, slots in days.items():
            for slot, classes in slots.items():
                seen.update(c.name for c in classes)
                if len(classes) > params.max_concurrent_classes:
                    warnings.append(
                        f"{room}, {day}, {slot} holds {len(classes)} classes "
                        f"(max {params.max_concurrent_classes})."
                    )
                grades = [c.grade for c in classes]
                for first, second in EXCLUSIVE_GRADE_PAIRS:
                    if first in grades and second in grades:
                        warnings.append(
                            f"{room}, {day}, {slot} mixes Grade {first} and Grade {second} classes."
                        )

    expected = expected_class_names(params)
    for name in expected:
        if seen[name] == 0:
            warnings.append(f'"{name}" is not scheduled.')
        elif seen[name] > 1:
            warnings.append(f'"{name}" is scheduled {seen[name]} times.')
    expected_set = set(expected)
    for name in sorted(seen):
        if name not in expected_set:
            warnings.append(f'"{name}" was not requested.')

    return warnings
