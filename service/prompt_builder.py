"""
Request building for the generation provider.

Turns ScheduleParameters into the natural-language brief and the structured
output schema that are sent together on every generation request.
"""

from string import ascii_uppercase
from typing import Any, Dict, List

from models.schemas import ScheduleParameters


def slot_names(sessions_per_day: int) -> List[str]:
    return [f"Slot {i}" for i in range(1, sessions_per_day + 1)]


def room_names(number_of_rooms: int) -> List[str]:
    return [f"Room {i}" for i in range(1, number_of_rooms + 1)]


def class_letter(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA."""
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = ascii_uppercase[remainder] + letters
    return letters


def expected_class_names(params: ScheduleParameters) -> List[str]:
    """Every class name implied by the grade counts, in grade then letter order."""
    names = []
    for grade, count in params.grade_counts.items():
        for i in range(count):
            names.append(f"Grade {grade} - {class_letter(i)}")
    return names


def _single_room_schema(params: ScheduleParameters) -> Dict[str, Any]:
    slots = slot_names(params.sessions_per_day)
    day_schema = {
        "type": "OBJECT",
        "properties": {
            slot: {"type": "ARRAY", "items": {"type": "STRING"}} for slot in slots
        },
        "required": list(slots),
    }
    return {
        "type": "OBJECT",
        "properties": {day: day_schema for day in params.included_days},
        "required": list(params.included_days),
    }


def build_response_schema(params: ScheduleParameters) -> Dict[str, Any]:
    """
    Build the output schema: room -> day -> slot -> list of class names.

    Every room, day and slot is required so the response is always the full
    rectangle, with empty lists where nothing is scheduled.
    """
    rooms = room_names(params.number_of_rooms)
    return {
        "type": "OBJECT",
        "properties": {room: _single_room_schema(params) for room in rooms},
        "required": list(rooms),
    }


def build_prompt(params: ScheduleParameters) -> str:
    """Build the scheduling brief for the given parameters."""
    class_list = "\n".join(
        f"        - Grade {grade}: {count} classes"
        for grade, count in params.grade_counts.items()
    )
    slot_list = ", ".join(slot_names(params.sessions_per_day))
    day_list = ", ".join(params.included_days)
    rooms = params.number_of_rooms
    max_classes = params.max_concurrent_classes

    return f"""
    You are an expert school timetable scheduler. Your task is to create a weekly timetable for a primary school with grades 1 through 5, distributing classes across {rooms} available rooms.

    Here are the constraints:
    1.  **Classes to Schedule:**
{class_list}
        (When you create the schedule, name the classes like "Grade 1 - A", "Grade 1 - B", "Grade 2 - A", etc.)

    2.  **Schedule Structure:**
        - There are {rooms} rooms available, named "Room 1", "Room 2", etc.
        - The week includes only the following days: {day_list}.
        - There are {params.sessions_per_day} available time slots each day: {slot_list}.

    3.  **Scheduling Rules:**
        - Every single class implied by the counts above must be scheduled exactly once across all rooms.
        - In any single time slot (e.g., Room 1, Monday Slot 1), you cannot schedule more than {max_classes} classes in total.
        - **Crucially, Grade 1 and Grade 2 classes must NEVER be scheduled in the same time slot together in the same room.**
        - **Similarly, Grade 3 and Grade 4 classes must NEVER be scheduled in the same time slot together in the same room.**
        - **VERY IMPORTANT ROOM ALLOCATION RULE: You must fill up the schedule for "Room 1" as much as possible before assigning any classes to "Room 2". Then, fill "Room 2" before "Room 3", and so on. Follow this sequential filling order strictly.**
        - Distribute the classes as evenly as possible throughout the week to balance the school's activity, while respecting all other rules.

    Please provide the generated timetable in the specified JSON format. The output should be a JSON object where the keys are the room names (e.g., "Room 1", "Room 2").
    """
