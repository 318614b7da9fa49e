"""
Test the generation brief and response schema.
"""
import pytest
from models.schemas import DAYS_OF_WEEK, ScheduleParameters
from service.prompt_builder import (
    build_prompt, build_response_schema, class_letter, expected_class_names,
    room_names, slot_names
)


def get_scenario_parameters():
    """Two Grade 1 classes, one room, one day, two slots."""
    return ScheduleParameters(
        grade_counts={1: 2, 2: 0, 3: 0, 4: 0, 5: 0},
        max_concurrent_classes=3,
        sessions_per_day=2,
        included_days=["Monday"],
        number_of_rooms=1,
    )


@pytest.mark.parametrize("rooms,sessions,days", [
    (1, 1, ["Monday"]),
    (3, 2, ["Tuesday", "Thursday"]),
    (10, 5, list(DAYS_OF_WEEK)),
])
def test_prompt_names_every_day_and_slot(rooms, sessions, days):
    params = ScheduleParameters(
        grade_counts={1: 1, 3: 2},
        sessions_per_day=sessions,
        included_days=days,
        number_of_rooms=rooms,
    )
    prompt = build_prompt(params)

    for day in days:
        assert day in prompt
    for slot in slot_names(sessions):
        assert slot in prompt
    assert len(build_response_schema(params)["properties"]) == rooms


def test_prompt_lists_counts_and_rules():
    params = ScheduleParameters(grade_counts={1: 2, 4: 3}, max_concurrent_classes=4, number_of_rooms=2)
    prompt = build_prompt(params)

    assert "- Grade 1: 2 classes" in prompt
    assert "- Grade 4: 3 classes" in prompt
    assert "- Grade 5: 0 classes" in prompt
    assert "more than 4 classes in total" in prompt
    assert "Grade 1 and Grade 2 classes must NEVER" in prompt
    assert "Grade 3 and Grade 4 classes must NEVER" in prompt
    assert 'fill up the schedule for "Room 1"' in prompt
    assert "2 rooms available" in prompt


def test_scenario_schema_shape():
    schema = build_response_schema(get_scenario_parameters())

    assert schema["required"] == ["Room 1"]
    room = schema["properties"]["Room 1"]
    assert room["required"] == ["Monday"]
    day = room["properties"]["Monday"]
    assert day["required"] == ["Slot 1", "Slot 2"]
    assert day["properties"]["Slot 1"] == {"type": "ARRAY", "items": {"type": "STRING"}}


def test_scenario_brief_requests_two_grade_one_classes():
    params = get_scenario_parameters()
    prompt = build_prompt(params)

    assert "- Grade 1: 2 classes" in prompt
    assert '"Grade 1 - A", "Grade 1 - B"' in prompt
    assert expected_class_names(params) == ["Grade 1 - A", "Grade 1 - B"]


def test_schema_requires_every_room_day_and_slot():
    params = ScheduleParameters(
        grade_counts={2: 1},
        sessions_per_day=3,
        included_days=["Friday", "Monday"],
        number_of_rooms=3,
    )
    schema = build_response_schema(params)

    assert schema["required"] == ["Room 1", "Room 2", "Room 3"]
    for room in schema["required"]:
        assert schema["properties"][room]["required"] == ["Monday", "Friday"]
        for day in ["Monday", "Friday"]:
            assert schema["properties"][room]["properties"][day]["required"] == ["Slot 1", "Slot 2", "Slot 3"]


def test_expected_class_names_follow_grade_then_letter():
    params = ScheduleParameters(grade_counts={2: 2, 5: 1, 1: 1})
    assert expected_class_names(params) == [
        "Grade 1 - A", "Grade 2 - A", "Grade 2 - B", "Grade 5 - A"
    ]


def test_class_letters():
    assert class_letter(0) == "A"
    assert class_letter(19) == "T"
    assert class_letter(25) == "Z"
    assert class_letter(26) == "AA"


def test_room_and_slot_names():
    assert room_names(2) == ["Room 1", "Room 2"]
    assert slot_names(3) == ["Slot 1", "Slot 2", "Slot 3"]


def test_prompt_is_deterministic():
    params = get_scenario_parameters()
    assert build_prompt(params) == build_prompt(params)
    assert build_response_schema(params) == build_response_schema(params)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
