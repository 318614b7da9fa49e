"""
Data models and Pydantic schemas for the timetable API.
"""
from .schemas import (
    DAYS_OF_WEEK,
    GRADES,
    ScheduleParameters,
    CapacitySummary,
    PromptPreview,
    ClassAssignment,
    Timetable,
    SlotRef,
    MoveRequest,
    DragStartRequest,
    DragState,
    MoveResult,
    MoveResponse,
    DropTarget,
    DropTargetsResponse,
    GridCell,
    GridRow,
    RoomGrid,
    ErrorMessage,
    Messages,
    GenerationResponse,
    SessionView
)

__all__ = [
    "DAYS_OF_WEEK",
    "GRADES",
    "ScheduleParameters",
    "CapacitySummary",
    "PromptPreview",
    "ClassAssignment",
    "Timetable",
    "SlotRef",
    "MoveRequest",
    "DragStartRequest",
    "DragState",
    "MoveResult",
    "MoveResponse",
    "DropTarget",
    "DropTargetsResponse",
    "GridCell",
    "GridRow",
    "RoomGrid",
    "ErrorMessage",
    "Messages",
    "GenerationResponse",
    "SessionView"
]
