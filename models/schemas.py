from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Literal, Optional
import re


DAYS_OF_WEEK: List[str] = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
GRADES: List[int] = [1, 2, 3, 4, 5]
MAX_CLASSES_PER_GRADE = 20

GRADE_PATTERN = re.compile(r"Grade (\d)")

DayOfWeek = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]


# ===========================
# Parameter Models
# ===========================

class ScheduleParameters(BaseModel):
    """Everything the user configures before asking for a timetable."""
    grade_counts: Dict[int, int] = Field(default_factory=lambda: {g: 0 for g in GRADES})
    max_concurrent_classes: int = Field(default=3, ge=1)
    sessions_per_day: int = Field(default=2, ge=1, le=5)
    included_days: List[DayOfWeek] = Field(default_factory=lambda: list(DAYS_OF_WEEK))
    number_of_rooms: int = Field(default=1, ge=1, le=10)

    @field_validator("grade_counts")
    @classmethod
    def _normalize_grade_counts(cls, value: Dict[int, int]) -> Dict[int, int]:
        for grade, count in value.items():
            if grade not in GRADES:
                raise ValueError(f"Unknown grade {grade}; grades run from 1 to 5")
            if count < 0 or count > MAX_CLASSES_PER_GRADE:
                raise ValueError(
                    f"Grade {grade} class count must be between 0 and {MAX_CLASSES_PER_GRADE}"
                )
        return {g: value.get(g, 0) for g in GRADES}

    @field_validator("included_days")
    @classmethod
    def _calendar_order(cls, value: List[str]) -> List[str]:
        # Toggle order never matters; days always come back Monday first.
        return [day for day in DAYS_OF_WEEK if day in value]

    @property
    def total_classes(self) -> int:
        return sum(self.grade_counts.values())

    @property
    def max_capacity(self) -> int:
        return (
            self.max_concurrent_classes
            * len(self.included_days)
            * self.sessions_per_day
            * self.number_of_rooms
        )

    @property
    def can_generate(self) -> bool:
        return (
            self.total_classes > 0
            and len(self.included_days) > 0
            and self.total_classes <= self.max_capacity
        )


class CapacitySummary(BaseModel):
    total_classes: int
    max_capacity: int
    can_generate: bool
    capacity_exceeded: bool

    @classmethod
    def from_parameters(cls, params: ScheduleParameters) -> "CapacitySummary":
        return cls(
            total_classes=params.total_classes,
            max_capacity=params.max_capacity,
            can_generate=params.can_generate,
            capacity_exceeded=params.total_classes > params.max_capacity,
        )


class PromptPreview(BaseModel):
    prompt: str
    response_schema: Dict[str, Any]


# ===========================
# Timetable Models
# ===========================

class ClassAssignment(BaseModel):
    """A scheduled class. The grade is read from the name once, on ingestion."""
    model_config = ConfigDict(frozen=True)

    name: str
    grade: Optional[int] = None

    @classmethod
    def from_name(cls, name: str) -> "ClassAssignment":
        match = GRADE_PATTERN.search(name)
        return cls(name=name, grade=int(match.group(1)) if match else None)


# room -> day -> slot -> occupants
Timetable = Dict[str, Dict[str, Dict[str, List[ClassAssignment]]]]


class SlotRef(BaseModel):
    """Address of one cell in a room's weekly grid."""
    model_config = ConfigDict(frozen=True)

    room: str
    day: str
    slot: str


class MoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    class_name: str
    from_: SlotRef = Field(alias="from")
    to: SlotRef


class DragStartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    class_name: str
    from_: SlotRef = Field(alias="from")


class DragState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    class_name: str
    from_: SlotRef = Field(alias="from")


class MoveResult(BaseModel):
    """Outcome of checking a move. Silent rejections carry no user message."""
    accepted: bool
    reason: Optional[str] = None
    silent: bool = False


class MoveResponse(BaseModel):
    accepted: bool
    reason: Optional[str] = None
    message: Optional[str] = None
    timetable: Optional[Timetable] = None


class DropTarget(BaseModel):
    room: str
    day: str
    slot: str
    valid: bool
    reason: Optional[str] = None


class DropTargetsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    class_name: str
    from_: SlotRef = Field(alias="from")
    targets: List[DropTarget]


class GridCell(BaseModel):
    day: str
    classes: List[ClassAssignment] = []


class GridRow(BaseModel):
    slot: str
    cells: List[GridCell]


class RoomGrid(BaseModel):
    room: str
    days: List[str]
    rows: List[GridRow]


# ===========================
# Response Schema
# ===========================

class ErrorMessage(BaseModel):
    """Error or warning message"""
    code: str
    title: str
    description: str
    resolution_hint: Optional[str] = None


class Messages(BaseModel):
    """Collection of error/warning messages"""
    error_message: List[ErrorMessage] = []


class GenerationResponse(BaseModel):
    """Result of one generation request."""
    status: str  # "GENERATED", "PROVIDER_ERROR", "INVALID_CONTENT"
    timetable: Optional[Timetable] = None
    warnings: List[str] = []
    messages: Messages = Messages()
    generation_time_seconds: Optional[float] = None


class SessionView(BaseModel):
    session_id: str
    parameters: ScheduleParameters
    summary: CapacitySummary
    timetable: Optional[Timetable] = None
    is_loading: bool = False
    drag: Optional[DragState] = None
    message: Optional[str] = None
