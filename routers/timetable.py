from fastapi import APIRouter, Depends, HTTPException, Response, status
from functools import lru_cache

from config.settings import settings
from models.schemas import (
    CapacitySummary, DragStartRequest, DropTargetsResponse, GenerationResponse,
    MoveRequest, MoveResponse, PromptPreview, RoomGrid, ScheduleParameters,
    SessionView, SlotRef
)
from service.editor import render_room_grid
from service.generation import run_generation
from service.generators import TimetableGenerator, create_generator
from service.prompt_builder import build_prompt, build_response_schema, slot_names
from service.session_store import SessionStore

# Create a router instance
router = APIRouter()

_store = SessionStore()


def get_store() -> SessionStore:
    return _store


@lru_cache
def get_generator() -> TimetableGenerator:
    return create_generator(settings)


def _move_response(store: SessionStore, session_id: str, result) -> MoveResponse:
    session = store.get(session_id)
    return MoveResponse(
        accepted=result.accepted,
        reason=result.reason,
        message=session.message,
        timetable=session.timetable,
    )


# ===========================
# Stateless helpers
# ===========================

@router.post("/timetable/summary", response_model=CapacitySummary)
async def summarize(params: ScheduleParameters):
    """Total requested classes against the capacity the parameters allow."""
    return CapacitySummary.from_parameters(params)


@router.post("/timetable/prompt", response_model=PromptPreview)
async def preview_prompt(params: ScheduleParameters):
    """The brief and output schema that a generation request would send."""
    return PromptPreview(prompt=build_prompt(params), response_schema=build_response_schema(params))


# ===========================
# Sessions
# ===========================

@router.post("/sessions", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def create_session(params: ScheduleParameters, store: SessionStore = Depends(get_store)):
    return store.create(params).to_view()


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session(session_id: str, store: SessionStore = Depends(get_store)):
    return store.get(session_id).to_view()


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, store: SessionStore = Depends(get_store)):
    store.delete(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/sessions/{session_id}/parameters", response_model=SessionView)
async def update_parameters(session_id: str, params: ScheduleParameters,
                            store: SessionStore = Depends(get_store)):
    return store.update_parameters(session_id, params).to_view()


@router.post("/sessions/{session_id}/generate", response_model=GenerationResponse)
async def generate_timetable(session_id: str, store: SessionStore = Depends(get_store),
                             generator: TimetableGenerator = Depends(get_generator)):
    """
    Generate a timetable for the session's current parameters.

    Refused while another generation for the same session is outstanding.
    """
    session = store.get(session_id)
    summary = CapacitySummary.from_parameters(session.parameters)
    if not summary.can_generate:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Cannot generate: {summary.total_classes} classes requested, "
                f"capacity is {summary.max_capacity}, at least one class and one day are required."
            )
        )
    return await run_generation(store, generator, session_id)


# ===========================
# Editing
# ===========================

@router.post("/sessions/{session_id}/drag", response_model=SessionView)
async def start_drag(session_id: str, request: DragStartRequest,
                     store: SessionStore = Depends(get_store)):
    return store.start_drag(session_id, request.class_name, request.from_).to_view()


@router.delete("/sessions/{session_id}/drag", response_model=SessionView)
async def cancel_drag(session_id: str, store: SessionStore = Depends(get_store)):
    return store.cancel_drag(session_id).to_view()


@router.get("/sessions/{session_id}/drag/targets", response_model=DropTargetsResponse)
async def drop_targets(session_id: str, store: SessionStore = Depends(get_store)):
    """Where the held class could be dropped, slot by slot."""
    session = store.get(session_id)
    if session.drag is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No class is being dragged")
    return DropTargetsResponse(
        class_name=session.drag.class_name,
        from_=session.drag.from_,
        targets=store.drop_targets(session_id),
    )


@router.post("/sessions/{session_id}/drop", response_model=MoveResponse)
async def drop(session_id: str, to: SlotRef, store: SessionStore = Depends(get_store)):
    result = store.drop(session_id, to)
    return _move_response(store, session_id, result)


@router.post("/sessions/{session_id}/moves", response_model=MoveResponse)
async def move(session_id: str, request: MoveRequest, store: SessionStore = Depends(get_store)):
    result = store.move(session_id, request.class_name, request.from_, request.to)
    return _move_response(store, session_id, result)


@router.get("/sessions/{session_id}/rooms/{room}/grid", response_model=RoomGrid)
async def room_grid(session_id: str, room: str, store: SessionStore = Depends(get_store)):
    session = store.get(session_id)
    if session.timetable is None or room not in session.timetable:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{room} has no timetable")
    return render_room_grid(
        session.timetable,
        room,
        session.parameters.included_days,
        slot_names(session.parameters.sessions_per_day),
    )
