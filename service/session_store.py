"""
In-memory editor sessions.

A session owns one set of parameters, at most one timetable, the drag in
progress and the last message shown to the user. Nothing is persisted.
"""

from typing import Dict, List, Optional
import logging
import uuid

from models.schemas import (
    CapacitySummary, DragState, DropTarget, MoveResult, ScheduleParameters,
    SessionView, SlotRef, Timetable
)
from service.editor import evaluate_drop_targets, move_class
from service.exceptions import (
    GenerationInProgressError, MoveConsistencyError, SessionNotFoundError
)

logger = logging.getLogger(__name__)


class EditorSession:
    def __init__(self, session_id: str, parameters: ScheduleParameters):
        self.session_id = session_id
        self.parameters = parameters
        self.timetable: Optional[Timetable] = None
        self.is_loading = False
        self.drag: Optional[DragState] = None
        self.message: Optional[str] = None

    def to_view(self) -> SessionView:
        return SessionView(
            session_id=self.session_id,
            parameters=self.parameters,
            summary=CapacitySummary.from_parameters(self.parameters),
            timetable=self.timetable,
            is_loading=self.is_loading,
            drag=self.drag,
            message=self.message,
        )


class SessionStore:
    """Holds every live EditorSession, keyed by id."""

    def __init__(self):
        self._sessions: Dict[str, EditorSession] = {}

    def create(self, parameters: ScheduleParameters) -> EditorSession:
        session = EditorSession(str(uuid.uuid4()), parameters)
        self._sessions[session.session_id] = session
        logger.info(f"Created session {session.session_id}")
        return session

    def get(self, session_id: str) -> EditorSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def delete(self, session_id: str):
        self.get(session_id)
        del self._sessions[session_id]

    def update_parameters(self, session_id: str, parameters: ScheduleParameters) -> EditorSession:
        session = self.get(session_id)
        if session.is_loading:
            raise GenerationInProgressError("Parameters cannot change while a timetable is being generated")
        session.parameters = parameters
        return session

    # ===========================
    # Generation lifecycle
    # ===========================

    def begin_generation(self, session_id: str) -> EditorSession:
        """Enter the loading state. Only one generation per session may be outstanding."""
        session = self.get(session_id)
        if session.is_loading:
            raise GenerationInProgressError("A timetable is already being generated for this session")
        session.is_loading = True
        session.message = None
        session.drag = None
        return session

    def finish_generation(self, session_id: str, timetable: Timetable):
        session = self._sessions.get(session_id)
        if session is None:
            logger.warning(f"Session {session_id} was removed before its timetable arrived")
            return
        session.timetable = timetable
        session.message = None
        session.is_loading = False

    def fail_generation(self, session_id: str, message: str):
        """Leave the loading state keeping whatever timetable the session already had."""
        session = self._sessions.get(session_id)
        if session is None:
            return
        session.message = message
        session.is_loading = False

    # ===========================
    # Editing
    # ===========================

    def start_drag(self, session_id: str, class_name: str, from_: SlotRef) -> EditorSession:
        """Hold a class as the drag candidate, replacing any candidate already held."""
        session = self.get(session_id)
        session.message = None
        session.drag = DragState(class_name=class_name, from_=from_)
        return session

    def cancel_drag(self, session_id: str) -> EditorSession:
        session = self.get(session_id)
        session.drag = None
        return session

    def drop_targets(self, session_id: str) -> List[DropTarget]:
        session = self.get(session_id)
        if session.drag is None or session.timetable is None:
            return []
        return evaluate_drop_targets(
            session.timetable,
            session.drag.class_name,
            session.drag.from_,
            session.parameters.max_concurrent_classes,
        )

    def drop(self, session_id: str, to: SlotRef) -> MoveResult:
        """Move the held candidate to `to` and return to idle, accepted or not."""
        session = self.get(session_id)
        drag = session.drag
        session.drag = None
        if drag is None:
            return MoveResult(accepted=False, silent=True)
        return self.move(session_id, drag.class_name, drag.from_, to)

    def move(self, session_id: str, class_name: str, from_: SlotRef, to: SlotRef) -> MoveResult:
        session = self.get(session_id)
        if session.timetable is None:
            result = MoveResult(accepted=False, reason="There is no timetable to edit yet.")
            session.message = result.reason
            return result

        try:
            timetable, result = move_class(
                session.timetable, class_name, from_, to,
                session.parameters.max_concurrent_classes,
            )
        except MoveConsistencyError as e:
            logger.error(f"Could not move class: {str(e)}")
            result = MoveResult(accepted=False, reason=f'Cannot move "{class_name}": {str(e)}.')
            session.message = result.reason
            return result

        if result.accepted:
            session.timetable = timetable
            session.message = None
        elif result.reason:
            session.message = result.reason
        return result
