"""
One generation cycle for an editor session.
"""
from datetime import datetime
import logging

from models.schemas import ErrorMessage, GenerationResponse, Messages
from service.editor import check_timetable, ingest_timetable
from service.exceptions import ContentValidationError, GenerationError
from service.generators import TimetableGenerator
from service.session_store import SessionStore

logger = logging.getLogger(__name__)


async def run_generation(store: SessionStore, generator: TimetableGenerator,
                         session_id: str) -> GenerationResponse:
    """
    Ask the provider for a timetable and hand it to the session.

    Raises GenerationInProgressError when the session is already loading.
    Provider and content failures come back in the response; the session
    keeps its previous timetable in that case.
    """
    session = store.begin_generation(session_id)
    params = session.parameters
    start_time = datetime.now()

    try:
        data = await generator.generate(params)
        timetable = ingest_timetable(data)
    except ContentValidationError as e:
        logger.warning(f"Rejected timetable for session {session_id}: {str(e)}")
        store.fail_generation(session_id, str(e))
        return _error_response(
            "INVALID_CONTENT", "Invalid Timetable", str(e),
            "The model answered with an unexpected structure. Try generating again."
        )
    except GenerationError as e:
        store.fail_generation(session_id, str(e))
        return _error_response(
            "PROVIDER_ERROR", "Generation Failed", str(e),
            "Check the parameters and try again."
        )
    except BaseException:
        store.fail_generation(session_id, "An unexpected error occurred.")
        raise

    generation_time = (datetime.now() - start_time).total_seconds()
    warnings = check_timetable(timetable, params)
    if warnings:
        logger.warning(f"Generated timetable breaks {len(warnings)} rule(s) for session {session_id}")
    store.finish_generation(session_id, timetable)
    logger.info(f"Timetable generated for session {session_id} in {generation_time:.2f}s")

    return GenerationResponse(
        status="GENERATED",
        timetable=timetable,
        warnings=warnings,
        generation_time_seconds=generation_time,
    )


def _error_response(status: str, title: str, description: str, hint: str) -> GenerationResponse:
    return GenerationResponse(
        status=status,
        messages=Messages(error_message=[
            ErrorMessage(code=status, title=title, description=description, resolution_hint=hint)
        ]),
        generation_time_seconds=0.0,
    )
