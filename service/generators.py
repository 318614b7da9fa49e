"""
Generation provider selection.
"""
from typing import Any, Dict, Protocol
import logging

from config.settings import Settings
from models.schemas import ScheduleParameters
from service.exceptions import ConfigurationError
from service.gemini_generator import GeminiTimetableGenerator
from service.ortools_solver import ORToolsTimetableSolver

logger = logging.getLogger(__name__)


class TimetableGenerator(Protocol):
    async def generate(self, params: ScheduleParameters) -> Dict[str, Any]:
        ...


def create_generator(settings: Settings) -> TimetableGenerator:
    """Build the provider named by GENERATOR_BACKEND. Raises ConfigurationError on bad setup."""
    backend = settings.generator_backend.lower()
    if backend == "gemini":
        logger.info(f"Using Gemini generator ({settings.gemini_model})")
        return GeminiTimetableGenerator(
            api_key=settings.api_key,
            model=settings.gemini_model,
            temperature=settings.gemini_temperature,
        )
    if backend == "ortools":
        logger.info("Using OR-Tools generator")
        return ORToolsTimetableSolver(
            time_limit_seconds=settings.solver_timeout_seconds,
            random_seed=settings.solver_random_seed,
            num_workers=settings.solver_num_workers,
        )
    raise ConfigurationError(f"Unknown generator backend: {settings.generator_backend}")
