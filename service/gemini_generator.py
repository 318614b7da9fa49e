"""
Timetable generation through the Gemini API.

The brief and the response schema come from the request builder; the reply is
parsed as JSON and must carry exactly one entry per requested room.
"""

from google import genai
from google.genai import types
from typing import Any, Dict, Optional
import json
import logging

from models.schemas import ScheduleParameters
from service.exceptions import ConfigurationError, ContentValidationError, GenerationError
from service.prompt_builder import build_prompt, build_response_schema

logger = logging.getLogger(__name__)


def validate_response_shape(data: Any, number_of_rooms: int) -> Dict[str, Any]:
    """Reject anything that is not an object with exactly one key per room."""
    if not isinstance(data, dict):
        raise ContentValidationError(
            "Invalid timetable format received from API. Expected a structure with rooms.",
            expected_rooms=number_of_rooms
        )
    if len(data) != number_of_rooms:
        raise ContentValidationError(
            f"Invalid timetable format received from API. Expected {number_of_rooms} rooms, got {len(data)}.",
            received_rooms=len(data),
            expected_rooms=number_of_rooms
        )
    return data


class GeminiTimetableGenerator:
    """Asks a Gemini model for a timetable in the structured-output shape."""

    def __init__(self, api_key: Optional[str], model: str = "gemini-2.5-flash",
                 temperature: float = 0.5, client: Optional[genai.Client] = None):
        if client is None and not api_key:
            raise ConfigurationError("API_KEY environment variable not set")
        self.client = client or genai.Client(api_key=api_key)
        self.model = model
        self.temperature = temperature

    async def generate(self, params: ScheduleParameters) -> Dict[str, Any]:
        prompt = build_prompt(params)
        schema = build_response_schema(params)

        logger.info(
            f"Requesting timetable from {self.model}: {params.total_classes} classes, "
            f"{params.number_of_rooms} rooms, {len(params.included_days)} days"
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=schema,
                    temperature=self.temperature,
                ),
            )
        except Exception as e:
            logger.error(f"Error generating timetable: {str(e)}", exc_info=True)
            raise GenerationError(f"Failed to generate timetable: {str(e)}") from e

        text = (response.text or "").strip()
        if not text:
            raise GenerationError("Failed to generate timetable: the model returned an empty response.")

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"Unparseable timetable response: {str(e)}")
            raise GenerationError(f"Failed to generate timetable: {str(e)}") from e

        return validate_response_shape(data, params.number_of_rooms)
