"""AI schema generation: suggest form fields from a free-text description via Gemini.

Output is untrusted. Callers must pass every suggested field through
``form_builder.accept_generated_fields`` before it joins a schema.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from formcraft.core.config import settings
from formcraft.schemas.fields import FieldType
from formcraft.services.exceptions import SchemaGenerationError

logger = logging.getLogger(__name__)

GEMINI_GENERATE_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

FIELD_TYPE_NAMES = [t.value for t in FieldType]

SCHEMA_SYSTEM_PROMPT = (
    "You design web forms. Given a description of a form, return a JSON array of form fields.\n\n"
    "Each object in the array MUST have:\n"
    '- "type": one of ' + ", ".join(f'"{t}"' for t in FIELD_TYPE_NAMES) + "\n"
    '- "label": a professional, human-readable label\n'
    '- "help_text": clear, specific instructions for the respondent\n'
    '- "placeholder": a realistic example value (e.g. "Jane Doe", "name@company.com", "YYYY-MM-DD"), '
    'never generic text like "Enter text here"\n'
    '- "required": true or false\n\n'
    "Optional keys:\n"
    '- "options": array of strings, ONLY when type is "select"\n'
    '- "validation": object with any of "min", "max" (number fields only) and '
    '"min_length", "max_length" (text and textarea only), chosen from context '
    "(e.g. an age field has min 0 and max 120, a description has max_length)\n\n"
    "Return ONLY the JSON array, no other text."
)

RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "type": {"type": "STRING", "enum": FIELD_TYPE_NAMES},
            "label": {"type": "STRING"},
            "help_text": {"type": "STRING"},
            "placeholder": {"type": "STRING"},
            "required": {"type": "BOOLEAN"},
            "options": {"type": "ARRAY", "items": {"type": "STRING"}},
            "validation": {
                "type": "OBJECT",
                "properties": {
                    "min": {"type": "NUMBER"},
                    "max": {"type": "NUMBER"},
                    "min_length": {"type": "INTEGER"},
                    "max_length": {"type": "INTEGER"},
                },
            },
        },
        "required": ["type", "label", "required", "placeholder", "help_text"],
    },
}


class BaseSchemaGenerator(ABC):
    """Produces candidate field definitions from a free-text description."""

    @abstractmethod
    async def suggest_fields(self, description: str) -> list[dict[str, Any]]:
        """Return raw field dicts, best effort. May be empty."""


class GeminiSchemaGenerator(BaseSchemaGenerator):
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        max_fields: int | None = None,
    ) -> None:
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.model = model or settings.SCHEMA_GENERATION_MODEL
        self.timeout = timeout or settings.SCHEMA_GENERATION_TIMEOUT_SECONDS
        self.max_fields = max_fields or settings.SCHEMA_GENERATION_MAX_FIELDS

    async def suggest_fields(self, description: str) -> list[dict[str, Any]]:
        """Ask Gemini for field suggestions.

        Args:
            description: Free-text description of the form to build.

        Returns:
            Raw field dicts, at most ``max_fields``. Empty when no API key is set.

        Raises:
            SchemaGenerationError: On an empty description, an API error, or an
                unparseable response.
        """
        if not description or not description.strip():
            raise SchemaGenerationError("Empty description: cannot generate fields")

        if not self.api_key:
            logger.warning("GEMINI_API_KEY not configured, returning no generated fields")
            return []

        url = GEMINI_GENERATE_URL.format(model=self.model)
        payload = {
            "contents": [
                {
                    "parts": [
                        {"text": SCHEMA_SYSTEM_PROMPT},
                        {"text": f'Form description: "{description.strip()}"'},
                    ]
                }
            ],
            "generationConfig": {
                "temperature": 0.2,
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    url,
                    json=payload,
                    params={"key": self.api_key},
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Gemini API returned %d: %s",
                exc.response.status_code,
                exc.response.text,
            )
            raise SchemaGenerationError(f"Gemini API error: {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            logger.error("Gemini API request failed: %s", exc)
            raise SchemaGenerationError(f"Gemini API request failed: {exc}") from exc

        content = None
        try:
            data = response.json()
            content = data["candidates"][0]["content"]["parts"][0]["text"].strip()
            parsed = json.loads(content)
        except (KeyError, IndexError, json.JSONDecodeError, TypeError, ValueError) as exc:
            logger.error("Failed to parse schema generation response: %s (raw: %s)", exc, content or "N/A")
            raise SchemaGenerationError(f"Failed to parse schema generation response: {exc}") from exc

        if isinstance(parsed, dict) and isinstance(parsed.get("fields"), list):
            parsed = parsed["fields"]
        if not isinstance(parsed, list):
            raise SchemaGenerationError("Schema generation response is not a JSON array")

        if len(parsed) > self.max_fields:
            logger.warning("Gemini suggested %d fields, keeping the first %d", len(parsed), self.max_fields)
            parsed = parsed[: self.max_fields]

        logger.info("Gemini suggested %d field(s)", len(parsed))
        return parsed


def get_schema_generator() -> BaseSchemaGenerator:
    """FastAPI dependency: the configured field generator."""
    return GeminiSchemaGenerator()
