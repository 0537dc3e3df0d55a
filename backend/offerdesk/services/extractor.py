"""
Structured extraction of vendor offers from free text (emails, pasted quotes).
"""
import json
import time
import logging
from typing import Any, Dict, Optional

from openai import AsyncOpenAI, OpenAIError

from offerdesk.db.database import settings
from offerdesk.errors import ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a parser for wholesale/distribution vendor emails. Extract structured data into JSON.
Return ONLY valid JSON matching this shape (no markdown, no explanation):
{
  "vendor_name": string | null,
  "vendor_email": string | null,
  "valid_until": string | null (ISO date if mentioned),
  "lead_time_days": number | null,
  "terms": string | null,
  "items": Array<{
    "sku": string | null,
    "description": string,
    "quantity": number,
    "unit": string (e.g. "ea", "case", "kg"),
    "unit_price": number,
    "moq": number | null
  }>
}
If something is not found, use null. For items, quantity and unit_price must be numbers."""


class OpenAIExtractor:
    """Structured Extractor backed by an OpenAI chat completion in JSON mode."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.extractor_model
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise ExternalServiceError(
                    "OpenAI API key not configured. Please set OPENAI_API_KEY environment variable."
                )
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def extract(self, text: str) -> Dict[str, Any]:
        """
        Return the JSON object the model produced for ``text``.

        Shape validation is the caller's job; this only guarantees a dict.
        """
        client = self._get_client()
        start_time = time.perf_counter()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": text},
                ],
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error("Structured extraction failed: %s", e)
            raise ExternalServiceError(f"Extractor request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExternalServiceError("Extractor returned an empty response")

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Extractor output is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise ValidationError("Extractor output is not a JSON object")

        duration = round(time.perf_counter() - start_time, 3)
        logger.info("Extracted offer (%d chars) with %s in %.2fs", len(text), self.model, duration)
        return payload


_extractor: Optional[OpenAIExtractor] = None


def get_extractor() -> OpenAIExtractor:
    """Dependency returning the process-wide extractor, created lazily."""
    global _extractor
    if _extractor is None:
        _extractor = OpenAIExtractor()
    return _extractor
