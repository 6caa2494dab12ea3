"""
Gemini API integration for Scribe.

Provides:
- GeminiClient: structured transcript summarization through google-genai,
  using the per-template schema from `scribe.summary`.
"""

import asyncio
import logging
from typing import Optional
from google import genai
from google.genai import errors, types

from scribe.note_template import NoteTemplate
from scribe.summary import (
    SummarizationError,
    build_summary_model,
    build_summary_prompt,
    normalize_summary,
)

logger = logging.getLogger("scribe.gemini")

DEFAULT_MODEL = "gemini-2.5-flash"
TEMPERATURE = 0.5


class GeminiClient:
    """
    Thin wrapper around `genai.Client` for summarization.

    The SDK call is blocking, so it runs in the default thread executor to
    keep the event loop free.
    """

    def __init__(self, api_key: Optional[str]):
        self.api_key = api_key

    def _client(self) -> genai.Client:
        if not self.api_key:
            raise SummarizationError("GEMINI_API_KEY not set in environment.")
        return genai.Client(api_key=self.api_key)

    async def summarize_transcript(
        self,
        transcript: str,
        template: NoteTemplate,
        model: str = DEFAULT_MODEL,
        output_language: Optional[str] = None,
    ) -> dict[str, str]:
        """
        Summarize a transcript into one entry per template section.

        Returns:
            Summary record with `fileTitle` and every section key present.

        Raises:
            SummarizationError: Missing key, API failure, or unparsable reply.
        """
        client = self._client()
        schema = build_summary_model(template)
        config = types.GenerateContentConfig(
            temperature=TEMPERATURE,
            response_mime_type="application/json",
            response_schema=schema,
        )
        prompt = build_summary_prompt(transcript, output_language)

        logger.info(f"[Gemini] Summarizing {len(transcript)} chars with {model}")
        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(
                None,
                lambda: client.models.generate_content(model=model, contents=prompt, config=config),
            )
        except errors.APIError as exc:
            logger.error(f"[Gemini] API error {exc.code}: {exc}")
            raise self._api_error(exc, model) from exc

        raw_text = response.text or ""
        try:
            parsed = schema.model_validate_json(raw_text)
        except ValueError as exc:
            logger.error(f"[Gemini] Failed to parse response: {exc}\nRaw: {raw_text[:500]}")
            raise SummarizationError(f"Model response could not be parsed: {exc}") from exc

        summary = normalize_summary(parsed.model_dump(), template)
        logger.info(f"[Gemini] Summary ready: title='{summary['fileTitle']}'")
        return summary

    @staticmethod
    def _api_error(exc: errors.APIError, model: str) -> SummarizationError:
        message = str(exc).lower()
        if exc.code in (401, 403):
            return SummarizationError(
                "Gemini API authentication failed. Please check your API key at https://aistudio.google.com/apikey"
            )
        if exc.code == 429:
            return SummarizationError("Gemini API rate limit exceeded. Please wait a moment and try again.")
        if exc.code == 404 or ("model" in message and "not found" in message):
            return SummarizationError(f'Gemini model "{model}" not found. Please check the model name in settings.')
        if exc.code is not None and exc.code >= 500:
            return SummarizationError(
                "Gemini API server error. The service may be temporarily unavailable. Please try again later."
            )
        if "too long" in message or "token" in message:
            return SummarizationError("Transcript is too long for Gemini API. Try recording a shorter audio clip.")
        return SummarizationError(f"Gemini summarization error: {exc}")
