import logging
import httpx
from typing import Optional

from scribe.note_template import NoteTemplate
from scribe.summary import (
    SummarizationError,
    build_summary_model,
    build_summary_prompt,
    normalize_summary,
)

logger = logging.getLogger("scribe.ollama")

DEFAULT_HOST = "http://localhost:11434"
DEFAULT_MODEL = "llama3.2"
REQUEST_TIMEOUT = 120.0


class OllamaClient:
    def __init__(self, base_url: str = DEFAULT_HOST, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport)

    async def summarize_transcript(
        self,
        transcript: str,
        template: NoteTemplate,
        model: str = DEFAULT_MODEL,
        output_language: Optional[str] = None,
    ) -> dict[str, str]:
        """Summarize a transcript into one entry per template section.

        The section schema is sent as Ollama's `format` so the model is
        constrained to JSON; replies are still normalized because smaller
        models add chatter or wrap the object in `parameters` / `arguments`.

        Args:
            transcript:      Raw transcript text.
            template:        Note template whose sections should be filled.
            model:           Ollama model tag, e.g. ``"llama3.2"``.
            output_language: Language for the notes, or None.

        Returns:
            Summary record with ``fileTitle`` and every section key present.

        Raises:
            SummarizationError: With a user-facing hint on any failure.
        """
        schema = build_summary_model(template).model_json_schema()
        messages = [{"role": "system", "content": build_summary_prompt(transcript, output_language)}]
        if output_language:
            messages.append({"role": "system", "content": f"Please respond in {output_language} language"})

        try:
            async with self._client() as client:
                res = await client.post(
                    f"{self.base_url}/api/chat",
                    json={
                        "model": model,
                        "messages": messages,
                        "format": schema,
                        "stream": False,
                        "options": {"temperature": 0},
                    },
                    timeout=REQUEST_TIMEOUT,
                )
                res.raise_for_status()
                data = res.json()
        except httpx.ConnectError as e:
            logger.error(f"[Ollama] Connection refused at {self.base_url}: {e}")
            raise SummarizationError(
                f"Cannot connect to Ollama at {self.base_url}. Is Ollama running? Start with: ollama serve"
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"[Ollama] Timeout after {REQUEST_TIMEOUT:.0f}s: {type(e).__name__}")
            raise SummarizationError(
                f"Ollama did not answer within {REQUEST_TIMEOUT:.0f}s. Try a smaller model or a shorter recording."
            ) from e
        except httpx.HTTPStatusError as e:
            body = e.response.text[:200]
            logger.error(f"[Ollama] HTTP {e.response.status_code}: {body}")
            raise self._status_error(e.response.status_code, body, model) from e
        except httpx.HTTPError as e:
            logger.error(f"[Ollama] {type(e).__name__}: {e}")
            raise SummarizationError(
                f"Connection error to Ollama at {self.base_url}. Check if the server is running and accessible."
            ) from e
        except ValueError as e:
            logger.error(f"[Ollama] Response body is not JSON: {e}")
            raise SummarizationError("Invalid response format from Ollama") from e

        content = (data.get("message") or {}).get("content", "")
        summary = normalize_summary(content, template)
        logger.info(f"[Ollama] Summary ready: title='{summary['fileTitle']}', fields={len(summary)}")
        return summary

    @staticmethod
    def _status_error(status_code: int, body: str, model: str) -> SummarizationError:
        lowered = body.lower()
        if status_code == 404 or ("model" in lowered and "not found" in lowered):
            return SummarizationError(f'Ollama model "{model}" not found. Pull it with: ollama pull {model}')
        if "does not support" in lowered:
            return SummarizationError(
                f'Model "{model}" does not support structured output. Try: qwen3:8b, llama3.1:8b, or deepseek-r1:8b'
            )
        return SummarizationError(f"Ollama summarization error: HTTP {status_code}: {body}")
