"""
Client for a self-hosted Whisper-ASR webservice
(https://github.com/ahmetoner/whisper-asr-webservice).

Start one with:

    docker run -d -p 9000:9000 onerahmet/openai-whisper-asr-webservice:latest
"""

import logging
import mimetypes
import httpx
from typing import Optional

from scribe.settings import AUTO_LANGUAGE

logger = logging.getLogger("scribe.whisper")

DEFAULT_URL = "http://localhost:9000"
REQUEST_TIMEOUT = 600.0

SERVER_HINT = (
    "Whisper-ASR server not found. Is Docker running?\n\n"
    "To start the server, run:\n"
    "docker run -d -p 9000:9000 onerahmet/openai-whisper-asr-webservice:latest"
)


class TranscriptionError(RuntimeError):
    """The transcription service failed; the message is safe to show to users."""


class WhisperAsrClient:
    def __init__(self, base_url: str = DEFAULT_URL, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def transcribe(self, audio: bytes, filename: str, language: str = AUTO_LANGUAGE) -> str:
        """
        Transcribe one audio file.

        Args:
            audio:    Raw audio bytes.
            filename: Original file name, used for the upload's content type.
            language: ISO language code, or "auto" to let Whisper detect it.

        Returns:
            The transcript text.

        Raises:
            TranscriptionError: Server unreachable or request rejected.
        """
        params = {"output": "json", "task": "transcribe", "encode": "true"}
        if language and language != AUTO_LANGUAGE:
            params["language"] = language

        logger.info(f"[Whisper] Sending {filename} ({len(audio)} bytes, language={language})")
        return await self._post_asr(audio, filename, params, action="transcription")

    async def transcribe_with_diarization(
        self,
        audio: bytes,
        filename: str,
        min_speakers: Optional[int] = None,
        max_speakers: Optional[int] = None,
    ) -> str:
        """
        Transcribe with speaker labels. Requires the WhisperX engine on the server.
        """
        params = {
            "output": "json",
            "task": "transcribe",
            "encode": "true",
            "word_timestamps": "true",
            "diarize": "true",
        }
        if min_speakers is not None:
            params["min_speakers"] = str(min_speakers)
        if max_speakers is not None:
            params["max_speakers"] = str(max_speakers)

        logger.info(f"[Whisper] Sending {filename} for diarization (speakers {min_speakers}-{max_speakers})")
        return await self._post_asr(audio, filename, params, action="diarization")

    async def _post_asr(self, audio: bytes, filename: str, params: dict, action: str) -> str:
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                res = await client.post(
                    f"{self.base_url}/asr",
                    params=params,
                    files={"audio_file": (filename, audio, content_type)},
                    timeout=REQUEST_TIMEOUT,
                )
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.error(f"[Whisper] Connection error: {e}")
            raise TranscriptionError(SERVER_HINT) from e
        except httpx.HTTPError as e:
            logger.error(f"[Whisper] {action} failed: {type(e).__name__}: {e}")
            raise TranscriptionError(f"Whisper-ASR {action} failed - {type(e).__name__}: {e}") from e

        if res.is_error:
            error_message = f"Whisper-ASR request failed: {res.status_code} - {res.text[:200]}"
            logger.error(f"[Whisper] {error_message}")
            raise TranscriptionError(error_message)

        try:
            text = res.json()["text"]
        except (ValueError, KeyError) as e:
            raise TranscriptionError(f"Whisper-ASR returned an unexpected response: {res.text[:200]}") from e

        logger.info(f"[Whisper] {action.capitalize()} complete: {len(text)} chars")
        return text.strip()
