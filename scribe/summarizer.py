from scribe.gemini_client import GeminiClient
from scribe.note_template import NoteTemplate
from scribe.ollama_client import OllamaClient
from scribe.settings import ScribeSettings
from scribe.summary import SummarizationError


async def summarize_transcript(
    transcript: str,
    template: NoteTemplate,
    settings: ScribeSettings,
) -> dict[str, str]:
    """Route a summarization request to the configured provider."""
    if settings.llm_provider == "ollama":
        client = OllamaClient(settings.ollama_host)
        return await client.summarize_transcript(
            transcript, template, model=settings.ollama_model, output_language=settings.output_language
        )
    if settings.llm_provider == "gemini":
        client = GeminiClient(settings.gemini_api_key)
        return await client.summarize_transcript(
            transcript, template, model=settings.gemini_model, output_language=settings.output_language
        )
    raise SummarizationError(f"Unknown LLM provider '{settings.llm_provider}'")
