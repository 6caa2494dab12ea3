"""
Shared pieces of transcript summarization.

Provides:
- build_summary_prompt: the instruction text every provider receives.
- build_summary_model: a pydantic model describing the structured reply for a
  given note template (one field per section plus `fileTitle`).
- normalize_summary: coerces a loosely-shaped provider reply into a summary
  record the reconstructor can render.
"""

import json
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, create_model

from scribe.note_template import FILE_TITLE_KEY, NoteTemplate

DEFAULT_FILE_TITLE = "Untitled Note"

FILE_TITLE_DESCRIPTION = (
    "A suggested title for the note. Ensure that it is in the proper format for "
    "a file on mac, windows and linux, do not include any special characters"
)

# Envelopes some models wrap their structured reply in.
_ENVELOPE_KEYS = ("parameters", "arguments")

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class SummarizationError(RuntimeError):
    """A summarization provider failed; the message is safe to show to users."""


def build_summary_prompt(transcript: str, output_language: Optional[str] = None) -> str:
    """
    Construct the prompt sent with every summarization request.

    Args:
        transcript:      Raw transcript text.
        output_language: Language the notes should be written in, or None to
                         leave it to the model.
    """
    prompt_parts = [
        'You are "Scribe", an expert note-making AI. You specialize in the Linking Your Thinking (LYT) strategy.',
        "The following is the transcription generated from a recording of someone talking aloud "
        "or multiple people in a conversation.",
        "There may be a lot of random things said given fluidity of conversation or thought process "
        "and the microphone's ability to pick up all audio.",
        "",
        'The transcription may address you by calling you "Scribe" or saying "Hey Scribe" and asking '
        'you a question, they also may just allude to you by asking "you" to do something.',
        "Give them the answers to these questions.",
        "",
        "Give me notes in Markdown on what was said, they should be:",
        "- Easy to understand",
        "- Succinct",
        "- Clean",
        "- Logical",
        "- Insightful",
        "",
        "Each section will be nested under a level-2 heading, feel free to nest headings underneath it.",
        "RULES:",
        "- Do not include escaped new line characters.",
        '- Do not mention "the speaker" anywhere in your response.',
        "- The notes should be written as if I were writing them.",
        "- Reply ONLY with a JSON object matching the provided schema. "
        'If you cannot generate content for a field, use an empty string "" but include the field.',
    ]

    if output_language:
        prompt_parts += ["", f"IMPORTANT: Please respond in {output_language} language."]

    prompt_parts += [
        "",
        "The following is the transcribed audio:",
        "<transcript>",
        transcript,
        "</transcript>",
    ]
    return "\n".join(prompt_parts)


def build_summary_model(template: NoteTemplate) -> type[BaseModel]:
    """
    Build the structured-output schema for a template.

    `fileTitle` is always required. Mandatory sections are required strings,
    optional sections may be null.
    """
    fields: dict[str, Any] = {
        FILE_TITLE_KEY: (str, Field(..., description=FILE_TITLE_DESCRIPTION)),
    }
    for section in template.sections:
        if section.optional:
            fields[section.key] = (Optional[str], Field(default=None, description=section.instructions))
        else:
            fields[section.key] = (str, Field(..., description=section.instructions))

    return create_model(
        "TranscriptSummary",
        __config__=ConfigDict(protected_namespaces=()),
        **fields,
    )


def _parse_reply(raw: Any) -> dict:
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        raise SummarizationError(f"Invalid response format from model: {type(raw).__name__}")

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        # Chatty models wrap the JSON in explanations; keep the outermost object.
        match = _JSON_OBJECT.search(raw)
        if not match:
            raise SummarizationError(
                f"Model returned text without valid JSON. Response: {raw[:200]}"
            )
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise SummarizationError(
                "Model returned text instead of JSON. Try a different model or check the response format."
            ) from exc

    if not isinstance(parsed, dict):
        raise SummarizationError("Model returned JSON that is not an object.")
    return parsed


def normalize_summary(raw: Any, template: NoteTemplate) -> dict[str, str]:
    """
    Coerce a provider reply into a complete summary record.

    Accepts a dict or a JSON string (optionally surrounded by other text),
    unwraps `parameters` / `arguments` envelopes, defaults `fileTitle`, and
    fills every template section with a string ("" when missing or null).

    Raises:
        SummarizationError: If no JSON object can be recovered.
    """
    result = _parse_reply(raw)

    for envelope in _ENVELOPE_KEYS:
        if isinstance(result.get(envelope), dict):
            result = result[envelope]
            break

    summary: dict[str, str] = {}
    for key, value in result.items():
        if value is None:
            continue
        summary[key] = value if isinstance(value, str) else json.dumps(value)

    summary[FILE_TITLE_KEY] = summary.get(FILE_TITLE_KEY) or DEFAULT_FILE_TITLE
    for key in template.keys():
        summary.setdefault(key, "")
    return summary
