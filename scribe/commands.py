"""
Note commands: the steps behind "Re-summarize existing transcript" and
"Select and transcribe audio file".

Each command reads the note fresh, does its provider calls, and writes the
whole note back once at the end. Nothing is written when a step fails.
"""

import logging
from pathlib import Path
from typing import Optional

from scribe import summarizer
from scribe.note_manager import NoteManager
from scribe.note_template import FILE_TITLE_KEY, NoteTemplate
from scribe.settings import ScribeSettings
from scribe.transcript_parser import (
    MissingTranscriptError,
    extract_transcript,
    reconstruct_note,
    render_note,
)
from scribe.whisper_asr_client import WhisperAsrClient

logger = logging.getLogger("scribe")


async def resummarize_note(
    notes: NoteManager,
    name: str,
    template: NoteTemplate,
    settings: ScribeSettings,
) -> tuple[str, str]:
    """
    Regenerate every summary section of an existing note.

    Returns:
        (saved note name, new note content)

    Raises:
        FileNotFoundError:      The note does not exist.
        MissingTranscriptError: The note has no `# Audio` transcript, or it is empty.
        SummarizationError:     The provider failed.
    """
    if not notes.note_exists(name):
        raise FileNotFoundError(f"Note '{name}' not found.")

    content = notes.get_note(name)
    transcript = extract_transcript(content)
    if not transcript:
        raise MissingTranscriptError(f"Could not find transcript in note '{name}'")

    logger.info(f"Re-summarizing '{name}': {len(transcript)} chars with template '{template.name}'")
    summary = await summarizer.summarize_transcript(transcript, template, settings)

    updated = reconstruct_note(content, summary, template)
    saved_name = notes.save_note(name, updated)
    return saved_name, updated


def build_new_note(
    transcript: str,
    template: NoteTemplate,
    summary: Optional[dict] = None,
    audio_file: Optional[str] = None,
) -> str:
    """
    Lay out a freshly transcribed note.

    Without a summary only the `# Audio` block is written, so the note can be
    summarized later with `resummarize_note`.
    """
    if summary is None:
        return render_note(transcript, {}, NoteTemplate(name=template.name), audio_embed=audio_file)
    return render_note(transcript, summary, template, audio_embed=audio_file)


async def transcribe_audio_file(
    notes: NoteManager,
    audio_file: str,
    template: NoteTemplate,
    settings: ScribeSettings,
    note_name: Optional[str] = None,
    summarize: bool = True,
    multi_speaker: Optional[bool] = None,
) -> tuple[str, str]:
    """
    Transcribe a vault audio file into a new note.

    The note is named `note_name` if given, else the summary's suggested
    title, else the audio file's stem. A suggested name never replaces an
    existing note: a numbered suffix is added instead. `multi_speaker`
    overrides the configured diarization mode.

    Returns:
        (saved note name, note content)

    Raises:
        FileNotFoundError:  The audio file is not in the vault.
        TranscriptionError: Whisper-ASR failed.
        SummarizationError: The provider failed.
    """
    audio = notes.read_audio(audio_file)

    asr = WhisperAsrClient(settings.whisper_asr_url)
    if multi_speaker is None:
        multi_speaker = settings.multi_speaker
    if multi_speaker:
        transcript = await asr.transcribe_with_diarization(
            audio,
            audio_file,
            min_speakers=settings.min_speakers,
            max_speakers=settings.max_speakers,
        )
    else:
        transcript = await asr.transcribe(audio, audio_file, language=settings.audio_language)

    summary = None
    if summarize:
        summary = await summarizer.summarize_transcript(transcript, template, settings)

    content = build_new_note(transcript, template, summary=summary, audio_file=audio_file)
    if note_name:
        name = note_name
    else:
        name = notes.free_name((summary or {}).get(FILE_TITLE_KEY) or Path(audio_file).stem)
    saved_name = notes.save_note(name, content)
    logger.info(f"Transcribed '{audio_file}' into note '{saved_name}'")
    return saved_name, content
