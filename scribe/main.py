import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Optional
from dotenv import load_dotenv

from scribe import commands
from scribe.note_manager import NoteManager
from scribe.note_template import NoteTemplate
from scribe.settings import get_settings
from scribe.summary import SummarizationError
from scribe.templates_manager import TemplatesManager
from scribe.transcript_parser import MissingTranscriptError, extract_transcript
from scribe.whisper_asr_client import TranscriptionError

# Load environment variables from .env file (GEMINI_API_KEY etc.)
load_dotenv()

# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("scribe")

settings = get_settings()
notes = NoteManager(settings.vault_dir)
templates = TemplatesManager(settings.templates_dir)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load note templates on startup."""
    templates.load_all()
    logger.info(f"Loaded {len(templates.list_templates())} note template(s), provider={settings.llm_provider}")
    yield


app = FastAPI(lifespan=lifespan)


class ResummarizeRequest(BaseModel):
    """Request to regenerate the summary sections of an existing note.

    Attributes:
        name:     Note name (file stem inside the vault).
        template: Template name; defaults to the configured active template.
    """
    name: str
    template: Optional[str] = None


class TranscribeRequest(BaseModel):
    """Request to transcribe an audio file from the vault into a new note.

    Attributes:
        audio_file: File name of the recording inside the vault.
        name:       Note name; defaults to the suggested title or the audio stem.
        template:   Template name; defaults to the configured active template.
        summarize:  When False, only the transcript is written.
        multi_speaker: Diarize speakers; defaults to the configured mode.
    """
    audio_file: str
    name: Optional[str] = None
    template: Optional[str] = None
    summarize: bool = True
    multi_speaker: Optional[bool] = None


def _resolve_template(name: Optional[str]) -> NoteTemplate:
    template_name = name or settings.active_template
    template = templates.get_template(template_name)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template '{template_name}' not found.")
    return template


# API Endpoints

@app.get("/api/notes")
async def list_notes():
    return {"notes": notes.list_notes()}


@app.get("/api/notes/{name}")
async def get_note(name: str):
    logger.info(f"FETCH Request: name='{name}'")
    if not notes.note_exists(name):
        logger.warning(f"Note '{name}' not found.")
        raise HTTPException(status_code=404, detail="Note not found")
    return {"content": notes.get_note(name)}


@app.get("/api/notes/{name}/transcript")
async def get_transcript(name: str):
    logger.info(f"TRANSCRIPT Request: name='{name}'")
    if not notes.note_exists(name):
        raise HTTPException(status_code=404, detail="Note not found")

    transcript = extract_transcript(notes.get_note(name))
    if transcript is None:
        raise HTTPException(status_code=404, detail="Could not find transcript in note")
    return {"transcript": transcript}


@app.get("/api/notes/{name}/history")
async def get_history(name: str):
    """List the snapshot versions stored before each overwrite of a note."""
    if not notes.note_exists(name):
        raise HTTPException(status_code=404, detail="Note not found")
    return {"versions": notes.list_snapshots(name)}


@app.post("/api/resummarize")
async def resummarize(req: ResummarizeRequest):
    """
    Re-summarize an existing transcript note.

    Steps:
        1. Resolve the template (404 if unknown).
        2. Read the note and extract its transcript (404 / 422).
        3. Summarize with the configured provider (502 on provider error).
        4. Rebuild the note and save it whole.
    """
    logger.info(f"RESUMMARIZE Request: name='{req.name}', template='{req.template}'")
    template = _resolve_template(req.template)

    try:
        name, content = await commands.resummarize_note(notes, req.name, template, settings)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except MissingTranscriptError as exc:
        logger.warning(f"RESUMMARIZE Failed: {exc}")
        raise HTTPException(status_code=422, detail=str(exc))
    except SummarizationError as exc:
        logger.error(f"RESUMMARIZE Failed for '{req.name}': {exc}")
        raise HTTPException(status_code=502, detail=str(exc))

    logger.info(f"RESUMMARIZE Success: '{name}' → {len(content)} chars")
    return {"name": name, "content": content}


@app.get("/api/audio")
async def list_audio():
    return {"audio_files": notes.list_audio_files()}


@app.post("/api/transcribe")
async def transcribe(req: TranscribeRequest):
    """
    Transcribe a vault audio file and write it as a new note.
    """
    logger.info(f"TRANSCRIBE Request: audio='{req.audio_file}', summarize={req.summarize}")
    template = _resolve_template(req.template)

    try:
        name, content = await commands.transcribe_audio_file(
            notes,
            req.audio_file,
            template,
            settings,
            note_name=req.name,
            summarize=req.summarize,
            multi_speaker=req.multi_speaker,
        )
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except (TranscriptionError, SummarizationError) as exc:
        logger.error(f"TRANSCRIBE Failed for '{req.audio_file}': {exc}")
        raise HTTPException(status_code=502, detail=str(exc))

    logger.info(f"TRANSCRIBE Success: '{req.audio_file}' → note '{name}'")
    return {"name": name, "content": content}


@app.get("/api/templates")
async def list_templates():
    return {
        "active": settings.active_template,
        "templates": [t.model_dump() for t in templates.list_templates()],
    }


@app.get("/api/templates/{name}")
async def get_template(name: str):
    return _resolve_template(name).model_dump()
