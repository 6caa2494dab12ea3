import logging
import os
import re
from pathlib import Path

logger = logging.getLogger("scribe.notes")

HISTORY_DIRNAME = "_history"
AUDIO_EXTENSIONS = {".mp3", ".m4a", ".wav", ".webm", ".ogg", ".flac", ".mp4"}

_SNAPSHOT_NAME = re.compile(r"^v(\d+)\.md$")


class NoteManager:
    """
    Reads and writes notes inside a vault directory.

    Storage Layout:
        <vault>/
        ├── <name>.md           # Current note content
        ├── <audio files>       # Recordings referenced by notes
        └── _history/
            └── <name>/
                ├── v1.md       # Content before the first overwrite
                ├── v2.md       # Content before the second overwrite
                └── ...

    Notes are always written whole. The previous content is snapshotted first,
    so a bad summary can be rolled back by hand.
    """

    def __init__(self, vault_dir: str = "vault"):
        self.vault_dir = Path(vault_dir)
        self.history_dir = self.vault_dir / HISTORY_DIRNAME

    @staticmethod
    def _safe_name(name: str) -> str:
        """Sanitize a note name to prevent path traversal."""
        if name.endswith(".md"):
            name = name[:-3]
        safe_name = "".join([c for c in name if c.isalnum() or c in ("-", "_", " ")]).strip()
        return safe_name or "default"

    def _note_path(self, name: str) -> Path:
        return self.vault_dir / f"{self._safe_name(name)}.md"

    def _get_history_dir(self, name: str) -> Path:
        return self.history_dir / self._safe_name(name)

    def note_exists(self, name: str) -> bool:
        return self._note_path(name).exists()

    def free_name(self, name: str) -> str:
        """Sanitized `name`, or `"<name> N"` with the lowest N not already taken."""
        base = self._safe_name(name)
        candidate = base
        counter = 1
        while self.note_exists(candidate):
            candidate = f"{base} {counter}"
            counter += 1
        return candidate

    def get_note(self, name: str) -> str:
        """Get the current note content, or "" if the note does not exist."""
        path = self._note_path(name)
        if not path.exists():
            return ""
        return path.read_text(encoding="utf-8")

    def save_note(self, name: str, content: str) -> str:
        """
        Replace a note's content.

        The previous content (if any and if different) is stored as the next
        history snapshot, then the new content is written to a temp file and
        moved over the note so readers never see a partial file.

        Returns:
            The sanitized note name the content was saved under.
        """
        safe_name = self._safe_name(name)
        path = self._note_path(safe_name)
        self.vault_dir.mkdir(parents=True, exist_ok=True)

        if path.exists():
            old_content = path.read_text(encoding="utf-8")
            if old_content == content:
                return safe_name
            version = self._store_snapshot(safe_name, old_content)
            logger.info(f"Snapshot of '{safe_name}' stored as v{version}")

        temp_path = path.with_name(f"{path.name}.tmp")
        temp_path.write_text(content, encoding="utf-8")
        os.replace(temp_path, path)
        return safe_name

    def _store_snapshot(self, name: str, content: str) -> int:
        history_dir = self._get_history_dir(name)
        history_dir.mkdir(parents=True, exist_ok=True)
        version = max(self.list_snapshots(name), default=0) + 1
        (history_dir / f"v{version}.md").write_text(content, encoding="utf-8")
        return version

    def list_snapshots(self, name: str) -> list[int]:
        """List stored snapshot versions for a note, oldest first."""
        history_dir = self._get_history_dir(name)
        if not history_dir.exists():
            return []
        versions = []
        for path in history_dir.iterdir():
            match = _SNAPSHOT_NAME.match(path.name)
            if match:
                versions.append(int(match.group(1)))
        return sorted(versions)

    def list_notes(self) -> list[str]:
        if not self.vault_dir.exists():
            return []
        return sorted(path.stem for path in self.vault_dir.glob("*.md"))

    def list_audio_files(self) -> list[str]:
        if not self.vault_dir.exists():
            return []
        return sorted(
            path.name for path in self.vault_dir.iterdir()
            if path.is_file() and path.suffix.lower() in AUDIO_EXTENSIONS
        )

    def read_audio(self, filename: str) -> bytes:
        """
        Read an audio file from the vault root.

        Raises:
            FileNotFoundError: If the file is missing, is not audio, or lies
                outside the vault.
        """
        path = self.vault_dir / Path(filename).name
        if path.suffix.lower() not in AUDIO_EXTENSIONS or not path.is_file():
            raise FileNotFoundError(f"Audio file '{filename}' not found in vault.")
        return path.read_bytes()
