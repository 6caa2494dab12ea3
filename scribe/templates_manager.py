import logging
from pathlib import Path
from typing import Dict, List, Optional
import yaml
from pydantic import ValidationError

from scribe.note_template import DEFAULT_TEMPLATE, NoteTemplate

logger = logging.getLogger("scribe.templates")


class TemplatesManager:
    """
    Loads note templates from a configuration directory.

    Each `*.yaml` / `*.yml` file holds one template:

        name: meeting
        sections:
          - header: Summary
            instructions: What was decided
          - header: Action Items
            instructions: Who does what, by when
            optional: true

    `name` defaults to the file stem. The built-in default template is always
    available under "default" unless a file overrides it.
    """

    def __init__(self, templates_dir: str = "templates"):
        self.templates_dir = Path(templates_dir)
        self._cache: Dict[str, NoteTemplate] = {DEFAULT_TEMPLATE.name: DEFAULT_TEMPLATE}

    def load_all(self) -> None:
        """
        Reloads all templates from the configured directory.
        Malformed files are logged and skipped.
        """
        self._cache = {DEFAULT_TEMPLATE.name: DEFAULT_TEMPLATE}
        if not self.templates_dir.exists():
            logger.info(f"Templates directory '{self.templates_dir}' not found, using built-in default only.")
            return

        paths = sorted(self.templates_dir.glob("*.yaml")) + sorted(self.templates_dir.glob("*.yml"))
        for path in paths:
            try:
                data = yaml.safe_load(path.read_text(encoding="utf-8"))
                if not isinstance(data, dict):
                    logger.warning(f"Skipping template {path}: expected a mapping")
                    continue
                data.setdefault("name", path.stem)
                template = NoteTemplate.model_validate(data)
            except (OSError, yaml.YAMLError, ValidationError) as e:
                logger.warning(f"Failed to load template {path}: {e}")
                continue
            self._cache[template.name] = template

    def get_template(self, name: str) -> Optional[NoteTemplate]:
        """
        Fetch a template by its `name`.
        """
        return self._cache.get(name)

    def list_templates(self) -> List[NoteTemplate]:
        """
        Return all loaded templates.
        """
        return list(self._cache.values())
