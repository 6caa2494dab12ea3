"""
Transcript extraction and note reconstruction.

A transcript note looks like this:

    ---
    tags: [meeting]
    ---
    # Audio
    ![[recording.webm]]
    <transcript text>

    ## Summary
    <generated>

    ## Insights
    <generated>

Both functions here are pure string transformations. They never touch the
filesystem, never log, and never retry; callers decide what to tell the user.
"""

import re
from typing import Mapping, Optional

from scribe.note_template import NoteTemplate, SectionSpec

# First line "---", then the shortest run of lines up to a line that is
# exactly "---" and is followed by a newline.
FRONTMATTER_PATTERN = re.compile(r"\A---\n(?:.*?\n)??---\n", re.DOTALL)

# Level-1 heading whose text starts with the word "Audio":
# "# Audio", "# Audio in progress". "## Audio" and "# Audiobook" do not match.
AUDIO_HEADING_PATTERN = re.compile(r"^#[ \t]+Audio\b[^\n]*$", re.MULTILINE)

# The transcript region ends at the first line starting with "##".
SECTION_BOUNDARY_PATTERN = re.compile(r"^##", re.MULTILINE)

# A line holding nothing but a single embed, e.g. "![[recording.mp3]]".
EMBED_LINE_PATTERN = re.compile(r"!\[\[[^\]]*\]\]")


class MissingTranscriptError(ValueError):
    """Raised when a note has no `# Audio` transcript to rebuild around."""


def split_frontmatter(document: str) -> tuple[str, str]:
    """
    Split a document into (frontmatter, body).

    The frontmatter is returned verbatim, closing fence and newline included.
    An unclosed fence is treated as no frontmatter at all.
    """
    match = FRONTMATTER_PATTERN.match(document)
    if not match:
        return "", document
    return match.group(0), document[match.end():]


def _is_embed_line(line: str) -> bool:
    return EMBED_LINE_PATTERN.fullmatch(line.strip()) is not None


def extract_transcript(document: str) -> Optional[str]:
    """
    Return the transcript stored under the note's `# Audio` heading.

    Args:
        document: Full note text, frontmatter included.

    Returns:
        The stripped transcript ("" when the heading has no body), or None when
        the note has no Audio heading at all.
    """
    _, body = split_frontmatter(document)

    heading = AUDIO_HEADING_PATTERN.search(body)
    if not heading:
        return None

    region = body[heading.end():]
    boundary = SECTION_BOUNDARY_PATTERN.search(region)
    if boundary:
        region = region[:boundary.start()]

    lines = [line for line in region.split("\n") if not _is_embed_line(line)]
    return "\n".join(lines).strip()


def _render_section(section: SectionSpec, value: Optional[str]) -> list[str]:
    lines = [f"## {section.header}"]
    if section.output_prefix:
        lines.append(section.output_prefix)
    if value:
        lines.append(value)
    if section.output_postfix:
        lines.append(section.output_postfix)
    lines.append("")
    return lines


def render_note(
    transcript: str,
    summary: Mapping[str, Optional[str]],
    template: NoteTemplate,
    frontmatter: str = "",
    audio_embed: Optional[str] = None,
) -> str:
    """
    Lay out a note from its parts.

    Sections follow template order. An optional section whose value is empty
    or missing is left out; a mandatory one keeps its heading with no body.
    The `fileTitle` entry of the summary is never rendered.
    """
    lines = ["# Audio"]
    if audio_embed:
        lines.append(f"![[{audio_embed}]]")
    lines += [transcript, ""]

    for section in template.sections:
        value = summary.get(section.key)
        if section.optional and not value:
            continue
        lines += _render_section(section, value)

    return frontmatter + ("\n".join(lines)).rstrip() + "\n"


def reconstruct_note(
    document: str,
    summary: Mapping[str, Optional[str]],
    template: NoteTemplate,
) -> str:
    """
    Rebuild a note around its existing transcript with a fresh summary.

    The frontmatter is kept byte-for-byte and the transcript is re-extracted
    from the current text; every previous summary section is replaced.

    Raises:
        MissingTranscriptError: If the note has no Audio heading. Nothing is
            produced in that case, so the caller has nothing to write back.
    """
    frontmatter, _ = split_frontmatter(document)

    transcript = extract_transcript(document)
    if transcript is None:
        raise MissingTranscriptError("Could not extract transcript from original note")

    return render_note(transcript, summary, template, frontmatter=frontmatter)
