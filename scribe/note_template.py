from pydantic import BaseModel, ConfigDict, Field, AliasChoices, model_validator
from typing import Optional

from scribe.text_util import convert_to_safe_json_key

FILE_TITLE_KEY = "fileTitle"


class SectionSpec(BaseModel):
    """
    One generated section of a note.

    Accepts both the snake_case field names and the camelCase names used by
    exported plugin settings (e.g. `sectionHeader`, `isSectionOptional`).
    """
    model_config = ConfigDict(populate_by_name=True)

    header: str = Field(
        ...,
        validation_alias=AliasChoices("header", "sectionHeader"),
        description="Display heading, rendered as `## <header>`",
    )
    instructions: str = Field(
        default="",
        validation_alias=AliasChoices("instructions", "sectionInstructions"),
        description="What the language model should write in this section",
    )
    optional: bool = Field(
        default=False,
        validation_alias=AliasChoices("optional", "isSectionOptional"),
        description="Omit the section entirely when the model returns nothing",
    )
    output_prefix: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("output_prefix", "outputPrefix", "sectionOutputPrefix"),
        description="Line written before the generated text, e.g. a code fence",
    )
    output_postfix: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("output_postfix", "outputPostfix", "sectionOutputPostfix"),
        description="Line written after the generated text",
    )

    @property
    def key(self) -> str:
        return convert_to_safe_json_key(self.header)


class NoteTemplate(BaseModel):
    """
    Ordered list of sections the summarizer fills and the reconstructor renders.

    Section keys must be non-empty and unique within the template. Keys are
    lowercase, so they can never shadow the reserved `fileTitle` key.
    """
    name: str = Field(default="default", description="Template identifier")
    sections: list[SectionSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_keys(self):
        seen: dict[str, str] = {}
        for section in self.sections:
            key = section.key
            if not key:
                raise ValueError(f"Section header '{section.header}' has no letters or digits")
            if key in seen:
                raise ValueError(
                    f"Section headers '{seen[key]}' and '{section.header}' both map to key '{key}'"
                )
            seen[key] = section.header
        return self

    def keys(self) -> list[str]:
        return [section.key for section in self.sections]


DEFAULT_TEMPLATE = NoteTemplate(
    name="default",
    sections=[
        SectionSpec(
            header="Summary",
            instructions=(
                "A concise summary of what was said. Use markdown bullet points "
                "and sub-headings where they help readability."
            ),
        ),
        SectionSpec(
            header="Insights",
            instructions=(
                "Insights that you gained from the transcript. Brainstorm "
                "connections to other ideas and point out open questions."
            ),
        ),
        SectionSpec(
            header="Mermaid Chart",
            instructions=(
                "A valid mermaid chart that shows a concept map of the "
                "transcript. Output only the chart body, without code fences."
            ),
            optional=True,
            output_prefix="```mermaid",
            output_postfix="```",
        ),
    ],
)
