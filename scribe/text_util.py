import re

# Runs of anything that is not a letter or digit. `\W` is Unicode aware, and
# the underscore is folded in so it collapses like any other separator.
_SEPARATOR_RUN = re.compile(r"[\W_]+")


def convert_to_safe_json_key(header: str) -> str:
    """
    Turn a section header into the key used in summary records.

    Rules, applied in order:
        1. Lowercase the header.
        2. Replace each run of non-alphanumeric characters with a single "_".
        3. Strip leading and trailing "_".
        4. Prefix "section_" when the result starts with a digit, so the key
           is also a valid Python identifier.

    The transform is stable but lossy: "Key Points!" and "Key-Points" both
    become "key_points". Templates reject headers that collide.

    Example:
        >>> convert_to_safe_json_key("Mermaid Chart")
        'mermaid_chart'
        >>> convert_to_safe_json_key("2024 Goals")
        'section_2024_goals'
    """
    key = _SEPARATOR_RUN.sub("_", header.lower()).strip("_")
    if key[:1].isdigit():
        key = f"section_{key}"
    return key
