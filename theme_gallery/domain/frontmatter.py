"""Parser for the flat front-matter block at the head of theme descriptors."""

import re
from typing import Dict


DELIMITER = "---"
BOM = "\ufeff"

_LINE_BREAK = re.compile(r"\r?\n")


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("\"", "'"):
        return value[1:-1]
    return value


def parse_frontmatter(text: str) -> Dict[str, str]:
    """
    Extract ``key: value`` pairs from the front-matter block of a document.

    Only flat single-line pairs are understood: no nesting, no multi-line
    values, no escapes. Documents that do not open with a ``---`` line
    yield an empty mapping.

    Args:
        text: Raw descriptor document

    Returns:
        Mapping of declared keys to string values
    """
    if text.startswith(BOM):
        text = text[1:]
    lines = _LINE_BREAK.split(text)
    if lines[0].strip() != DELIMITER:
        return {}

    data: Dict[str, str] = {}
    for line in lines[1:]:
        if line.strip() == DELIMITER:
            break
        key, sep, value = line.partition(":")
        if not sep:
            continue
        data[key.strip()] = _strip_quotes(value.strip())
    return data
