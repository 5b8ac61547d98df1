"""
Presentation helpers shared by the CLI, the Streamlit demo and the PDF export.

Assistant replies use a light markup: each line is its own paragraph and
`**...**` marks an emphasized span.
"""

import re
from datetime import datetime
from typing import List, NamedTuple

from rich.text import Text

_BOLD_PATTERN = re.compile(r"(\*\*.*?\*\*)")


class Span(NamedTuple):
    text: str
    bold: bool = False


def split_emphasis(line: str) -> List[Span]:
    """Split one line into plain and bold spans. Empty spans are dropped."""
    spans: List[Span] = []
    for part in _BOLD_PATTERN.split(line):
        if not part:
            continue
        if len(part) >= 4 and part.startswith("**") and part.endswith("**"):
            inner = part[2:-2]
            if inner:
                spans.append(Span(inner, True))
        else:
            spans.append(Span(part, False))
    return spans


def format_response(text: str) -> List[List[Span]]:
    """One list of spans per line; line breaks are preserved as paragraph breaks."""
    return [split_emphasis(line) for line in text.split("\n")]


def strip_emphasis(text: str) -> str:
    """Plain text with the emphasis markers removed."""
    return "\n".join("".join(span.text for span in line) for line in format_response(text))


def to_rich_text(text: str) -> Text:
    """Render a reply as rich Text with bold spans."""
    out = Text()
    lines = format_response(text)
    for i, line in enumerate(lines):
        for span in line:
            out.append(span.text, style="bold" if span.bold else None)
        if i < len(lines) - 1:
            out.append("\n")
    return out


def format_timestamp(value: datetime) -> str:
    """e.g. 3/14/2025, 9:05:12 AM"""
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{value.month}/{value.day}/{value.year}, {hour}:{value.minute:02d}:{value.second:02d} {suffix}"
