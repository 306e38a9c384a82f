"""
Whitespace normalisation applied to every extracted body.
"""
from __future__ import annotations

import re

_HORIZONTAL_WS = re.compile(r"[^\S\n]+")
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


def clean_content(text: str) -> str:
    """
    Collapse horizontal whitespace, trim every line and keep at most one blank
    line between paragraphs. Running it twice gives the same result.
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_WS.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _EXTRA_BLANK_LINES.sub("\n\n", text)
    return text.strip()
