from __future__ import annotations

import re

_NEWLINES = re.compile(r"\n+")


def split_paragraphs(text: str) -> list[str]:
    """One paragraph per line; blank lines and surrounding whitespace are dropped."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return [p.strip() for p in _NEWLINES.split(text) if p.strip()]
