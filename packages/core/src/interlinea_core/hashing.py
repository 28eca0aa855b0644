from __future__ import annotations

import json
from hashlib import sha256
from typing import Any, Iterable


def sha256_hex(data: bytes) -> str:
    return sha256(data).hexdigest()


def sha256_text(text: str) -> str:
    return sha256_hex(text.encode("utf-8"))


def sha256_parts(parts: Iterable[str]) -> str:
    """
    Hash the concatenation of `parts` without building the joined string.
    Equal to `sha256_text("".join(parts))`.
    """
    h = sha256()
    for part in parts:
        h.update(part.encode("utf-8"))
    return h.hexdigest()


def canonical_json(value: Any) -> str:
    # Compact, insertion-ordered, non-ASCII kept verbatim.
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
