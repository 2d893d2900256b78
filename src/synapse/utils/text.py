from __future__ import annotations

import re
import hashlib


def normalize_text(text: str) -> str:
    """
    Case- and whitespace-insensitive form of ``text``.
    """
    return re.sub(r"\s+", " ", text.lower()).strip()


def content_key(*parts: object, length: int = 16) -> str:
    """
    Short sha256 digest over the normalized, ``|``-joined parts.

    Equal inputs always give equal keys, across processes and runs.
    """
    joined = "|".join(normalize_text(str(part)) for part in parts)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()[:length]


def strip_extension(filename: str, extensions: tuple[str, ...]) -> str:
    pattern = r"\.(" + "|".join(re.escape(ext) for ext in extensions) + r")$"
    return re.sub(pattern, "", filename, flags=re.IGNORECASE)
