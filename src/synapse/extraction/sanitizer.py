from __future__ import annotations

import re

# {"id": "e7": {...}} -> {"id": "e7", ...}
_MALFORMED_ENTITY = re.compile(r'\{\s*"id":\s*"(e\d+)"\s*:\s*(\{[\s\S]+?\})\s*\}')


def _splice(match: re.Match) -> str:
    entity_id = match.group(1)
    inner = match.group(2)[1:-1]
    return f'{{"id": "{entity_id}", {inner}}}'


def sanitize_json_string(text: str) -> str:
    """
    Repairs entities the model serialized with the id key misplaced.

    Only the ``{"id": "e<N>": {...fields...}}`` shape is rewritten; all
    other text passes through unchanged. This is a textual fix, not a
    JSON repair utility: an inner object that itself nests braces is not
    handled.
    """
    return _MALFORMED_ENTITY.sub(_splice, text)
