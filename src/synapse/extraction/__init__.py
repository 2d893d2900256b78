"""
Extraction subsystem for synapse.

Turns an unstructured model completion into validated graph data:
- payload location (fenced block or brace span)
- strict parsing with a single sanitized retry
- response envelope decoding
- relationship id synthesis
"""

from synapse.extraction.extractor import (
    GraphExtractor,
    extract_graph_data,
    extract_response,
    locate_json_candidate,
)
from synapse.extraction.sanitizer import sanitize_json_string
from synapse.extraction.envelope import decode_envelope

__all__ = [
    "GraphExtractor",
    "extract_graph_data",
    "extract_response",
    "locate_json_candidate",
    "sanitize_json_string",
    "decode_envelope",
]
