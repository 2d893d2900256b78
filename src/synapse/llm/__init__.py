"""
Generation subsystem for synapse.

This module performs:
- prompt construction per diagram type and input mode
- the generative model call (pluggable backend)
- extraction of the graph from the completion
"""

from synapse.llm.generator import (
    GenerationBackend,
    GenerationRequest,
    GraphGenerator,
    MediaPart,
)
from synapse.llm.prompts import build_prompt

__all__ = [
    "GenerationBackend",
    "GenerationRequest",
    "GraphGenerator",
    "MediaPart",
    "build_prompt",
]
