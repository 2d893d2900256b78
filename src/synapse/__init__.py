"""
synapse
=======

Turns text, questions, documents, images and audio/video into
AI-generated knowledge graphs, mind maps and flowcharts.

Core idea:
- Ask the model for a strict JSON graph, then recover that graph from
  whatever the model actually returned.

Public API:
- GraphExtractor / extract_graph_data
- sanitize_json_string
- GraphGenerator
- OTPService
"""

from synapse.extraction import GraphExtractor, extract_graph_data, sanitize_json_string
from synapse.graph import GraphResult
from synapse.llm import GraphGenerator
from synapse.verification import OTPService

__all__ = [
    "GraphExtractor",
    "extract_graph_data",
    "sanitize_json_string",
    "GraphResult",
    "GraphGenerator",
    "OTPService",
]

__version__ = "0.1.0"
