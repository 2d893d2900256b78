from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List

from synapse.graph.graph_schema import ENTITY_TYPES_BY_DIAGRAM, DiagramType

if TYPE_CHECKING:
    from synapse.llm.generator import GenerationRequest


_GOALS: Dict[DiagramType, str] = {
    DiagramType.KNOWLEDGE_GRAPH: (
        "Your primary goal is to build a comprehensive and highly-connected knowledge graph "
        "from the provided inputs. Identify *all* plausible entities and the relationships "
        "that connect them. It is crucial to be exhaustive."
    ),
    DiagramType.MINDMAP: (
        "Your primary goal is to build a hierarchical mind map from the provided inputs. "
        "Pick one central topic, branch it into main subtopics and break those down into "
        "supporting concepts."
    ),
    DiagramType.FLOWCHART: (
        "Your primary goal is to build a flowchart of the process described by the provided "
        "inputs. Identify the start and end points, every step and every decision, and the "
        "order in which they happen."
    ),
}

_STRUCTURE_RULES: Dict[DiagramType, str] = {
    DiagramType.KNOWLEDGE_GRAPH: (
        "**Be Exhaustive:** Find every possible entity and relationship. It's better to include "
        "a minor relationship than to omit one. Aim for a dense, well-connected graph."
    ),
    DiagramType.MINDMAP: (
        "**Hierarchy:** Give every entity an integer \"level\" (0 for the single central topic, "
        "1 for main branches, 2 and deeper for details). Relationships point from parent to child."
    ),
    DiagramType.FLOWCHART: (
        "**Flow:** Give every relationship an integer \"order\" of execution. Relationships leaving "
        "a DECISION entity must carry a \"condition\" such as \"yes\" or \"no\"."
    ),
}

_EXAMPLES: Dict[DiagramType, str] = {
    DiagramType.KNOWLEDGE_GRAPH: """{
    "entities": [
      {"id": "e1", "label": "Synapse", "type": "PRODUCT", "sentiment": "positive"},
      {"id": "e2", "label": "Gemini API", "type": "PRODUCT", "sentiment": "neutral"},
      {"id": "e3", "label": "Knowledge Graph", "type": "CONCEPT", "sentiment": "neutral"},
      {"id": "e4", "label": "Frontend Developers", "type": "JOB_TITLE", "sentiment": "positive"}
    ],
    "relationships": [
      {"source": "e1", "target": "e2", "label": "USES", "sentiment": "neutral"},
      {"source": "e1", "target": "e3", "label": "GENERATES", "sentiment": "positive"},
      {"source": "e4", "target": "e1", "label": "DEVELOPS", "sentiment": "neutral"},
      {"source": "e2", "target": "e3", "label": "ENABLES", "sentiment": "positive"}
    ]
  }""",
    DiagramType.MINDMAP: """{
    "entities": [
      {"id": "e1", "label": "Renewable Energy", "type": "TOPIC", "sentiment": "positive", "level": 0},
      {"id": "e2", "label": "Solar Power", "type": "SUBTOPIC", "sentiment": "positive", "level": 1},
      {"id": "e3", "label": "Storage Costs", "type": "CONCEPT", "sentiment": "negative", "level": 2}
    ],
    "relationships": [
      {"source": "e1", "target": "e2", "label": "INCLUDES", "sentiment": "neutral"},
      {"source": "e2", "target": "e3", "label": "LIMITED_BY", "sentiment": "negative"}
    ]
  }""",
    DiagramType.FLOWCHART: """{
    "entities": [
      {"id": "e1", "label": "Start", "type": "START_END", "sentiment": "neutral"},
      {"id": "e2", "label": "Submit Form", "type": "PROCESS", "sentiment": "neutral"},
      {"id": "e3", "label": "Is Form Valid?", "type": "DECISION", "sentiment": "neutral"},
      {"id": "e4", "label": "End", "type": "START_END", "sentiment": "positive"}
    ],
    "relationships": [
      {"source": "e1", "target": "e2", "label": "NEXT", "sentiment": "neutral", "order": 1},
      {"source": "e2", "target": "e3", "label": "NEXT", "sentiment": "neutral", "order": 2},
      {"source": "e3", "target": "e4", "label": "VALID", "sentiment": "positive", "order": 3, "condition": "yes"},
      {"source": "e3", "target": "e2", "label": "RETRY", "sentiment": "negative", "order": 4, "condition": "no"}
    ]
  }""",
}


def _describe_inputs(request: "GenerationRequest") -> List[str]:
    lines: List[str] = []
    if request.text.strip():
        lines.append(f'Text: "{request.text.strip()}"')
    if request.question.strip():
        lines.append(f'Question: "{request.question.strip()}"')
    if request.image is not None:
        lines.append("An image file.")
    if request.image_url:
        lines.append(f"An image at this URL: {request.image_url}")
    if request.audio is not None:
        lines.append("An audio/video file.")
    if request.audio_url:
        lines.append(f"An audio/video at this URL: {request.audio_url}")
    if request.document_context:
        lines.append("A document:\n" + request.document_context)
    return lines


def build_prompt(request: "GenerationRequest") -> str:
    """
    Builds the instruction text for one generation request.

    Question mode asks for ``{"answer", "graph"}``; every other request
    asks for ``{"graph"}`` alone. The allowed entity types are the closed
    set of the requested diagram type.
    """
    diagram = request.diagram_type
    allowed_types = ", ".join(t.value for t in ENTITY_TYPES_BY_DIAGRAM[diagram])
    example = _EXAMPLES[diagram]

    if request.is_question:
        output_rule = (
            "**Strict JSON Output:** Return the output *only* as a single JSON object with exactly "
            "two top-level keys: \"answer\" (a concise, direct answer to the question as a string) "
            "and \"graph\" (the graph that supports the answer). Do not include any other text, "
            "comments, or formatting."
        )
        structure = f'{{\n  "answer": "...",\n  "graph": {example}\n}}'
    else:
        output_rule = (
            "**Strict JSON Output:** Return the output *only* as a single JSON object with exactly "
            "one top-level key: \"graph\". Do not include any other text, comments, or formatting."
        )
        structure = f'{{\n  "graph": {example}\n}}'

    inputs = "\n".join(_describe_inputs(request)) or "(no inputs)"

    return f"""
{_GOALS[diagram]}

The user provided:
{inputs}

**Instructions:**
1.  {_STRUCTURE_RULES[diagram]}
2.  **Perform Sentiment Analysis:** For every single entity and every single relationship, you MUST determine its sentiment from the context. The sentiment must be one of three string values: "positive", "negative", or "neutral".
3.  **Unique Ids:** Every entity needs an id of the form "e1", "e2", ... that is unique within the graph. Relationships refer to entities by these ids in "source" and "target".
4.  {output_rule}

Here is the required structure with an example:
{structure}

Use only the following specific entity types: {allowed_types}.
""".strip()
