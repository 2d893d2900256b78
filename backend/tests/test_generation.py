import pytest

from synapse.extraction.extractor import GraphExtractor
from synapse.graph.graph_schema import DiagramType
from synapse.llm.generator import GenerationRequest, GraphGenerator, MediaPart
from synapse.llm.prompts import build_prompt


class CannedBackend:
    def __init__(self, completion: str) -> None:
        self.completion = completion
        self.calls = []

    def generate(self, prompt, attachments=()):
        self.calls.append((prompt, list(attachments)))
        return self.completion


# -------------------- Prompts --------------------


def test_text_prompt_asks_for_graph_only():
    prompt = build_prompt(GenerationRequest(text="Marie Curie discovered polonium."))

    assert 'Text: "Marie Curie discovered polonium."' in prompt
    assert 'exactly one top-level key: "graph"' in prompt
    assert '"answer"' not in prompt
    assert '"positive", "negative", or "neutral"' in prompt
    assert prompt.rstrip().endswith(
        "PERSON, ORG, LOCATION, DATE, EVENT, PRODUCT, CONCEPT, JOB_TITLE, "
        "FIELD_OF_STUDY, THEORY, ART_WORK."
    )


def test_question_prompt_asks_for_answer_and_graph():
    prompt = build_prompt(GenerationRequest(question="Who founded SpaceX?"))

    assert 'Question: "Who founded SpaceX?"' in prompt
    assert 'two top-level keys: "answer"' in prompt
    assert '"answer": "..."' in prompt


def test_mindmap_and_flowchart_prompts_use_their_types():
    mindmap = build_prompt(GenerationRequest(text="x", diagram_type=DiagramType.MINDMAP))
    flowchart = build_prompt(GenerationRequest(text="x", diagram_type=DiagramType.FLOWCHART))

    assert "TOPIC, SUBTOPIC, CONCEPT." in mindmap
    assert '"level"' in mindmap
    assert "START_END, PROCESS, DECISION." in flowchart
    assert '"order"' in flowchart
    assert '"condition"' in flowchart


def test_prompt_describes_media_and_documents():
    request = GenerationRequest(
        image=MediaPart(b"\x89PNG", "image/png", "cat.png"),
        audio_url="https://example.com/talk.mp3",
        document_context="Document: Thesis\n\nContent:\nGraphs.",
    )
    prompt = build_prompt(request)

    assert "An image file." in prompt
    assert "An audio/video at this URL: https://example.com/talk.mp3" in prompt
    assert "A document:\nDocument: Thesis" in prompt


# -------------------- Requests --------------------


def test_request_inputs():
    assert not GenerationRequest().has_input()
    assert not GenerationRequest(text="   ").has_input()
    assert GenerationRequest(image_url="https://example.com/a.png").has_input()
    assert GenerationRequest(document_context="text").has_input()

    image = MediaPart(b"1", "image/png")
    audio = MediaPart(b"2", "audio/mpeg")
    assert GenerationRequest(image=image, audio=audio).attachments == [image, audio]
    assert GenerationRequest(question=" ").is_question is False


# -------------------- Generator --------------------


def test_generator_returns_answer_and_graph():
    backend = CannedBackend(
        '{"answer": "Elon Musk.", "graph": {"entities": [{"id": "e1", "label": "Elon Musk"}], '
        '"relationships": [{"source": "e1", "target": "e1", "label": "FOUNDED"}]}}'
    )
    generator = GraphGenerator(backend, extractor=GraphExtractor(clock=lambda: 9))
    image = MediaPart(b"img", "image/jpeg")

    result = generator.generate(GenerationRequest(question="Who founded SpaceX?", image=image))

    assert result.answer == "Elon Musk."
    assert result.graph.nodes == [{"id": "e1", "label": "Elon Musk"}]
    assert result.graph.edges[0]["id"] == "edge_9_0"
    prompt, attachments = backend.calls[0]
    assert "Who founded SpaceX?" in prompt
    assert attachments == [image]


def test_generator_unparseable_completion_gives_empty_graph():
    generator = GraphGenerator(CannedBackend("I am unable to help with that."))
    result = generator.generate(GenerationRequest(text="anything"))

    assert result.answer == ""
    assert result.graph.is_empty()


def test_generator_uses_custom_prompt_builder():
    backend = CannedBackend('{"entities": []}')
    generator = GraphGenerator(backend, prompt_builder=lambda request: f"PROMPT:{request.text}")

    generator.generate(GenerationRequest(text="hello"))

    assert backend.calls[0][0] == "PROMPT:hello"


def test_generator_requires_input_and_backend():
    with pytest.raises(ValueError):
        GraphGenerator(None)
    with pytest.raises(ValueError, match="At least one input is required."):
        GraphGenerator(CannedBackend("{}")).generate(GenerationRequest())
