from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from synapse.config.settings import GenerationConfig
from synapse.documents.reader import DocumentReader, document_context
from synapse.graph.graph_schema import DiagramType
from synapse.llm.generator import GenerationRequest, GraphGenerator, MediaPart

from backend.app.db.models import History, User
from backend.app.errors import AppError, ErrorType

logger = logging.getLogger("synapse.generation")


@dataclass(frozen=True)
class UploadedFile:
    filename: str
    content_type: str
    data: bytes

    def as_media(self) -> MediaPart:
        return MediaPart(
            data=self.data,
            mime_type=self.content_type or "application/octet-stream",
            filename=self.filename,
        )


@dataclass(frozen=True)
class GenerateInputs:
    """
    Form fields and files of one generate request.
    """

    text_input: str = ""
    question: str = ""
    diagram_type: str = DiagramType.KNOWLEDGE_GRAPH.value
    image_url: str = ""
    audio_url: str = ""
    image_file: Optional[UploadedFile] = None
    audio_file: Optional[UploadedFile] = None
    document_file: Optional[UploadedFile] = None


class GenerationService:
    """
    End-to-end generate flow for an authenticated user.

    Responsibilities:
    - turn form inputs into a GenerationRequest (documents read to text)
    - run the generator once
    - refuse empty graphs
    - persist the graph and inputs as a History item
    """

    def __init__(
        self,
        *,
        generator: GraphGenerator,
        reader: DocumentReader | None = None,
        config: GenerationConfig | None = None,
    ) -> None:
        self.generator = generator
        self.reader = reader or DocumentReader()
        self.config = config or GenerationConfig()

    def build_request(self, inputs: GenerateInputs) -> GenerationRequest:
        context = None
        if inputs.document_file is not None:
            doc = self.reader.extract(
                inputs.document_file.filename,
                inputs.document_file.content_type,
                inputs.document_file.data,
            )
            context = document_context(
                doc,
                max_chars=self.config.max_document_chars,
                chunk_chars=self.config.document_chunk_chars,
            )

        return GenerationRequest(
            text=inputs.text_input or "",
            question=inputs.question or "",
            diagram_type=DiagramType.parse(inputs.diagram_type),
            image=inputs.image_file.as_media() if inputs.image_file else None,
            audio=inputs.audio_file.as_media() if inputs.audio_file else None,
            image_url=(inputs.image_url or "").strip(),
            audio_url=(inputs.audio_url or "").strip(),
            document_context=context,
        )

    def generate(self, db: Session, user: User, inputs: GenerateInputs) -> Dict[str, Any]:
        request = self.build_request(inputs)
        if not request.has_input():
            if inputs.document_file is not None:
                raise AppError(
                    "No readable text found in the uploaded document.",
                    400,
                    ErrorType.VALIDATION,
                )
            raise AppError("At least one input is required.", 400, ErrorType.VALIDATION)

        t0 = time.perf_counter()
        result = self.generator.generate(request)
        logger.info(
            "[generation] user=%s diagram=%s total %.3fs",
            user.id,
            request.diagram_type.value,
            time.perf_counter() - t0,
        )

        if result.graph.is_empty():
            raise AppError(
                "Failed to parse a valid graph from the AI response.",
                500,
                ErrorType.GRAPH_PROCESSING,
            )

        graph_data = {
            "nodes": result.graph.nodes,
            "edges": result.graph.edges,
            "diagramType": request.diagram_type.value,
        }
        item = History(
            user_id=user.id,
            graph_data=graph_data,
            inputs={
                "textInput": inputs.text_input or "",
                "question": inputs.question or "",
                "answer": result.answer,
                "imageFileName": inputs.image_file.filename if inputs.image_file else "",
                "audioFileName": inputs.audio_file.filename if inputs.audio_file else "",
                "documentFileName": inputs.document_file.filename if inputs.document_file else "",
                "imageUrl": request.image_url,
                "audioUrl": request.audio_url,
                "diagramType": request.diagram_type.value,
            },
        )
        db.add(item)
        db.commit()

        return {
            "answer": result.answer,
            "graphData": graph_data,
            "historyId": item.id,
        }
