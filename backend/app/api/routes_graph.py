from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from backend.app.api.schemas import GenerateResponse
from backend.app.config import AppConfig
from backend.app.db.models import User
from backend.app.dependencies import (
    get_config,
    get_current_user,
    get_db,
    get_generation_service,
)
from backend.app.errors import AppError, ErrorType
from backend.app.services.generation_service import (
    GenerateInputs,
    GenerationService,
    UploadedFile,
)

router = APIRouter()


def _read_upload(upload: Optional[UploadFile], limit: int) -> Optional[UploadedFile]:
    if upload is None or not upload.filename:
        return None
    data = upload.file.read()
    if len(data) > limit:
        raise AppError(
            f"{upload.filename} exceeds the {limit} byte upload limit",
            413,
            ErrorType.VALIDATION,
        )
    return UploadedFile(
        filename=upload.filename,
        content_type=upload.content_type or "",
        data=data,
    )


@router.post("/generate", status_code=201, response_model=GenerateResponse)
def generate_graph(
    textInput: str = Form(default=""),
    question: str = Form(default=""),
    diagramType: str = Form(default="knowledge-graph"),
    audioVideoURL: str = Form(default=""),
    audioUrl: str = Form(default=""),
    imageUrl: str = Form(default=""),
    imageFile: Optional[UploadFile] = File(default=None),
    audioFile: Optional[UploadFile] = File(default=None),
    documentFile: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: GenerationService = Depends(get_generation_service),
    config: AppConfig = Depends(get_config),
):
    limit = config.max_upload_bytes
    inputs = GenerateInputs(
        text_input=textInput,
        question=question,
        diagram_type=diagramType,
        image_url=imageUrl,
        audio_url=audioVideoURL or audioUrl,
        image_file=_read_upload(imageFile, limit),
        audio_file=_read_upload(audioFile, limit),
        document_file=_read_upload(documentFile, limit),
    )
    return service.generate(db, user, inputs)
