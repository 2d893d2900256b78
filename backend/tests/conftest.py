from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Dict, List, Sequence

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from backend.app.main import create_app
from backend.app.config import AppConfig
from backend.app.db.database import build_engine, build_session_factory, init_db
from backend.app.dependencies import (
    get_config,
    get_db,
    get_generator,
    get_otp_service,
    get_token_service,
)
from backend.app.services.auth_service import TokenService

from synapse.llm.generator import GraphGenerator, MediaPart
from synapse.verification.otp import OTPService
from synapse.verification.store import InMemoryStore


GRAPH_COMPLETION = "```json\n" + json.dumps(
    {
        "graph": {
            "entities": [
                {"id": "e1", "label": "Marie Curie", "type": "PERSON", "sentiment": "positive"},
                {"id": "e2", "label": "Nobel Prize", "type": "EVENT", "sentiment": "positive"},
                {"id": "e3", "label": "Radioactivity", "type": "CONCEPT", "sentiment": "neutral"},
            ],
            "relationships": [
                {"source": "e1", "target": "e2", "label": "WON", "sentiment": "positive"},
                {"source": "e1", "target": "e3", "label": "STUDIED", "sentiment": "neutral"},
            ],
        }
    }
) + "\n```"


class DummyBackend:
    def __init__(self, completion: str = GRAPH_COMPLETION) -> None:
        self.completion = completion
        self.prompts: List[str] = []
        self.attachments: List[Sequence[MediaPart]] = []

    def generate(self, prompt: str, attachments: Sequence[MediaPart] = ()) -> str:
        self.prompts.append(prompt)
        self.attachments.append(list(attachments))
        return self.completion


class RecordingMailer:
    def __init__(self) -> None:
        self.sent: List[Dict[str, str]] = []

    def send(self, *, to: str, subject: str, text: str, html: str) -> None:
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})


@pytest.fixture()
def app_config() -> AppConfig:
    return AppConfig(
        environment="development",
        jwt_secret="test-secret",
        database_url="sqlite://",
        redis_url="",
        require_email_verification=False,
    )


@pytest.fixture()
def backend() -> DummyBackend:
    return DummyBackend()


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def otp_service(mailer: RecordingMailer) -> OTPService:
    return OTPService(
        store=InMemoryStore(),
        mailer=mailer,
        code_factory=lambda: "123456",
    )


@pytest.fixture()
def session_factory(app_config: AppConfig):
    engine = build_engine(app_config.database_url)
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def client(
    app_config: AppConfig,
    backend: DummyBackend,
    otp_service: OTPService,
    session_factory,
):
    @asynccontextmanager
    async def _no_lifespan(_: FastAPI):
        yield

    app = create_app(app_config)
    app.router.lifespan_context = _no_lifespan

    def _db_override():
        session: Session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_config] = lambda: app_config
    app.dependency_overrides[get_db] = _db_override
    app.dependency_overrides[get_generator] = lambda: GraphGenerator(backend)
    app.dependency_overrides[get_otp_service] = lambda: otp_service
    app.dependency_overrides[get_token_service] = lambda: TokenService(app_config.jwt_secret)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def token(client: TestClient) -> str:
    response = client.post(
        "/api/users/",
        json={"email": "ada@example.com", "password": "s3cret!"},
    )
    assert response.status_code == 201, response.text
    return response.json()["token"]


@pytest.fixture()
def headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
