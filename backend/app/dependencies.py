from functools import lru_cache
import logging
import time
from typing import Iterator

import jwt
from fastapi import Depends, Header
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from synapse.documents.reader import DocumentReader
from synapse.extraction.extractor import GraphExtractor
from synapse.llm.generator import GraphGenerator
from synapse.llm.gemini_backend import GeminiBackend
from synapse.verification.mailer import ConsoleMailer, Mailer, SMTPMailer, SMTPSettings
from synapse.verification.otp import OTPService
from synapse.verification.store import InMemoryStore, KeyValueStore, RedisStore

from backend.app.config import AppConfig
from backend.app.db.database import build_engine, build_session_factory, session_scope
from backend.app.db.models import User
from backend.app.errors import AppError, ErrorType
from backend.app.services.auth_service import TokenService
from backend.app.services.generation_service import GenerationService


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


@lru_cache
def get_engine() -> Engine:
    return build_engine(get_config().database_url)


@lru_cache
def get_session_factory() -> sessionmaker:
    return build_session_factory(get_engine())


def get_db() -> Iterator[Session]:
    yield from session_scope(get_session_factory())


@lru_cache
def get_token_service() -> TokenService:
    config = get_config()
    return TokenService(
        config.jwt_secret,
        algorithm=config.jwt_algorithm,
        expires_days=config.jwt_expires_days,
    )


@lru_cache
def get_store() -> KeyValueStore:
    config = get_config()
    if config.redis_url:
        logging.getLogger("synapse.startup").info("[startup] verification store: redis")
        return RedisStore.from_url(config.redis_url)
    return InMemoryStore()


@lru_cache
def get_mailer() -> Mailer:
    config = get_config()
    if not config.smtp_host:
        return ConsoleMailer()
    return SMTPMailer(
        SMTPSettings(
            host=config.smtp_host,
            port=config.smtp_port,
            user=config.smtp_user or None,
            password=config.smtp_password or None,
            from_email=config.from_email,
        )
    )


@lru_cache
def get_otp_service() -> OTPService:
    return OTPService(
        store=get_store(),
        mailer=get_mailer(),
        config=get_config().synapse.verification,
    )


@lru_cache
def get_generator() -> GraphGenerator:
    config = get_config().synapse

    t0 = time.perf_counter()
    backend = GeminiBackend(
        model_name=config.generation.model_name,
        api_key=config.generation.api_key,
        temperature=config.generation.temperature,
    )
    logging.getLogger("synapse.startup").info(
        "[startup] LLM backend init in %.3fs",
        time.perf_counter() - t0,
    )

    return GraphGenerator(backend, extractor=GraphExtractor(config.extraction))


def get_generation_service(
    generator: GraphGenerator = Depends(get_generator),
) -> GenerationService:
    return GenerationService(
        generator=generator,
        reader=DocumentReader(),
        config=get_config().synapse.generation,
    )


def get_current_user(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    if not authorization or not authorization.startswith("Bearer"):
        raise AppError("Not authorized, no token", 401, ErrorType.AUTHENTICATION)

    token = authorization.split(" ", 1)[1].strip() if " " in authorization else ""
    try:
        user_id = tokens.decode(token)
    except jwt.InvalidTokenError as exc:
        logging.getLogger("synapse.auth").info("[auth] token rejected: %s", exc)
        raise AppError("Not authorized, token failed", 401, ErrorType.AUTHENTICATION)

    user = db.get(User, user_id)
    if user is None:
        raise AppError("Not authorized, user not found", 401, ErrorType.AUTHENTICATION)
    return user
