from dataclasses import dataclass, field
from dynaconf import Dynaconf
from backend.app.constants import DEFAULTS

from synapse.config.settings import (
    ExtractionConfig,
    GenerationConfig,
    VerificationConfig,
    SynapseConfig,
)

settings = Dynaconf(
    envvar_prefix="SYNAPSE",
    load_dotenv=True,
    settings_files=[],
)


def _get(key: str):
    return settings.get(key, DEFAULTS[key])


def _parse_csv(value):
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    if isinstance(value, str):
        return tuple(v.strip() for v in value.split(",") if v.strip())
    return ()


def _synapse_config() -> SynapseConfig:
    return SynapseConfig(
        extraction=ExtractionConfig(
            edge_id_strategy=_get("EDGE_ID_STRATEGY"),
        ),
        generation=GenerationConfig(
            model_name=_get("LLM_MODEL"),
            api_key=_get("GEMINI_API_KEY"),
            temperature=float(_get("LLM_TEMPERATURE")),
            max_document_chars=int(_get("MAX_DOCUMENT_CHARS")),
            document_chunk_chars=int(_get("DOCUMENT_CHUNK_CHARS")),
        ),
        verification=VerificationConfig(
            code_ttl_seconds=int(_get("OTP_TTL_SECONDS")),
            max_attempts=int(_get("OTP_MAX_ATTEMPTS")),
            verified_ttl_seconds=int(_get("VERIFIED_EMAIL_TTL_SECONDS")),
            sweep_interval_seconds=int(_get("OTP_SWEEP_INTERVAL")),
        ),
    )


@dataclass(frozen=True)
class AppConfig:
    # ---------------- App ----------------
    app_name: str = _get("APP_NAME")
    api_prefix: str = _get("API_PREFIX")
    environment: str = _get("ENVIRONMENT")
    allowed_origins: tuple = _parse_csv(_get("ALLOWED_ORIGINS"))
    max_upload_bytes: int = int(_get("MAX_UPLOAD_BYTES"))

    # ---------------- Auth ----------------
    jwt_secret: str = _get("JWT_SECRET")
    jwt_algorithm: str = _get("JWT_ALGORITHM")
    jwt_expires_days: int = int(_get("JWT_EXPIRES_DAYS"))
    require_email_verification: bool = bool(_get("REQUIRE_EMAIL_VERIFICATION"))

    # ---------------- Storage ----------------
    database_url: str = _get("DATABASE_URL")
    redis_url: str = _get("REDIS_URL")

    # ---------------- Mail ----------------
    smtp_host: str = _get("SMTP_HOST")
    smtp_port: int = int(_get("SMTP_PORT"))
    smtp_user: str = _get("SMTP_USER")
    smtp_password: str = _get("SMTP_PASS")
    from_email: str = _get("FROM_EMAIL")

    # ---------------- Synapse Policy ----------------
    synapse: SynapseConfig = field(default_factory=_synapse_config)

    @property
    def is_development(self) -> bool:
        return str(self.environment).lower() == "development"
