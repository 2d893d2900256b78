DEFAULTS = {
    # Application title reported by the OpenAPI schema
    "APP_NAME": "synapse-backend",
    # Prefix for every API router
    "API_PREFIX": "/api",
    # "development" enables the dev-only user endpoints
    "ENVIRONMENT": "development",
    # Comma separated list of CORS origins
    "ALLOWED_ORIGINS": "http://localhost:5173,http://localhost:3000",
    # Gemini API key (required to generate graphs)
    "GEMINI_API_KEY": None,
    # Gemini model name
    "LLM_MODEL": "gemini-2.0-flash",
    # LLM sampling temperature
    "LLM_TEMPERATURE": 0.2,
    # How relationship ids are synthesized: "timestamp" or "content"
    "EDGE_ID_STRATEGY": "timestamp",
    # Max characters of document text handed to the model
    "MAX_DOCUMENT_CHARS": 12000,
    # Chunk size used when splitting document text
    "DOCUMENT_CHUNK_CHARS": 4000,
    # Largest accepted upload, per file, in bytes
    "MAX_UPLOAD_BYTES": 20 * 1024 * 1024,
    # Secret used to sign bearer tokens
    "JWT_SECRET": "change-me",
    # Bearer token signing algorithm
    "JWT_ALGORITHM": "HS256",
    # Bearer token lifetime in days
    "JWT_EXPIRES_DAYS": 30,
    # SQLAlchemy database URL
    "DATABASE_URL": "sqlite:///./synapse.db",
    # Redis URL for verification codes (empty = in-process store)
    "REDIS_URL": "",
    # Verification code lifetime in seconds
    "OTP_TTL_SECONDS": 600,
    # Wrong guesses allowed per verification code
    "OTP_MAX_ATTEMPTS": 3,
    # How long a verified email stays verified, in seconds
    "VERIFIED_EMAIL_TTL_SECONDS": 3600,
    # Sweep interval for the in-process store, in seconds
    "OTP_SWEEP_INTERVAL": 300,
    # Refuse registration for emails that were not verified
    "REQUIRE_EMAIL_VERIFICATION": False,
    # SMTP relay (empty host = log codes instead of mailing them)
    "SMTP_HOST": "",
    "SMTP_PORT": 587,
    "SMTP_USER": "",
    "SMTP_PASS": "",
    # Sender address for verification mail
    "FROM_EMAIL": "noreply@synapse.local",
}
