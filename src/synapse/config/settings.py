from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

# ---------------------------------------------------------------------
# Extraction of graph data from model completions
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Controls how relationship ids are synthesized during extraction.

    ``timestamp`` produces ``edge_<epochMillis>_<index>``; ``content``
    derives the id from source, target, label and position so repeated
    extraction of the same payload yields the same ids.
    """

    edge_id_strategy: Literal["timestamp", "content"] = "timestamp"


# ---------------------------------------------------------------------
# Generative model
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class GenerationConfig:
    """
    Controls the generative model call and the size of the
    context handed to it.
    """

    model_name: str = "gemini-2.0-flash"
    api_key: Optional[str] = None
    temperature: float = 0.2
    max_document_chars: int = 12000
    document_chunk_chars: int = 4000


# ---------------------------------------------------------------------
# Email ownership verification
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class VerificationConfig:
    """
    One-time password policy for email verification.
    """

    code_ttl_seconds: int = 600
    max_attempts: int = 3
    verified_ttl_seconds: Optional[int] = 3600
    sweep_interval_seconds: int = 300


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class SynapseConfig:
    """
    Root configuration object for synapse.

    Constructed once by the application and passed to the
    subsystems that need it; treated as immutable policy.
    """

    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    verification: VerificationConfig = field(default_factory=VerificationConfig)
