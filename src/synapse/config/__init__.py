"""
Configuration layer for synapse.

This module defines the configuration contracts that control graph
extraction, the generative model call and email verification.

Configuration in synapse is:
- Explicit (passed, not global)
- Typed (frozen dataclasses)
"""

from synapse.config.settings import (
    ExtractionConfig,
    GenerationConfig,
    VerificationConfig,
    SynapseConfig,
)

__all__ = [
    "ExtractionConfig",
    "GenerationConfig",
    "VerificationConfig",
    "SynapseConfig",
]
