"""
Low-level helpers shared by the synapse subsystems.
"""

from synapse.utils.text import normalize_text, content_key, strip_extension
from synapse.utils.time import utc_now, epoch_millis

__all__ = [
    "normalize_text",
    "content_key",
    "strip_extension",
    "utc_now",
    "epoch_millis",
]
