"""
Document ingestion for synapse: text out of PDF, Word and plain-text uploads.
"""

from synapse.documents.reader import (
    DocumentReader,
    ExtractedDocument,
    SUPPORTED_TYPES,
    document_context,
    preprocess_text,
    split_into_chunks,
    summarize_document,
)

__all__ = [
    "DocumentReader",
    "ExtractedDocument",
    "SUPPORTED_TYPES",
    "document_context",
    "preprocess_text",
    "split_into_chunks",
    "summarize_document",
]
