from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import docx
import fitz  # PyMuPDF

from synapse.exceptions import DocumentError
from synapse.utils.text import strip_extension

logger = logging.getLogger("synapse.documents")

PDF_TYPES = {"application/pdf"}
WORD_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
}
TEXT_TYPES = {"text/plain", "text/markdown", "text/csv"}

SUPPORTED_TYPES = PDF_TYPES | WORD_TYPES | TEXT_TYPES


@dataclass(frozen=True)
class ExtractedDocument:
    text: str
    title: str
    metadata: Dict[str, Any] = field(default_factory=dict)


def _word_count(text: str) -> int:
    return len(re.split(r"\s+", text))


class DocumentReader:
    """
    Reads text out of uploaded documents.
    """

    def extract(self, filename: str, mime_type: str, data: bytes) -> ExtractedDocument:
        if mime_type in PDF_TYPES:
            reader = self._from_pdf
        elif mime_type in WORD_TYPES:
            reader = self._from_word
        elif mime_type in TEXT_TYPES:
            reader = self._from_text
        else:
            raise DocumentError(f"Unsupported file type: {mime_type}")

        try:
            return reader(filename, data)
        except DocumentError:
            raise
        except Exception as exc:
            logger.error("Document extraction failed for %s: %s", filename, exc)
            raise DocumentError(f"Failed to extract text from document: {exc}") from exc

    def _from_pdf(self, filename: str, data: bytes) -> ExtractedDocument:
        with fitz.open(stream=data, filetype="pdf") as pdf:
            text = "".join(page.get_text("text") for page in pdf)
            info = pdf.metadata or {}
            page_count = pdf.page_count

        keywords = info.get("keywords") or ""
        return ExtractedDocument(
            text=text,
            title=strip_extension(filename, ("pdf",)),
            metadata={
                "page_count": page_count,
                "word_count": _word_count(text),
                "author": info.get("author") or None,
                "subject": info.get("subject") or None,
                "keywords": [k.strip() for k in keywords.split(",")] if keywords else None,
            },
        )

    def _from_word(self, filename: str, data: bytes) -> ExtractedDocument:
        document = docx.Document(io.BytesIO(data))
        text = "\n".join(p.text for p in document.paragraphs)
        return ExtractedDocument(
            text=text,
            title=strip_extension(filename, ("docx", "doc", "rtf")),
            metadata={"word_count": _word_count(text)},
        )

    def _from_text(self, filename: str, data: bytes) -> ExtractedDocument:
        text = data.decode("utf-8", errors="replace")
        return ExtractedDocument(
            text=text,
            title=strip_extension(filename, ("txt", "md", "csv")),
            metadata={"word_count": _word_count(text)},
        )


def preprocess_text(text: str) -> str:
    """
    Collapses whitespace and drops characters that tend to confuse the model.
    """
    text = re.sub(r"\s+", " ", text)
    text = re.sub(r"[^\w\s.,!?;:()\[\]{}\"'`~@#$%^&*+=|\\<>/]", "", text, flags=re.ASCII)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text.strip()


def split_into_chunks(text: str, max_chunk_size: int = 4000) -> List[str]:
    """
    Splits text on sentence boundaries into chunks of at most
    ``max_chunk_size`` characters; overlong sentences are split on words.
    """
    sentences = [s for s in re.split(r"[.!?]+", text) if s.strip()]
    chunks: List[str] = []
    current = ""

    for sentence in sentences:
        sentence = sentence.strip() + "."

        if len(current) + len(sentence) > max_chunk_size:
            if current:
                chunks.append(current.strip())
                current = sentence
                continue

            word_chunk = ""
            for word in sentence.split(" "):
                if len(word_chunk) + len(word) + 1 > max_chunk_size:
                    if word_chunk:
                        chunks.append(word_chunk.strip())
                        word_chunk = word
                    else:
                        chunks.append(word)
                else:
                    word_chunk += (" " if word_chunk else "") + word
            if word_chunk:
                current = word_chunk
        else:
            current += (" " if current else "") + sentence

    if current:
        chunks.append(current.strip())

    return chunks


def summarize_document(document: ExtractedDocument, preview_chars: int = 200) -> str:
    meta = document.metadata
    lines = [f"Document: {document.title or 'Untitled'}"]
    if meta.get("page_count"):
        lines.append(f"Pages: {meta['page_count']}")
    if meta.get("word_count"):
        lines.append(f"Word Count: {meta['word_count']}")
    if meta.get("author"):
        lines.append(f"Author: {meta['author']}")
    if meta.get("subject"):
        lines.append(f"Subject: {meta['subject']}")

    preview = document.text[:preview_chars].replace("\n", " ")
    ellipsis = "..." if len(document.text) > preview_chars else ""
    return "\n".join(lines) + f"\n\nContent Preview: {preview}{ellipsis}"


def document_context(
    document: ExtractedDocument,
    *,
    max_chars: int,
    chunk_chars: int,
) -> Optional[str]:
    """
    Summary plus as many leading chunks of the cleaned text as fit in
    ``max_chars``. Returns ``None`` for documents without text.
    """
    cleaned = preprocess_text(document.text)
    if not cleaned:
        return None

    parts: List[str] = []
    used = 0
    for chunk in split_into_chunks(cleaned, chunk_chars):
        if parts and used + len(chunk) > max_chars:
            break
        parts.append(chunk[:max_chars])
        used += len(chunk)

    return summarize_document(document) + "\n\nContent:\n" + "\n\n".join(parts)
