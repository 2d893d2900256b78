import io

import docx
import fitz
import pytest

from synapse.documents.reader import (
    DocumentReader,
    ExtractedDocument,
    document_context,
    preprocess_text,
    split_into_chunks,
    summarize_document,
)
from synapse.exceptions import DocumentError


def _pdf_bytes(text: str) -> bytes:
    pdf = fitz.open()
    page = pdf.new_page()
    page.insert_text((72, 72), text)
    data = pdf.tobytes()
    pdf.close()
    return data


def _docx_bytes(*paragraphs: str) -> bytes:
    document = docx.Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def test_plain_text_upload():
    doc = DocumentReader().extract("notes.txt", "text/plain", b"Alpha beta gamma.")

    assert doc.text == "Alpha beta gamma."
    assert doc.title == "notes"
    assert doc.metadata["word_count"] == 3


def test_pdf_upload():
    doc = DocumentReader().extract("paper.pdf", "application/pdf", _pdf_bytes("Graphs are useful"))

    assert "Graphs are useful" in doc.text
    assert doc.title == "paper"
    assert doc.metadata["page_count"] == 1


def test_word_upload():
    data = _docx_bytes("First paragraph.", "Second paragraph.")
    doc = DocumentReader().extract(
        "report.docx",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        data,
    )

    assert doc.text == "First paragraph.\nSecond paragraph."
    assert doc.title == "report"


def test_unsupported_type_is_rejected():
    with pytest.raises(DocumentError, match="Unsupported file type"):
        DocumentReader().extract("slides.pptx", "application/vnd.ms-powerpoint", b"...")


def test_corrupt_pdf_is_wrapped():
    with pytest.raises(DocumentError, match="Failed to extract text"):
        DocumentReader().extract("broken.pdf", "application/pdf", b"not a pdf at all")


def test_preprocess_collapses_whitespace_and_drops_symbols():
    assert preprocess_text("  Hello\n\n  world☃ ok  ") == "Hello world ok"


def test_split_into_chunks_respects_sentence_boundaries():
    text = "One two three. Four five six. Seven eight nine."
    assert split_into_chunks(text, max_chunk_size=20) == [
        "One two three.",
        "Four five six.",
        "Seven eight nine.",
    ]
    assert split_into_chunks(text) == ["One two three. Four five six. Seven eight nine."]


def test_split_into_chunks_breaks_overlong_sentences_on_words():
    chunks = split_into_chunks("aaaa bbbb cccc dddd", max_chunk_size=10)
    assert all(len(chunk) <= 10 for chunk in chunks)
    assert " ".join(chunks).replace(".", "") == "aaaa bbbb cccc dddd"


def test_summarize_document():
    doc = ExtractedDocument(
        text="x" * 250,
        title="Thesis",
        metadata={"page_count": 3, "word_count": 1, "author": "Ada"},
    )
    summary = summarize_document(doc)

    assert summary.startswith("Document: Thesis\nPages: 3\nWord Count: 1\nAuthor: Ada")
    assert summary.endswith("x" * 200 + "...")


def test_document_context_bounds_the_text():
    sentence = "Knowledge graphs link entities together. "
    doc = ExtractedDocument(text=sentence * 100, title="Long")

    context = document_context(doc, max_chars=200, chunk_chars=100)

    assert context.startswith("Document: Long")
    body = context.split("\n\nContent:\n", 1)[1]
    assert 0 < len(body) <= 250


def test_document_context_of_blank_document_is_none():
    doc = ExtractedDocument(text=" \n\t ", title="Empty")
    assert document_context(doc, max_chars=100, chunk_chars=50) is None
