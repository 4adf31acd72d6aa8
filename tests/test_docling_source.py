from types import SimpleNamespace

import pytest

pytest.importorskip("docling")

from docling_core.types.doc import DocItemLabel, DoclingDocument  # noqa: E402

from paced_reader.presentation import DocumentLoadError  # noqa: E402
from paced_reader.presentation.docling_source import DoclingTextSource  # noqa: E402


def _stub_converter(source, document=None, error=None):
    def convert(path):
        if error is not None:
            raise error
        return SimpleNamespace(document=document)

    source.converter = SimpleNamespace(convert=convert)


def test_text_items_become_paragraphs_in_reading_order(tmp_path):
    pdf = tmp_path / "book.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    doc = DoclingDocument(name="book")
    doc.add_heading(text="Chapter One")
    doc.add_text(label=DocItemLabel.TEXT, text="  It was a bright cold day.  ")
    doc.add_text(label=DocItemLabel.TEXT, text="   ")
    doc.add_text(label=DocItemLabel.TEXT, text="The clocks were striking\x07 thirteen.")

    source = DoclingTextSource(pdf)
    _stub_converter(source, document=doc)

    assert source.read_text() == (
        "Chapter One\n\nIt was a bright cold day.\n\nThe clocks were striking thirteen."
    )


def test_document_without_text_is_a_load_error(tmp_path):
    pdf = tmp_path / "scan.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    source = DoclingTextSource(pdf)
    _stub_converter(source, document=DoclingDocument(name="scan"))

    with pytest.raises(DocumentLoadError, match="no extractable text"):
        source.read_text()


def test_converter_failure_is_a_load_error(tmp_path):
    pdf = tmp_path / "broken.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    source = DoclingTextSource(pdf)
    _stub_converter(source, error=RuntimeError("bad xref"))

    with pytest.raises(DocumentLoadError, match="bad xref"):
        source.read_text()
