from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from docling.datamodel.accelerator_options import AcceleratorDevice, AcceleratorOptions
from docling.datamodel.base_models import InputFormat
from docling.datamodel.pipeline_options import PdfPipelineOptions, RapidOcrOptions
from docling.document_converter import DocumentConverter, PdfFormatOption
from docling_core.types.doc.document import SectionHeaderItem, TextItem

from .errors import DocumentLoadError
from .sources import clean_text

logger = logging.getLogger(__name__)


class DoclingTextSource:
    """
    Layout-aware PDF text source (with optional OCR via Docling's PDF pipeline).

    Walks the DoclingDocument in reading order and keeps text items only, one
    paragraph per item, so headers, footnotes and body text come out in the
    order a reader would meet them. Tables and pictures are skipped.

    Requires the `docling` extra.
    """

    def __init__(self, path: Union[str, Path], perform_ocr: bool = False, num_threads: int = 4):
        self.path = Path(path)
        pipeline_options = PdfPipelineOptions()
        pipeline_options.do_ocr = perform_ocr
        pipeline_options.do_table_structure = False
        pipeline_options.ocr_options = RapidOcrOptions()
        pipeline_options.accelerator_options = AcceleratorOptions(
            num_threads=num_threads, device=AcceleratorDevice.AUTO
        )
        self.converter = DocumentConverter(
            format_options={InputFormat.PDF: PdfFormatOption(pipeline_options=pipeline_options)}
        )

    def read_text(self) -> str:
        if not self.path.exists():
            raise DocumentLoadError(f"PDF not found at {self.path}")
        try:
            result = self.converter.convert(self.path)
        except Exception as exc:  # noqa: BLE001
            raise DocumentLoadError(f"docling failed to parse {self.path}: {exc}") from exc

        paragraphs: List[str] = []
        for item, _level in result.document.iterate_items():
            if not isinstance(item, (TextItem, SectionHeaderItem)):
                continue
            text = (getattr(item, "text", "") or "").strip()
            if text:
                paragraphs.append(text)
        if not paragraphs:
            raise DocumentLoadError(f"PDF has no extractable text: {self.path}")
        logger.info("Docling extracted %s paragraphs from %s", len(paragraphs), self.path)
        return clean_text("\n\n".join(paragraphs))
