"""
botsuite/services/extraction_service.py

Purpose: Turn an uploaded file into prompt material

- Detects the file format (image, PDF, DOCX, CSV, XLSX, plain text)
- Runs the matching extractor from the registry
- Truncates extracted text so the API payload stays bounded
- Extractor errors propagate to the caller
"""

import base64
import csv
import io
import json
import mimetypes
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional

from docx import Document as DocxDocument
from openpyxl import load_workbook
from PyPDF2 import PdfReader

from botsuite.core.config import settings
from botsuite.core.logging import get_logger, LogContext
from botsuite.schemas.bot import ExtractionResult, InlineImage, StagedFile
from botsuite.utils.constants import CSV_PREVIEW_HEADER, XLSX_PREVIEW_HEADER
from botsuite.utils.text_utils import truncate_text

logger = get_logger(__name__)


class FileFormat(str, Enum):
    IMAGE = "image"
    PDF = "pdf"
    DOCX = "docx"
    CSV = "csv"
    XLSX = "xlsx"
    TEXT = "text"


EXTENSION_FORMATS = {
    ".pdf": FileFormat.PDF,
    ".docx": FileFormat.DOCX,
    ".csv": FileFormat.CSV,
    ".xlsx": FileFormat.XLSX,
}


def resolve_mime_type(filename: str, content_type: Optional[str]) -> str:
    """Declared content type, falling back to an extension lookup."""
    if content_type:
        return content_type
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or ""


def detect_format(filename: str, content_type: Optional[str] = None) -> FileFormat:
    """
    Picks the extractor variant for a file.

    Image MIME types win over the extension; unknown extensions are read
    as UTF-8 text.
    """
    if resolve_mime_type(filename, content_type).startswith("image/"):
        return FileFormat.IMAGE
    ext = Path(filename or "").suffix.lower()
    return EXTENSION_FORMATS.get(ext, FileFormat.TEXT)


# ----------------------------------------------------------------------
# Extractors: (raw bytes, mime type) -> ExtractionResult (untruncated)
# ----------------------------------------------------------------------

def extract_image(data: bytes, mime_type: str) -> ExtractionResult:
    return ExtractionResult(
        text="",
        inline_image=InlineImage(
            mime_type=mime_type,
            data=base64.b64encode(data).decode("ascii"),
        ),
    )


def extract_pdf(data: bytes, mime_type: str) -> ExtractionResult:
    reader = PdfReader(io.BytesIO(data))
    pages = [page.extract_text() or "" for page in reader.pages]
    return ExtractionResult(text="\n".join(pages))


def extract_docx(data: bytes, mime_type: str) -> ExtractionResult:
    doc = DocxDocument(io.BytesIO(data))
    return ExtractionResult(text="\n".join(p.text for p in doc.paragraphs))


def extract_csv(data: bytes, mime_type: str) -> ExtractionResult:
    reader = csv.DictReader(io.StringIO(data.decode("utf-8-sig")))
    records = []
    for row in reader:
        # Skip blank lines that DictReader still yields as all-empty rows
        if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
            continue
        records.append(row)
        if len(records) >= settings.CSV_PREVIEW_ROWS:
            break
    preview = json.dumps(records, indent=2, ensure_ascii=False)
    return ExtractionResult(text=f"{CSV_PREVIEW_HEADER}{preview}")


def extract_xlsx(data: bytes, mime_type: str) -> ExtractionResult:
    workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        for row in sheet.iter_rows(values_only=True):
            writer.writerow(["" if cell is None else cell for cell in row])
    finally:
        workbook.close()
    return ExtractionResult(text=f"{XLSX_PREVIEW_HEADER}{buffer.getvalue()}")


def extract_text(data: bytes, mime_type: str) -> ExtractionResult:
    return ExtractionResult(text=data.decode("utf-8"))


EXTRACTORS: Dict[FileFormat, Callable[[bytes, str], ExtractionResult]] = {
    FileFormat.IMAGE: extract_image,
    FileFormat.PDF: extract_pdf,
    FileFormat.DOCX: extract_docx,
    FileFormat.CSV: extract_csv,
    FileFormat.XLSX: extract_xlsx,
    FileFormat.TEXT: extract_text,
}


def extract_file(staged: Optional[StagedFile], limit: Optional[int] = None) -> ExtractionResult:
    """
    Extracts prompt material from a staged upload.

    Args:
        staged: Staged upload, or None when the request had no file
        limit: Text truncation limit (defaults to EXTRACT_TEXT_LIMIT)

    Returns:
        ExtractionResult with text and/or an inline image

    Raises:
        Whatever the extractor raises (corrupt document, bad encoding)
    """
    if staged is None:
        return ExtractionResult()

    limit = limit or settings.EXTRACT_TEXT_LIMIT
    file_format = detect_format(staged.filename, staged.content_type)
    mime_type = resolve_mime_type(staged.filename, staged.content_type)

    with LogContext(file_format=file_format.value):
        data = Path(staged.path).read_bytes()
        result = EXTRACTORS[file_format](data, mime_type)
        logger.info(f"Extracted {len(result.text)} chars from {staged.filename}")

    result.text = truncate_text(result.text, limit)
    return result
