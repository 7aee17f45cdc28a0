"""
Text extraction for uploaded menu documents (PDF, DOCX, TXT).

Library parsers are tried first (pypdf, python-docx). When they come back
empty, a regex scrape of the raw document is used instead; it is crude but
recovers text from PDFs with broken xref tables and DOCX files python-docx
refuses to open.
"""
import io
import re
import zipfile
import logging
from typing import Optional

import docx
import pypdf

logger = logging.getLogger(__name__)

PDF = "pdf"
DOCX = "docx"
TXT = "txt"

MIME_TYPES = {
    "application/pdf": PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": DOCX,
    "text/plain": TXT,
}
EXTENSIONS = {".pdf": PDF, ".docx": DOCX, ".txt": TXT}

_PDF_LITERAL = re.compile(rb"\(([^)]+)\)")
_PDF_STREAM = re.compile(rb"stream(.*?)endstream", re.DOTALL)
_NUMERIC = re.compile(r"^[0-9.]+$")
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\s]")
_WHITESPACE = re.compile(r"\s+")
_DOCX_RUN = re.compile(r"<w:t[^>]*>([^<]+)</w:t>")


class UnsupportedFileType(ValueError):
    pass


def detect_file_type(filename: Optional[str], content_type: Optional[str]) -> Optional[str]:
    """Resolve the document kind from the MIME type, falling back to the extension."""
    if content_type:
        kind = MIME_TYPES.get(content_type.split(";")[0].strip().lower())
        if kind:
            return kind
    if filename:
        lowered = filename.lower()
        for ext, kind in EXTENSIONS.items():
            if lowered.endswith(ext):
                return kind
    return None


def _scrape_pdf(data: bytes) -> str:
    literals = []
    for match in _PDF_LITERAL.findall(data):
        text = match.decode("latin-1")
        if text and not _NUMERIC.match(text):
            literals.append(text)
    extracted = " ".join(literals)
    if len(extracted) > 50:
        return extracted

    streams = []
    for stream in _PDF_STREAM.findall(data):
        cleaned = _NON_PRINTABLE.sub(" ", stream.decode("latin-1"))
        cleaned = _WHITESPACE.sub(" ", cleaned).strip()
        if len(cleaned) > 10:
            streams.append(cleaned)
    return " ".join(streams) or extracted


def extract_pdf_text(data: bytes) -> str:
    try:
        reader = pypdf.PdfReader(io.BytesIO(data))
        text = ""
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text += page_text + "\n"
        if text.strip():
            return text
    except Exception as e:
        logger.warning(f"pypdf could not parse upload, falling back to raw scrape: {e}")
    return _scrape_pdf(data)


def _scrape_docx(data: bytes) -> str:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            xml = archive.read("word/document.xml").decode("utf-8", errors="ignore")
    except (zipfile.BadZipFile, KeyError):
        xml = data.decode("utf-8", errors="ignore")
    return " ".join(run for run in _DOCX_RUN.findall(xml) if run)


def extract_docx_text(data: bytes) -> str:
    try:
        document = docx.Document(io.BytesIO(data))
        lines = [p.text for p in document.paragraphs if p.text.strip()]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    lines.append("\t".join(cells))
        text = "\n".join(lines)
        if text.strip():
            return text
    except Exception as e:
        logger.warning(f"python-docx could not parse upload, falling back to raw scrape: {e}")
    return _scrape_docx(data)


def extract_text(filename: Optional[str], content_type: Optional[str], data: bytes) -> str:
    """Return the trimmed text of a menu document; raises UnsupportedFileType for anything but PDF/DOCX/TXT."""
    kind = detect_file_type(filename, content_type)
    if kind == PDF:
        text = extract_pdf_text(data)
    elif kind == DOCX:
        text = extract_docx_text(data)
    elif kind == TXT:
        text = data.decode("utf-8", errors="replace")
    else:
        raise UnsupportedFileType(content_type or filename or "unknown")
    return text.strip()
