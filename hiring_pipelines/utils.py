from __future__ import annotations
from pathlib import Path
from typing import Optional
from pypdf import PdfReader
from pypdf.errors import PdfReadError

TEXT_SUFFIXES = (".txt", ".md", ".csv")


def read_text_file(path: str) -> str:
    p = Path(path)
    return p.read_text(encoding="utf-8")


def pdf_to_text(path: str) -> Optional[str]:
    try:
        reader = PdfReader(path)
        pages = [page.extract_text() or "" for page in reader.pages]
    except PdfReadError:
        return None
    return "\n".join(pages).strip() or None


def load_document(path: str) -> str:
    """Text of a CV, job description, feedback, transcript or values file."""
    path_lower = path.lower()
    if path_lower.endswith(TEXT_SUFFIXES):
        return read_text_file(path)
    if path_lower.endswith(".pdf"):
        txt = pdf_to_text(path)
        if txt:
            return txt
        raise RuntimeError(f"Could not extract text from PDF {path}. Make sure the file is not encrypted or scanned.")
    raise ValueError(f"Unsupported document format: {path}. Use .txt, .md, .csv or .pdf")
