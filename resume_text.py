#!/usr/bin/env python3
"""
Resume text extraction

Uploaded resumes arrive either as PDFs or as plain text. The model only ever
sees text, so PDFs are run through pypdf first.
"""

import re
import sys
from io import BytesIO
from pathlib import Path
from typing import Optional

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from performance_monitor import timed

ALLOWED_EXTENSIONS = {'pdf', 'txt'}

EMPTY_TEXT_ERROR = "Could not extract any text from the resume."


def allowed_file(filename: str) -> bool:
    return '.' in (filename or '') and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def _clean_page(text: str) -> str:
    lines = (re.sub(r'[ \t\f\v]+', ' ', line).strip() for line in text.splitlines())
    return '\n'.join(line for line in lines if line)


def extract_text_from_pdf(data: bytes) -> str:
    """
    Extract the text of every page, one page per block.

    Raises:
        ValueError: if the data is not a readable PDF
    """
    try:
        reader = PdfReader(BytesIO(data))
        if reader.is_encrypted:
            reader.decrypt('')
        pages = [_clean_page(page.extract_text() or '') for page in reader.pages]
    except (PyPdfError, ValueError, KeyError, TypeError) as e:
        raise ValueError(f"Could not read PDF: {e}") from e

    return '\n'.join(pages)


def extract_text_from_txt(data: bytes) -> str:
    try:
        return data.decode('utf-8-sig')
    except UnicodeDecodeError:
        return data.decode('latin-1')


def extract_resume_text(filename: str, data: bytes, content_type: Optional[str] = None) -> str:
    """
    Extract plain text from an uploaded resume.

    Args:
        filename: Original upload name, used to pick the extractor
        data: Raw file contents
        content_type: MIME type reported by the client, if any

    Raises:
        ValueError: for unreadable files or when no text comes out
    """
    is_pdf = content_type == 'application/pdf' or Path(filename or '').suffix.lower() == '.pdf'

    with timed('text_extraction'):
        text = (extract_text_from_pdf(data) if is_pdf else extract_text_from_txt(data)).strip()
        if not text:
            raise ValueError(EMPTY_TEXT_ERROR)

    print(f"📄 Extracted {len(text)} characters from {filename or 'upload'}", file=sys.stderr)
    return text
