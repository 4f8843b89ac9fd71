from __future__ import annotations

import io
import logging
import os
import typing as t

from pypdf import PdfReader

from quest.errors import DocumentParseError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


class FileUtils:
    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def looks_like_pdf(self, filename: str | None, mimetype: str | None = None) -> bool:
        if mimetype and mimetype.split(";")[0].strip().lower() == PDF_MIME_TYPE:
            return True
        return bool(filename) and os.path.splitext(t.cast(str, filename))[1].lower() == ".pdf"

    def extract_text_from_pdf(self, pdf_path: str) -> str:
        try:
            data = self.read_bytes(pdf_path)
        except OSError as e:
            raise DocumentParseError(f"Could not read {os.path.basename(pdf_path)}.") from e
        return self.extract_text_from_pdf_bytes(data)

    def extract_text_from_pdf_bytes(self, data: bytes) -> str:
        """Return every page's text in page order.

        Text runs on a page are joined with single spaces and each page ends
        with a newline. Any failure raises :class:`DocumentParseError` and no
        partial text is returned.
        """
        if not data:
            raise DocumentParseError()
        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [self._page_text(page) for page in reader.pages]
        except Exception as e:
            logger.warning("PDF extraction failed: %s", e)
            raise DocumentParseError() from e

        logger.info("Extracted %d page(s) from PDF", len(pages))
        return "".join(p + "\n" for p in pages)

    def _page_text(self, page: t.Any) -> str:
        runs: list[str] = []

        def visitor(text: str, *_: t.Any) -> None:
            if text and text.strip():
                runs.append(text.strip())

        page.extract_text(visitor_text=visitor)
        return " ".join(runs)
