"""
QuickAI Backend - PDF Text Extraction
======================================

What:  Converts uploaded PDF bytes into plain text with pypdf.
How:   Parsing is CPU-bound and synchronous; it runs in Starlette's threadpool.
Who:   Called by ActionService.review_resume.
"""

import logging
from io import BytesIO

from pypdf import PdfReader
from starlette.concurrency import run_in_threadpool

from quickai.exceptions import DocumentExtractionError

logger = logging.getLogger(__name__)


def _extract(data: bytes) -> str:
    reader = PdfReader(BytesIO(data))
    pages = [page.extract_text() or "" for page in reader.pages]
    return "\n".join(pages).strip()


class DocumentService:
    """PDF → text."""

    async def extract_text(self, data: bytes) -> str:
        """
        Extract the text layer of a PDF.

        Returns:
            Page texts joined by newlines. Scanned PDFs without a text layer
            yield an empty string.

        Raises:
            DocumentExtractionError: The bytes are not a readable PDF.
        """
        try:
            text = await run_in_threadpool(_extract, data)
        except Exception as e:
            logger.error("PDF extraction failed: %s", str(e))
            raise DocumentExtractionError(
                message=f"Could not read the uploaded PDF: {e}",
                context={"error_type": type(e).__name__, "size": len(data)},
            ) from e

        logger.info("Extracted %d chars from PDF (%d bytes)", len(text), len(data))
        return text


document_service = DocumentService()
