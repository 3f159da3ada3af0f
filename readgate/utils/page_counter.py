"""Page count resolution for study materials."""
import logging
import math
from pathlib import Path
from typing import Optional

import pypdf

from readgate.core.config import settings

logger = logging.getLogger(__name__)


class PageCounter:
    """Work out how many pages a material has."""

    @staticmethod
    def is_pdf(file_type: Optional[str], file_path: Optional[str] = None) -> bool:
        if file_type and "pdf" in file_type.lower():
            return True
        return bool(file_path) and Path(file_path).suffix.lower() == ".pdf"

    @staticmethod
    def estimate_pages(file_size: int, file_type: str) -> int:
        """
        Estimate the page count from the file size.

        Non-PDF files are treated as a single page. PDFs assume an average
        page size and are clamped to a sane range.
        """
        if not PageCounter.is_pdf(file_type):
            return 1
        estimated = math.ceil((file_size or 0) / settings.AVERAGE_PDF_PAGE_BYTES)
        return max(1, min(estimated, settings.MAX_ESTIMATED_PAGES))

    @staticmethod
    def count_pdf_pages(file_path: str) -> int:
        """Read the real page count of a PDF on disk.

        Raises:
            ValueError: If the file cannot be parsed
        """
        try:
            with open(file_path, 'rb') as file:
                return len(pypdf.PdfReader(file).pages)
        except Exception as e:
            raise ValueError(f"Error reading PDF page count: {str(e)}")

    @staticmethod
    def count_pages(material) -> int:
        if material.page_count:
            return material.page_count

        if material.file_path and PageCounter.is_pdf(material.file_type, material.file_path) \
                and Path(material.file_path).exists():
            try:
                return max(1, PageCounter.count_pdf_pages(material.file_path))
            except ValueError as e:
                logger.warning("Falling back to size estimate for %s: %s", material.id, e)

        return PageCounter.estimate_pages(material.file_size, material.file_type)
