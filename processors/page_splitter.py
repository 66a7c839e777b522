"""
PDF page splitter: renders pages to PNG images in a run-scoped workspace
"""

import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

import fitz  # PyMuPDF

from schemas import Page
from utils.errors import ConversionError, InvalidPageError
from utils.logger import logger

RENDER_DPI = 150

_PAGE_FILE_PATTERN = re.compile(r"^page-(\d+)\.png$")


def natural_sort_key(name: str) -> List[Union[int, str]]:
    """Sort key that orders embedded numbers numerically (page-2 < page-10)"""
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", name)]


class PageSplitter:
    """Convert PDF pages to standalone raster images for OCR"""

    def __init__(self, dpi: int = RENDER_DPI):
        """
        Initialize page splitter

        Args:
            dpi: Rendering resolution (150 unless overridden for tests)
        """
        self.dpi = dpi

    @contextmanager
    def split(self, pdf_path: Union[str, Path], page_number: Optional[int] = None) -> Iterator[List[Page]]:
        """
        Render a PDF into page images that live only inside this context

        Args:
            pdf_path: Path to the PDF
            page_number: Optional 1-based page to render instead of all pages

        Yields:
            Pages in ascending page order

        Raises:
            InvalidPageError: page_number outside the document
            ConversionError: document unreadable or no page rendered
        """
        with tempfile.TemporaryDirectory(prefix="pdf-ocr-pages-") as workdir:
            workspace = Path(workdir)
            self._render(Path(pdf_path), workspace, page_number)
            pages = self._collect_pages(workspace)

            if not pages:
                raise ConversionError(f"No pages were converted from {pdf_path}. Check the PDF file.")

            logger.info(f"✅ Converted {len(pages)} page(s) to images at {self.dpi} DPI")
            yield pages
        logger.debug(f"Removed page workspace {workdir}")

    def _render(self, pdf_path: Path, workspace: Path, page_number: Optional[int]) -> None:
        """Write page-<n>.png for each requested page into the workspace"""
        try:
            doc = fitz.open(str(pdf_path), filetype="pdf")
        except (fitz.FileDataError, RuntimeError, ValueError) as e:
            raise ConversionError(f"Cannot open PDF {pdf_path}: {e}") from e

        try:
            total_pages = doc.page_count
            if page_number is not None:
                if page_number < 1 or page_number > total_pages:
                    raise InvalidPageError(page_number, total_pages)
                page_indexes = [page_number - 1]
                logger.info(f"Converting PDF page {page_number} to image...")
            else:
                page_indexes = range(total_pages)
                logger.info(f"Converting {total_pages} PDF page(s) to images...")

            mat = fitz.Matrix(self.dpi / 72.0, self.dpi / 72.0)
            for page_index in page_indexes:
                try:
                    pix = doc[page_index].get_pixmap(matrix=mat)
                    pix.save(str(workspace / f"page-{page_index + 1}.png"))
                    pix = None
                except RuntimeError as e:
                    raise ConversionError(f"Failed to render page {page_index + 1}: {e}") from e
        finally:
            doc.close()

    def _collect_pages(self, workspace: Path) -> List[Page]:
        """Gather rendered files in natural numeric order"""
        files = sorted(
            (f for f in workspace.iterdir() if _PAGE_FILE_PATTERN.match(f.name)),
            key=lambda f: natural_sort_key(f.name)
        )
        return [
            Page(index=int(_PAGE_FILE_PATTERN.match(f.name).group(1)), path=f)
            for f in files
        ]
