"""
Document-to-text pipeline: health gate, format detection, page splitting,
per-page OCR and ordered assembly
"""

import tempfile
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing, contextmanager, nullcontext
from enum import Enum
from pathlib import Path
from typing import Callable, ContextManager, Iterator, List, Optional, TextIO, Union

from extractors.format_detector import detect_document
from extractors.health import HealthGate
from extractors.ocr_client import OcrClient
from processors.page_splitter import PageSplitter
from prompts import get_page_separator
from schemas import OcrResult, Page, PipelineOutput
from utils.config import Config
from utils.logger import get_progress_bar, log_step, logger
from utils.validators import validate_input_file


# Suffixes for staged in-memory input, so extension detection agrees with the sniffed type
MIME_SUFFIXES = {
    "application/pdf": ".pdf",
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/tiff": ".tiff",
    "image/bmp": ".bmp",
    "image/webp": ".webp",
}


@contextmanager
def _staged_input(data: bytes, mime_type: str) -> Iterator[Path]:
    """Write document bytes to a temporary file that lives for the block"""
    with tempfile.TemporaryDirectory(prefix="pdf-ocr-stdin-") as workdir:
        path = Path(workdir) / f"stdin{MIME_SUFFIXES.get(mime_type, '.png')}"
        path.write_bytes(data)
        yield path


class PipelineState(str, Enum):
    IDLE = "idle"
    HEALTH_CHECKING = "health_checking"
    DETECTING = "detecting"
    SPLITTING = "splitting"
    RECOGNIZING = "recognizing"
    ASSEMBLING = "assembling"
    DONE = "done"
    ABORTED = "aborted"


class _PageEmitter:
    """Streams page texts to a sink in order, with separators between pages"""

    def __init__(self, sink: Optional[TextIO]):
        self.sink = sink
        self.emitted = 0

    def emit(self, result: OcrResult) -> None:
        if self.sink is None:
            return
        if self.emitted > 0:
            self.sink.write(get_page_separator(result.page_number))
        self.sink.write(result.output_text())
        self.sink.flush()
        self.emitted += 1

    def finish(self) -> None:
        if self.sink is not None and self.emitted > 0:
            self.sink.write("\n")
            self.sink.flush()


class PipelineRunner:
    """Turn a PDF or image into ordered plain text via the OCR endpoint"""

    def __init__(
        self,
        config: Config,
        ocr_client: Optional[OcrClient] = None,
        health_gate: Optional[HealthGate] = None,
        page_splitter: Optional[PageSplitter] = None
    ):
        """
        Initialize the pipeline

        Args:
            config: Configuration built once at process start
            ocr_client: Optional OCR client (defaults to one for config.endpoint)
            health_gate: Optional health gate (defaults to one for config.endpoint)
            page_splitter: Optional page splitter (defaults to config DPI)
        """
        self.config = config
        self._owns_client = ocr_client is None
        self.ocr_client = ocr_client or OcrClient(config.endpoint)
        self.health_gate = health_gate or HealthGate(config.endpoint)
        self.page_splitter = page_splitter or PageSplitter(dpi=config.processing.image_dpi)
        self.state = PipelineState.IDLE

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Close the OCR client if this runner created it"""
        if self._owns_client:
            self.ocr_client.close()

    def _transition(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline state: {self.state.value} -> {state.value}")
        self.state = state

    def run(
        self,
        input_path: Union[str, Path],
        page_number: Optional[int] = None,
        sink: Optional[TextIO] = None,
        mime_type: Optional[str] = None
    ) -> PipelineOutput:
        """
        Main entry point for document-to-text conversion

        Args:
            input_path: PDF or image file
            page_number: Optional 1-based page of a PDF to process alone
            sink: Optional text stream that receives output page by page
            mime_type: Optional MIME type overriding extension detection

        Returns:
            Ordered per-page results

        Raises:
            PipelineError: on any fatal condition; per-page OCR failures
                are recorded in the output instead
        """
        return self._run(nullcontext(input_path), page_number, sink, mime_type)

    def run_data(
        self,
        data: bytes,
        mime_type: str,
        page_number: Optional[int] = None,
        sink: Optional[TextIO] = None
    ) -> PipelineOutput:
        """
        Convert an in-memory document (e.g. read from stdin)

        The bytes are written to a scoped temporary file only after the
        endpoint has passed its health check.
        """
        return self._run(_staged_input(data, mime_type), page_number, sink, mime_type)

    def _run(
        self,
        source: ContextManager[Union[str, Path]],
        page_number: Optional[int],
        sink: Optional[TextIO],
        mime_type: Optional[str]
    ) -> PipelineOutput:
        start_time = time.time()
        output = PipelineOutput()
        emitter = _PageEmitter(sink)

        try:
            self._transition(PipelineState.HEALTH_CHECKING)
            self.health_gate.ensure_healthy()

            with source as input_path:
                self._transition(PipelineState.DETECTING)
                path = validate_input_file(str(input_path))
                document = detect_document(path, mime_type)
                logger.debug(f"Detected {document.mime_type} ({document.kind.value})")

                if document.is_paginated:
                    self._transition(PipelineState.SPLITTING)
                    log_step("Splitting", f"{path.name} at {self.page_splitter.dpi} DPI")
                    with self.page_splitter.split(path, page_number) as pages:
                        self._transition(PipelineState.RECOGNIZING)
                        with closing(self._recognize_pages(pages)) as results:
                            for result in results:
                                output.results.append(result)
                                emitter.emit(result)
                else:
                    if page_number is not None:
                        logger.warning("--page ignored for image files")
                    self._transition(PipelineState.RECOGNIZING)
                    logger.info(f"Processing image: {path}")
                    result = self._recognize(path.read_bytes(), document.mime_type, 1)
                    output.results.append(result)
                    emitter.emit(result)

            self._transition(PipelineState.ASSEMBLING)
            emitter.finish()
        except BaseException:
            self._transition(PipelineState.ABORTED)
            raise

        self._transition(PipelineState.DONE)

        processing_time = time.time() - start_time
        failed = output.failed_pages
        if failed:
            logger.warning(
                f"Done. Processed {output.page_count} page(s), "
                f"{len(failed)} failed (pages {', '.join(map(str, failed))})"
            )
        else:
            logger.info(f"✨ Done. Processed {output.page_count} page(s)")
        logger.info(f"⏱️ Processing time: {processing_time:.2f} seconds")
        return output

    def _recognize_pages(self, pages: List[Page]) -> Iterator[OcrResult]:
        """
        Recognize pages and yield results in page order

        With more than one worker the calls overlap, but futures are
        consumed in submission order so emission order never changes.
        Closing the generator early cancels every page not yet started.
        """
        total = len(pages)
        workers = min(self.config.processing.workers, total)

        with self._progress(total) as advance:
            if workers <= 1:
                for position, page in enumerate(pages, 1):
                    result = self._recognize_page(page, position, total)
                    advance()
                    yield result
                return

            logger.info(f"🚀 Recognizing {total} pages with {workers} workers")
            executor = ThreadPoolExecutor(max_workers=workers)
            try:
                futures = [
                    executor.submit(self._recognize_page, page, position, total)
                    for position, page in enumerate(pages, 1)
                ]
                for future in futures:
                    result = future.result()
                    advance()
                    yield result
            finally:
                executor.shutdown(wait=False, cancel_futures=True)

    def _recognize_page(self, page: Page, position: int, total: int) -> OcrResult:
        logger.info(f"📄 Processing page {position}/{total}...")
        return self._recognize(page.image_bytes, page.mime_type, page.index)

    def _recognize(self, image_bytes: bytes, mime_type: str, page_number: int) -> OcrResult:
        result = self.ocr_client.recognize(image_bytes, mime_type, page_number)
        if not result.ok:
            if result.status_code is not None:
                logger.warning(f"⚠️ Page {page_number}: API returned HTTP {result.status_code}")
            else:
                logger.warning(f"⚠️ Page {page_number}: OCR request failed: {result.error}")
            if result.raw_body:
                logger.warning(result.raw_body)
        return result

    @contextmanager
    def _progress(self, total: int) -> Iterator[Callable[[], None]]:
        """Optional rich progress bar; yields a callable advancing it by one page"""
        if not self.config.processing.show_progress:
            yield lambda: None
            return

        with get_progress_bar() as progress:
            task = progress.add_task("Recognizing pages", total=total)
            yield lambda: progress.advance(task)
