"""
Fatal error types for the OCR pipeline

Per-page inference failures are not exceptions; they are recorded on the
page's OcrResult. Everything here aborts the run.
"""


class PipelineError(Exception):
    """Base class for conditions that abort the whole run"""


class InputNotFoundError(PipelineError):
    """Input path is missing or is not a regular file"""


class EndpointUnavailableError(PipelineError):
    """OCR endpoint failed its health check"""


class ConversionError(PipelineError):
    """Paginated document could not be rendered into any page image"""


class InvalidPageError(PipelineError):
    """Requested page does not exist in the source document"""

    def __init__(self, page_number: int, page_count: int):
        self.page_number = page_number
        self.page_count = page_count
        super().__init__(
            f"Page {page_number} does not exist (document has {page_count} page(s))"
        )
