"""
Prompts and fixed output templates for the OCR pipeline

The instruction text is what the dots-ocr model is served with; all
templates are centrally managed here so request bodies and assembled
output stay consistent.
"""


# ===== OCR REQUEST (Used by OcrClient) =====

# Fixed instruction sent alongside every page image
OCR_INSTRUCTION = "Extract all text from this document."


# ===== OUTPUT ASSEMBLY (Used by PipelineOutput) =====

# Inserted before every page after the first
PAGE_SEPARATOR = "\n\n--- Page {page_number} ---\n\n"

# Placeholder text for a page whose inference call failed
FAILED_PAGE_MARKER = "[OCR failed for page {page_number}: {reason}]"


def get_page_separator(page_number: int) -> str:
    """Separator emitted before the given page"""
    return PAGE_SEPARATOR.format(page_number=page_number)


def get_failed_page_marker(page_number: int, status_code=None, error: str = "") -> str:
    """Explicit marker for a page slot with no recognized text"""
    if status_code is not None:
        reason = f"HTTP {status_code}"
    else:
        reason = error or "no response"
    return FAILED_PAGE_MARKER.format(page_number=page_number, reason=reason)
