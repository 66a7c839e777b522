"""
Data models for the document-to-text pipeline
"""

import base64
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from prompts import OCR_INSTRUCTION, get_failed_page_marker, get_page_separator


class DocumentKind(str, Enum):
    IMAGE = "image"
    PAGINATED = "paginated"


class Document(BaseModel):
    """Input file with its detected MIME type and classification"""
    model_config = ConfigDict(frozen=True)

    path: Path
    mime_type: str
    kind: DocumentKind

    @property
    def is_paginated(self) -> bool:
        return self.kind == DocumentKind.PAGINATED


class Page(BaseModel):
    """
    One rendered page image inside the splitter's workspace

    The backing file only exists while the workspace is open, so
    image_bytes must be read before the split context exits.
    """
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=1)
    path: Path
    mime_type: str = "image/png"

    @property
    def image_bytes(self) -> bytes:
        return self.path.read_bytes()


class OcrRequest(BaseModel):
    """Input of a single chat-completions inference call"""
    image_bytes: bytes
    mime_type: str
    instruction: str = OCR_INSTRUCTION
    max_tokens: int = 2048
    model: str = "dots-ocr"

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.image_bytes).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    def messages(self) -> List[Dict[str, Any]]:
        return [{
            "role": "user",
            "content": [
                {
                    "type": "image_url",
                    "image_url": {"url": self.data_uri}
                },
                {
                    "type": "text",
                    "text": self.instruction
                }
            ]
        }]

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for POST /v1/chat/completions"""
        return {
            "model": self.model,
            "messages": self.messages(),
            "max_tokens": self.max_tokens,
        }


class OcrResult(BaseModel):
    """
    Outcome of one inference call

    Successful calls carry text; failed calls carry the HTTP status (None
    for transport errors such as timeouts) and the raw response body.
    """
    page_number: int = 1
    text: Optional[str] = None
    status_code: Optional[int] = None
    raw_body: Optional[str] = None
    error: Optional[str] = None
    fallback: bool = False

    @property
    def ok(self) -> bool:
        return self.status_code == 200 and self.text is not None

    def output_text(self) -> str:
        """Text placed in this page's output slot"""
        if self.ok:
            return self.text
        return get_failed_page_marker(self.page_number, self.status_code, self.error or "")


# Response schema of an OpenAI-compatible chat completion; only the fields
# the pipeline reads are declared.

class ChatMessage(BaseModel):
    content: str


class ChatChoice(BaseModel):
    message: ChatMessage


class ChatCompletionResponse(BaseModel):
    choices: List[ChatChoice] = Field(min_length=1)


class PipelineOutput(BaseModel):
    """Ordered per-page results of one run"""
    results: List[OcrResult] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.results)

    @property
    def failed_pages(self) -> List[int]:
        return [r.page_number for r in self.results if not r.ok]

    def render(self) -> str:
        """Concatenate page texts with separators before every page after the first"""
        chunks = []
        for position, result in enumerate(self.results):
            if position > 0:
                chunks.append(get_page_separator(result.page_number))
            chunks.append(result.output_text())
        return "".join(chunks)
