"""
Client for the OpenAI-compatible OCR inference endpoint
"""

from typing import Optional

import httpx
from openai import OpenAI, APIConnectionError, APIStatusError, APITimeoutError
from pydantic import ValidationError

from schemas import ChatCompletionResponse, OcrRequest, OcrResult
from utils.config import EndpointConfig
from utils.logger import logger


class OcrClient:
    """Recognize text in one image per chat-completions call"""

    def __init__(self, endpoint: EndpointConfig, http_client: Optional[httpx.Client] = None):
        """
        Initialize the OCR client

        Args:
            endpoint: Endpoint address, token, model and limits
            http_client: Optional httpx client (used by tests to fake the endpoint)
        """
        self.endpoint = endpoint
        self.client = OpenAI(
            api_key=endpoint.token,
            base_url=f"{endpoint.base_url}/v1",
            timeout=endpoint.request_timeout,
            max_retries=endpoint.max_retries,
            http_client=http_client
        )
        logger.debug(f"OCR client initialized - {endpoint.model} at {endpoint.chat_completions_url}")

    def build_request(self, image_bytes: bytes, mime_type: str) -> OcrRequest:
        return OcrRequest(
            image_bytes=image_bytes,
            mime_type=mime_type,
            max_tokens=self.endpoint.max_tokens,
            model=self.endpoint.model
        )

    def recognize(self, image_bytes: bytes, mime_type: str, page_number: int = 1) -> OcrResult:
        """
        Send one image to the endpoint and extract the recognized text

        Args:
            image_bytes: Raw image bytes
            mime_type: MIME type used in the data URI
            page_number: Page this image belongs to

        Returns:
            OcrResult; never raises for HTTP or transport failures
        """
        request = self.build_request(image_bytes, mime_type)

        try:
            raw = self.client.chat.completions.with_raw_response.create(
                model=request.model,
                messages=request.messages(),
                max_tokens=request.max_tokens
            )
        except APIStatusError as e:
            return OcrResult(
                page_number=page_number,
                status_code=e.status_code,
                raw_body=e.response.text,
                error=f"HTTP {e.status_code}"
            )
        except APITimeoutError:
            return OcrResult(
                page_number=page_number,
                error=f"request timed out after {self.endpoint.request_timeout:g}s"
            )
        except APIConnectionError as e:
            return OcrResult(
                page_number=page_number,
                error=f"connection failed: {e}"
            )

        response = raw.http_response
        body = response.text
        if response.status_code != 200:
            return OcrResult(
                page_number=page_number,
                status_code=response.status_code,
                raw_body=body,
                error=f"HTTP {response.status_code}"
            )

        return self._parse_response(body, page_number)

    def _parse_response(self, body: str, page_number: int) -> OcrResult:
        """Extract choices[0].message.content, falling back to the raw body"""
        try:
            completion = ChatCompletionResponse.model_validate_json(body)
        except ValidationError:
            logger.warning(f"⚠️ Page {page_number}: unexpected response format, using raw body as text")
            return OcrResult(
                page_number=page_number,
                text=body,
                status_code=200,
                raw_body=body,
                fallback=True
            )

        return OcrResult(
            page_number=page_number,
            text=completion.choices[0].message.content,
            status_code=200,
            raw_body=body
        )

    def close(self) -> None:
        self.client.close()
