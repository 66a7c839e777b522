"""
Pytest configuration for project root.

Ensures project modules can be imported in tests and provides shared
fixtures: generated PDFs, a fake OCR endpoint and captured log output.
"""

import json
import sys
from pathlib import Path

import httpx
import pytest

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from loguru import logger  # noqa: E402

from utils.config import Config, EndpointConfig  # noqa: E402


def make_pdf(path: Path, page_texts) -> Path:
    """Write a PDF with one page per text"""
    import fitz

    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page(width=200, height=200)
        page.insert_text((20, 50), text)
    doc.save(str(path))
    doc.close()
    return path


def chat_completion(content: str) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "model": "dots-ocr",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


class FakeEndpoint:
    """
    In-process stand-in for the inference server

    Chat completion responses are served from a queue in call order; each
    entry is either a string (recognized text) or an httpx.Response.
    """

    def __init__(self, responses=(), health_status: int = 200):
        self.responses = list(responses)
        self.health_status = health_status
        self.requests = []
        self.health_requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/health":
            self.health_requests.append(request)
            return httpx.Response(self.health_status)
        if request.url.path == "/v1/chat/completions":
            self.requests.append(request)
            reply = self.responses.pop(0)
            if isinstance(reply, httpx.Response):
                return reply
            return httpx.Response(200, json=chat_completion(reply))
        return httpx.Response(404)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def payloads(self):
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def endpoint_config():
    return EndpointConfig(host="ocr.test", port=8000, token="test-token")


@pytest.fixture
def config(endpoint_config):
    return Config(endpoint=endpoint_config)


@pytest.fixture
def log_messages():
    """Capture loguru records as 'LEVEL|message' strings"""
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.rstrip("\n")), level="DEBUG", format="{level}|{message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def pdf_factory(tmp_path):
    """Build PDFs in tmp_path: pdf_factory("doc.pdf", ["A", "B"])"""
    def factory(name, page_texts):
        return make_pdf(tmp_path / name, page_texts)
    return factory


@pytest.fixture
def fake_endpoint():
    """Build a FakeEndpoint: fake_endpoint(["A", httpx.Response(500)])"""
    return FakeEndpoint
