"""
Health gate tests
"""

import httpx
import pytest

from extractors.health import HealthGate, check_healthy
from utils.errors import EndpointUnavailableError


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_healthy_on_200():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200)

    assert check_healthy("http://ocr.test:8000", http_client=_client(handler))
    assert seen == ["http://ocr.test:8000/health"]


@pytest.mark.parametrize("status", [204, 301, 404, 500, 503])
def test_only_200_counts(status):
    assert not check_healthy("http://ocr.test:8000", http_client=_client(lambda r: httpx.Response(status)))


def test_connection_refused_is_unhealthy():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    assert not check_healthy("http://ocr.test:8000", http_client=_client(handler))


def test_timeout_is_unhealthy():
    def handler(request):
        raise httpx.ConnectTimeout("slow", request=request)

    assert not check_healthy("http://ocr.test:8000", http_client=_client(handler))


def test_gate_raises_when_unhealthy(endpoint_config):
    gate = HealthGate(endpoint_config, http_client=_client(lambda r: httpx.Response(503)))

    with pytest.raises(EndpointUnavailableError, match="port 8000"):
        gate.ensure_healthy()


def test_gate_passes_when_healthy(endpoint_config):
    gate = HealthGate(endpoint_config, http_client=_client(lambda r: httpx.Response(200)))
    gate.ensure_healthy()
