"""
Health gate for the OCR inference endpoint
"""

from typing import Optional

import httpx

from utils.config import EndpointConfig
from utils.errors import EndpointUnavailableError
from utils.logger import logger


def check_healthy(base_url: str, timeout: float = 5.0, http_client: Optional[httpx.Client] = None) -> bool:
    """
    GET {base_url}/health; only HTTP 200 counts as healthy

    Network errors and timeouts are reported as unhealthy.
    """
    url = f"{base_url.rstrip('/')}/health"
    try:
        if http_client is not None:
            response = http_client.get(url, timeout=timeout)
        else:
            with httpx.Client(timeout=timeout) as client:
                response = client.get(url)
    except httpx.TimeoutException:
        logger.debug(f"Health check timed out after {timeout}s: {url}")
        return False
    except httpx.HTTPError as e:
        logger.debug(f"Health check failed: {url}: {e}")
        return False

    if response.status_code != 200:
        logger.debug(f"Health check returned HTTP {response.status_code}: {url}")
        return False
    return True


class HealthGate:
    """Verifies the endpoint is reachable before any page work starts"""

    def __init__(self, endpoint: EndpointConfig, http_client: Optional[httpx.Client] = None):
        self.endpoint = endpoint
        self.http_client = http_client

    def ensure_healthy(self) -> None:
        if not check_healthy(self.endpoint.base_url, self.endpoint.health_timeout, self.http_client):
            raise EndpointUnavailableError(
                f"OCR service is not reachable on port {self.endpoint.port} "
                f"({self.endpoint.base_url}/health)"
            )
        logger.debug(f"OCR service healthy at {self.endpoint.base_url}")
