"""
HTTP generation client

Posts the request as JSON and streams the response body with httpx.
The client is configured with no timeout: the service reports progress over
an unbounded duration, so a stuck call blocks until the far end closes the
connection or the process is stopped.
"""

import json
import logging
from contextlib import contextmanager
from typing import Iterator

import httpx

from testgen_harness.domain.constants import DEFAULT_API_URL
from testgen_harness.domain.errors import (
    NonSuccessStatusError,
    RequestConstructionError,
    TransportError,
)
from testgen_harness.domain.value_objects import GenerationRequest
from testgen_harness.infrastructure.generation_clients.base import GenerationClient

logger = logging.getLogger(__name__)


class HttpGenerationClient(GenerationClient):
    """Client for the generation service's streaming HTTP endpoint"""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Args:
            api_url: Generation endpoint
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.api_url = api_url
        self.client = httpx.Client(timeout=None, transport=transport)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "HttpGenerationClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @staticmethod
    def _encode(request: GenerationRequest) -> bytes:
        try:
            return json.dumps(request.to_payload()).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise RequestConstructionError(f"failed to marshal request body: {e}") from e

    @staticmethod
    def _iter_body(response: httpx.Response) -> Iterator[bytes]:
        try:
            yield from response.iter_bytes()
        except httpx.TransportError as e:
            raise TransportError(f"connection dropped while streaming: {e}") from e

    @contextmanager
    def open_stream(self, request: GenerationRequest) -> Iterator[Iterator[bytes]]:
        body = self._encode(request)
        try:
            with self.client.stream(
                "POST",
                self.api_url,
                content=body,
                headers={"Content-Type": "application/json"},
            ) as response:
                logger.info("Response Status: %d", response.status_code)
                if response.status_code != httpx.codes.OK:
                    raw = response.read()
                    raise NonSuccessStatusError(
                        response.status_code,
                        raw.decode("utf-8", errors="replace"),
                    )
                logger.info("Streaming response for %s", request.source_file_path)
                yield self._iter_body(response)
        except httpx.TransportError as e:
            raise TransportError(f"failed to send POST request: {e}") from e
