"""
Generation client base class

Defines the abstract base class inherited by all generation clients.
Opening the stream and reading its body are the only operations in the
harness that may block without bound.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterator

from testgen_harness.domain.value_objects import GenerationRequest


class GenerationClient(ABC):
    """Abstract base class for generation clients"""

    @abstractmethod
    def open_stream(self, request: GenerationRequest) -> AbstractContextManager[Iterator[bytes]]:
        """
        Send a request and expose the response body as byte chunks.

        The returned context manager closes the connection on exit.

        Raises:
            RequestConstructionError: If the payload cannot be serialized
            TransportError: If the connection fails or drops mid-body
            NonSuccessStatusError: If the status is not 200
        """
        pass

    def close(self) -> None:
        """Release connection resources"""
        pass
