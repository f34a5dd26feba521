"""
Generation client package

Provides the interface to the remote test-generation service.
"""

from testgen_harness.infrastructure.generation_clients.base import GenerationClient
from testgen_harness.infrastructure.generation_clients.factory import create_client
from testgen_harness.infrastructure.generation_clients.http import HttpGenerationClient

__all__ = ["GenerationClient", "HttpGenerationClient", "create_client"]
