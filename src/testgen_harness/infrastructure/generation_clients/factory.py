"""
Generation client factory

Creates the client instance for the configured generation service.
"""

from __future__ import annotations

from testgen_harness.harness_config import HarnessConfig, load_config
from testgen_harness.infrastructure.generation_clients.base import GenerationClient
from testgen_harness.infrastructure.generation_clients.http import HttpGenerationClient


def create_client(config: HarnessConfig | None = None, api_url: str | None = None) -> GenerationClient:
    """
    Create the generation client

    Args:
        config: HarnessConfig (loads from env if not provided)
        api_url: Endpoint override (takes priority over the config)

    Returns:
        GenerationClient: The client instance
    """
    if config is None:
        config = load_config()
    return HttpGenerationClient(api_url or config.service.api_url)
