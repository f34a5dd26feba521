"""
Streaming Layer

Decodes the generation service's response body into stream events.
"""

from testgen_harness.streaming.decoder import decode_events, parse_event

__all__ = ["decode_events", "parse_event"]
