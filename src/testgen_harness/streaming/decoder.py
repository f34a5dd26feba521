"""
Streaming Event Decoder

Decodes a response body made of concatenated JSON objects (not a JSON array)
into stream events, yielding each one as soon as its bytes have arrived.

The decoder keeps a text buffer and repeatedly tries to decode one JSON
value from its head. A failure caused by the input running out means "wait
for more bytes" while the stream is open; any other failure is a syntax
error and is raised at once. Running out of input at end-of-stream means the
body was truncated.
"""

import codecs
import json
import logging
import re
import threading
from typing import Iterable, Iterator

from testgen_harness.domain.constants import (
    DATA_TYPE_FIELD,
    EVENT_CALCULATED_COVERAGE,
    EVENT_SUMMARY,
    FIELD_COVERAGE_INCREASED,
    FIELD_LINES_COVERED,
    FIELD_TESTS_ADDED,
    FIELD_TOTAL_LINES,
)
from testgen_harness.domain.errors import StreamCancelledError, StreamDecodeError
from testgen_harness.domain.value_objects import (
    CalculatedCoverage,
    StreamEvent,
    Summary,
    UnknownEvent,
)

logger = logging.getLogger(__name__)

_JSON_WHITESPACE = " \t\n\r"
_LITERALS = ("true", "false", "null", "NaN", "Infinity", "-Infinity")
_PARTIAL_NUMBER_TAIL_RE = re.compile(r"\.|[eE][-+]?")
_PARTIAL_UNICODE_ESCAPE_RE = re.compile(r"\\?u[0-9a-fA-F]{0,4}")
_STRING_BREAK_RE = re.compile(r'["\x00-\x1f]')


def _text_field(obj: dict, key: str) -> str | None:
    """Return the field when it is a string, otherwise None."""
    value = obj.get(key)
    return value if isinstance(value, str) else None


def parse_event(obj: dict) -> StreamEvent:
    """
    Map one decoded JSON object to its event variant.

    Unrecognized discriminators become UnknownEvent; missing or non-string
    fields become None instead of failing.
    """
    data_type = obj.get(DATA_TYPE_FIELD)
    if data_type == EVENT_CALCULATED_COVERAGE:
        return CalculatedCoverage(text=_text_field(obj, EVENT_CALCULATED_COVERAGE))
    if data_type == EVENT_SUMMARY:
        return Summary(
            coverage_increased=_text_field(obj, FIELD_COVERAGE_INCREASED),
            lines_covered=_text_field(obj, FIELD_LINES_COVERED),
            total_lines=_text_field(obj, FIELD_TOTAL_LINES),
            tests_added=_text_field(obj, FIELD_TESTS_ADDED),
        )
    return UnknownEvent(
        data_type=data_type if isinstance(data_type, str) else None,
        payload=obj,
    )


def _to_event(value: object) -> StreamEvent:
    if not isinstance(value, dict):
        raise StreamDecodeError(f"expected a JSON object, got {type(value).__name__}")
    event = parse_event(value)
    logger.debug("Decoded event: %s", event)
    return event


def _ran_out_of_input(buffer: str, error: json.JSONDecodeError) -> bool:
    """
    Tell a value cut short by the end of the buffer from a syntax error.

    Only the first case can still succeed once more bytes arrive.
    """
    if error.pos >= len(buffer) or error.msg.startswith("Unterminated string"):
        return True
    tail = buffer[error.pos:]
    if error.msg.startswith("Invalid \\uXXXX escape"):
        return _PARTIAL_UNICODE_ESCAPE_RE.fullmatch(tail) is not None
    # Partial literal ("tr", "-Inf") or a number stopped at "1." / "1e+"
    return (
        any(literal.startswith(tail) for literal in _LITERALS)
        or _PARTIAL_NUMBER_TAIL_RE.fullmatch(tail) is not None
    )


def _drain(
    decoder: json.JSONDecoder, buffer: str
) -> tuple[list[object], str, json.JSONDecodeError | None]:
    """
    Decode every complete value at the head of the buffer.

    Returns the decoded values, the undecoded rest and the error that stopped
    decoding (None when the rest is empty).
    """
    values: list[object] = []
    while True:
        buffer = buffer.lstrip(_JSON_WHITESPACE)
        if not buffer:
            return values, buffer, None
        try:
            value, end = decoder.raw_decode(buffer)
        except json.JSONDecodeError as e:
            return values, buffer, e
        values.append(value)
        buffer = buffer[end:]


def _can_complete(pending: json.JSONDecodeError | None, text: str) -> bool:
    """Whether newly arrived text can change the outcome of the last attempt."""
    if pending is None or not pending.msg.startswith("Unterminated string"):
        return True
    # Inside a string only a quote ends it and only a control character breaks it
    return _STRING_BREAK_RE.search(text) is not None


def decode_events(
    chunks: Iterable[bytes],
    cancel_event: threading.Event | None = None,
) -> Iterator[StreamEvent]:
    """
    Lazily decode stream events from a byte stream.

    Args:
        chunks: Response body chunks, in arrival order
        cancel_event: Optional event checked between reads; decoding stops when it is set

    Yields:
        StreamEvent: One per decoded JSON object

    Raises:
        StreamDecodeError: On malformed/truncated JSON, invalid UTF-8 or non-object values
        StreamCancelledError: If cancel_event was set
    """
    decoder = json.JSONDecoder()
    text_decoder = codecs.getincrementaldecoder("utf-8")()
    buffer = ""
    pending: json.JSONDecodeError | None = None

    for chunk in chunks:
        if cancel_event is not None and cancel_event.is_set():
            raise StreamCancelledError("stream decoding cancelled")
        try:
            text = text_decoder.decode(chunk)
        except UnicodeDecodeError as e:
            raise StreamDecodeError("response body is not valid UTF-8", cause=e) from e
        buffer += text
        if not _can_complete(pending, text):
            continue
        values, buffer, pending = _drain(decoder, buffer)
        for value in values:
            yield _to_event(value)
        if pending is not None and not _ran_out_of_input(buffer, pending):
            raise StreamDecodeError("malformed JSON in stream", cause=pending) from pending

    try:
        buffer += text_decoder.decode(b"", final=True)
    except UnicodeDecodeError as e:
        raise StreamDecodeError("response body ended inside a UTF-8 sequence", cause=e) from e
    values, buffer, error = _drain(decoder, buffer)
    for value in values:
        yield _to_event(value)

    if buffer:
        raise StreamDecodeError("error reading JSON stream", cause=error) from error
    logger.info("Stream ended.")
