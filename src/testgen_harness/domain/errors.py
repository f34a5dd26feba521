"""
Domain Errors

Errors raised while processing a work item. Every WorkItemError is fatal to
the current item only; the batch driver converts it into "skip and continue".
"""


class HarnessError(Exception):
    """Base class for harness errors"""


class WorkItemError(HarnessError):
    """An error that aborts processing of a single work item"""


class RequestConstructionError(WorkItemError):
    """The request payload could not be built or serialized"""


class TransportError(WorkItemError):
    """The connection could not be established or was dropped mid-stream"""


class NonSuccessStatusError(WorkItemError):
    """The service answered with a status other than 200"""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"received non-OK response: {status_code}\nBody: {body}")


class StreamDecodeError(WorkItemError):
    """The response body held malformed or truncated JSON"""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class StreamCancelledError(WorkItemError):
    """Decoding was stopped through the cancellation event"""


class SinkWriteError(HarnessError):
    """A record could not be persisted to the result table"""
