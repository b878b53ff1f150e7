"""Run-level failure codes and the runtime error envelope.

A run ends in exactly one state: ``NO_ERROR`` (the record carries no
``runtime_error``) or one failure code with a human readable message. The
codes are a closed, append-only vocabulary; numbers never change once shipped.

Detecting these conditions is the job of whatever drives the page load. This
module only names them and turns them into the ``RunError`` that goes on the
record.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from .compat import WireEnum
from .exceptions import LhrError
from .fields import STRING, enum_of, wire

log = logging.getLogger(__name__)


class ErrorFamily(Enum):
    """Broad grouping of failure codes."""
    NONE = "none"
    UNKNOWN = "unknown"
    TRACE = "trace"
    NAVIGATION = "navigation"
    PROTOCOL = "protocol"


class ErrorCode(WireEnum):
    """Every failure a run can end in."""
    NO_ERROR = "NO_ERROR", 0
    UNKNOWN_ERROR = "UNKNOWN_ERROR", 1
    NO_SPEEDLINE_FRAMES = "NO_SPEEDLINE_FRAMES", 2
    SPEEDINDEX_OF_ZERO = "SPEEDINDEX_OF_ZERO", 3
    NO_SCREENSHOTS = "NO_SCREENSHOTS", 4
    INVALID_SPEEDLINE = "INVALID_SPEEDLINE", 5
    NO_TRACING_STARTED = "NO_TRACING_STARTED", 6
    NO_NAVSTART = "NO_NAVSTART", 7
    NO_FCP = "NO_FCP", 8
    NO_DCL = "NO_DCL", 9
    NO_DOCUMENT_REQUEST = "NO_DOCUMENT_REQUEST", 10
    FAILED_DOCUMENT_REQUEST = "FAILED_DOCUMENT_REQUEST", 11
    ERRORED_DOCUMENT_REQUEST = "ERRORED_DOCUMENT_REQUEST", 12
    TRACING_ALREADY_STARTED = "TRACING_ALREADY_STARTED", 13
    PARSING_PROBLEM = "PARSING_PROBLEM", 14
    READ_FAILED = "READ_FAILED", 15
    INSECURE_DOCUMENT_REQUEST = "INSECURE_DOCUMENT_REQUEST", 16
    PROTOCOL_TIMEOUT = "PROTOCOL_TIMEOUT", 17
    PAGE_HUNG = "PAGE_HUNG", 18
    DNS_FAILURE = "DNS_FAILURE", 19
    CRI_TIMEOUT = "CRI_TIMEOUT", 20
    NOT_HTML = "NOT_HTML", 21
    NO_RESOURCE_REQUEST = "NO_RESOURCE_REQUEST", 22
    CHROME_INTERSTITIAL_ERROR = "CHROME_INTERSTITIAL_ERROR", 23
    TARGET_CRASHED = "TARGET_CRASHED", 24

    @classmethod
    def fallback(cls):
        # An unreadable code must never look like a clean run.
        return cls.UNKNOWN_ERROR

    @property
    def family(self) -> ErrorFamily:
        return _FAMILIES[self]

    @property
    def default_message(self) -> str:
        return _DEFAULT_MESSAGES[self]


_FAMILIES = {
    ErrorCode.NO_ERROR: ErrorFamily.NONE,
    ErrorCode.UNKNOWN_ERROR: ErrorFamily.UNKNOWN,
    ErrorCode.NO_SPEEDLINE_FRAMES: ErrorFamily.TRACE,
    ErrorCode.SPEEDINDEX_OF_ZERO: ErrorFamily.TRACE,
    ErrorCode.NO_SCREENSHOTS: ErrorFamily.TRACE,
    ErrorCode.INVALID_SPEEDLINE: ErrorFamily.TRACE,
    ErrorCode.NO_TRACING_STARTED: ErrorFamily.TRACE,
    ErrorCode.NO_NAVSTART: ErrorFamily.TRACE,
    ErrorCode.NO_FCP: ErrorFamily.TRACE,
    ErrorCode.NO_DCL: ErrorFamily.TRACE,
    ErrorCode.PARSING_PROBLEM: ErrorFamily.TRACE,
    ErrorCode.READ_FAILED: ErrorFamily.TRACE,
    ErrorCode.NO_RESOURCE_REQUEST: ErrorFamily.TRACE,
    ErrorCode.NO_DOCUMENT_REQUEST: ErrorFamily.NAVIGATION,
    ErrorCode.FAILED_DOCUMENT_REQUEST: ErrorFamily.NAVIGATION,
    ErrorCode.ERRORED_DOCUMENT_REQUEST: ErrorFamily.NAVIGATION,
    ErrorCode.INSECURE_DOCUMENT_REQUEST: ErrorFamily.NAVIGATION,
    ErrorCode.DNS_FAILURE: ErrorFamily.NAVIGATION,
    ErrorCode.NOT_HTML: ErrorFamily.NAVIGATION,
    ErrorCode.CHROME_INTERSTITIAL_ERROR: ErrorFamily.NAVIGATION,
    ErrorCode.TARGET_CRASHED: ErrorFamily.NAVIGATION,
    ErrorCode.PROTOCOL_TIMEOUT: ErrorFamily.PROTOCOL,
    ErrorCode.CRI_TIMEOUT: ErrorFamily.PROTOCOL,
    ErrorCode.PAGE_HUNG: ErrorFamily.PROTOCOL,
    ErrorCode.TRACING_ALREADY_STARTED: ErrorFamily.PROTOCOL,
}

_DEFAULT_MESSAGES = {
    ErrorCode.NO_ERROR: "No error; the results are reliable.",
    ErrorCode.UNKNOWN_ERROR: "An unexpected error occurred while auditing the page.",
    ErrorCode.NO_SPEEDLINE_FRAMES: "The trace did not contain any screenshot frames.",
    ErrorCode.SPEEDINDEX_OF_ZERO: "There was no visual change between the beginning and end of load.",
    ErrorCode.NO_SCREENSHOTS: "The trace did not contain any screenshot events.",
    ErrorCode.INVALID_SPEEDLINE: "The computed Speed Index results are non-finite.",
    ErrorCode.NO_TRACING_STARTED: "The trace did not contain a TracingStartedInPage event.",
    ErrorCode.NO_NAVSTART: "The trace did not contain a navigationStart event.",
    ErrorCode.NO_FCP: "The page did not paint any content.",
    ErrorCode.NO_DCL: "The trace did not contain a DOMContentLoaded event.",
    ErrorCode.NO_DOCUMENT_REQUEST: "No network request could be identified as the main document.",
    ErrorCode.FAILED_DOCUMENT_REQUEST: "The page could not be loaded; the document request failed.",
    ErrorCode.ERRORED_DOCUMENT_REQUEST: "The document request returned an HTTP error status.",
    ErrorCode.TRACING_ALREADY_STARTED: "The browser could not begin tracing; restart it and try again.",
    ErrorCode.PARSING_PROBLEM: "The trace data could not be parsed.",
    ErrorCode.READ_FAILED: "The trace data failed to stream over the protocol.",
    ErrorCode.INSECURE_DOCUMENT_REQUEST: "The page was not loaded securely.",
    ErrorCode.PROTOCOL_TIMEOUT: "A debugger protocol command timed out.",
    ErrorCode.PAGE_HUNG: "The page stopped responding.",
    ErrorCode.DNS_FAILURE: "DNS servers could not resolve the provided domain.",
    ErrorCode.CRI_TIMEOUT: "Timed out connecting to the debugger protocol.",
    ErrorCode.NOT_HTML: "The page provided is not HTML.",
    ErrorCode.NO_RESOURCE_REQUEST: "The trace did not contain a ResourceSendRequest event.",
    ErrorCode.CHROME_INTERSTITIAL_ERROR: "The browser showed an interstitial page instead of the document.",
    ErrorCode.TARGET_CRASHED: "The browser tab crashed while loading the page.",
}


@dataclass
class RunError:
    """Code plus free-text message attached to a failed run."""
    code: ErrorCode = field(metadata=wire(1, enum_of(ErrorCode), required=True))
    message: str | None = field(default=None, metadata=wire(2, STRING))

    @property
    def family(self) -> ErrorFamily:
        return self.code.family


class RunFailure(LhrError):
    """Raised by a run driver to end a run with a specific code."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        super().__init__(message or code.default_message)


def runtime_error_for(code: ErrorCode, message: str | None = None) -> RunError | None:
    """Envelope for ``code``; ``NO_ERROR`` yields None so the field is left off."""
    if code is ErrorCode.NO_ERROR:
        return None
    return RunError(code=code, message=message or code.default_message)


def classify(failure) -> RunError | None:
    """Map a terminal run condition to the runtime error that goes on the record.

    Args:
        failure: None, an ErrorCode, a RunError, a RunFailure, or any other
            exception. Unrecognised exceptions become UNKNOWN_ERROR.

    Returns:
        The RunError to attach, or None for a clean run.
    """
    if failure is None:
        return None
    if isinstance(failure, ErrorCode):
        return runtime_error_for(failure)
    if isinstance(failure, RunError):
        return runtime_error_for(failure.code, failure.message)
    if isinstance(failure, RunFailure):
        return runtime_error_for(failure.code, str(failure))
    if isinstance(failure, BaseException):
        log.debug("Unclassified failure %s: %s", type(failure).__name__, failure)
        return runtime_error_for(ErrorCode.UNKNOWN_ERROR, f"{type(failure).__name__}: {failure}")
    raise TypeError(f"cannot classify {type(failure).__name__!r} as a run failure")


def is_authoritative(result) -> bool:
    """False when a failure code is attached and the audit data is best-effort."""
    error = result.runtime_error
    return error is None or error.code is ErrorCode.NO_ERROR
