"""
Error taxonomy for the catalog sync and solved-set pipeline.

Record-level errors (ValidationError, NotFoundError) are counted and never
abort a batch. Batch-level errors (NetworkError once retries are exhausted,
ProtocolError, ConsistencyError, ParseError) abort the current run.
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class NetworkError(PipelineError):
    """Transport-level failure talking to the remote catalog. Retryable."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset


class ProtocolError(PipelineError):
    """The remote answered with an error payload or an unexpected envelope."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset


class ValidationError(PipelineError, ValueError):
    """A single input record is malformed."""


class ParseError(PipelineError, ValueError):
    """A snapshot document cannot be read at all."""


class ConsistencyError(PipelineError):
    """A key that must be unique was seen twice."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class NotFoundError(PipelineError, LookupError):
    """A lookup found nothing."""
