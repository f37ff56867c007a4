"""Pipeline error types.

Both are ValueError subclasses: a bad frame is bad input, and callers that
already handle ValueError keep working.
"""

from __future__ import annotations


class PipelineError(ValueError):
    """Base class for frames the pipeline refuses to process."""


class InvalidInput(PipelineError):
    """Degenerate source frame (zero/negative dimension or empty buffer).

    The frame should be skipped; the next one can be processed normally.
    """


class DimensionMismatch(PipelineError):
    """Stated dimensions disagree with the buffer length or stride.

    This is a caller bug, not a transient condition.
    """
