from typing import Sequence

import click


class ConfigurationError(click.UsageError):
    """
    Raised for missing or malformed operator input.
    Always detected before any chain client is constructed.
    """

    exit_code = 1


class WorkflowError(Exception):
    """Base class for failures of a single registration step."""

    def __init__(self, message: str, logs: Sequence[str] = ()):
        super().__init__(message)
        self.logs = tuple(str(line) for line in logs)


class PreconditionQueryError(WorkflowError):
    """Raised when a read-only state check could not be performed."""


class SubmissionError(WorkflowError):
    """Raised when signing, broadcasting or on-chain execution fails."""


class ExtractionError(WorkflowError):
    """Raised when a payload generator yields nothing in extract mode."""


class UnsupportedStepError(WorkflowError):
    """Raised when a chain family has no equivalent of a registration step."""
