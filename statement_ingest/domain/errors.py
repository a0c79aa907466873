"""Exception hierarchy shared by the ingestion layers."""
from __future__ import annotations


class StatementIngestError(Exception):
    """Base class for errors raised by the statement ingestion package."""


class FormatError(StatementIngestError):
    """The input container could not be decoded, or holds no sheet/table."""


class InvalidStateError(StatementIngestError):
    """A data point lifecycle transition was requested out of order."""


class MovementValidationError(StatementIngestError, ValueError):
    """A movement violates one of its construction invariants."""
