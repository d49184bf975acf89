"""Exceptions raised by the member import pipeline."""


class ImportPipelineError(Exception):
    """Base class for import pipeline failures."""


class ParseError(ImportPipelineError):
    """The uploaded file is unreadable, empty, or has no headers."""


class MappingIncompleteError(ImportPipelineError):
    """The column mapping does not cover the required member fields."""

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = missing_fields
        super().__init__(
            f"Required fields not mapped: {', '.join(missing_fields)} "
            "(or map a Full Name column)"
        )


class SubmissionError(ImportPipelineError):
    """The remote member-creation operation rejected a record."""


class SubmissionChannelError(SubmissionError):
    """The remote operation is unusable for every record (bad credentials, no scope)."""
