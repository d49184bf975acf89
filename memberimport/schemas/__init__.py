"""Pydantic schemas for the Member Import API."""

from memberimport.schemas.import_schemas import (
    ImportPolicy,
    ImportRecordResult,
    ImportReport,
    MemberRecord,
    RowValidationError,
    SourceTable,
)

__all__ = [
    "ImportPolicy",
    "ImportRecordResult",
    "ImportReport",
    "MemberRecord",
    "RowValidationError",
    "SourceTable",
]
