"""Aggregation of per-record outcomes into an import report."""

from memberimport.schemas.import_schemas import (
    ImportErrorEntry,
    ImportRecordResult,
    ImportReport,
    RowValidationError,
)

FAILED_SUMMARY = "Import failed due to an error."


def summarize(success_count: int, error_count: int, skipped_count: int) -> str:
    """Human-readable one-line summary of an import run."""
    return (
        f"Import completed: {success_count} successful, "
        f"{error_count} failed, {skipped_count} skipped"
    )


def _failure_entries(results: list[ImportRecordResult]) -> list[ImportErrorEntry]:
    return [
        ImportErrorEntry(
            row_index=r.row_index,
            message=r.error_message or "Failed to create member",
            value=" ".join(p for p in (r.first_name, r.last_name) if p) or None,
        )
        for r in results
        if not r.success
    ]


def build_report(
    total: int,
    results: list[ImportRecordResult],
    validation_errors: list[RowValidationError] | None = None,
) -> ImportReport:
    """Build the report for a run that attempted every record.

    Args:
        total: Number of records submitted (rows that passed validation).
        results: One result per record, in submission order.
        validation_errors: Rows excluded before submission.
    """
    success_count = sum(1 for r in results if r.success)
    error_count = len(results) - success_count
    skipped_count = 0

    return ImportReport(
        total_processed=total,
        success_count=success_count,
        error_count=error_count,
        skipped_count=skipped_count,
        results=results,
        validation_errors=validation_errors or [],
        errors=_failure_entries(results),
        summary=summarize(success_count, error_count, skipped_count),
    )


def build_failed_report(
    total: int,
    results: list[ImportRecordResult],
    error: BaseException,
    validation_errors: list[RowValidationError] | None = None,
) -> ImportReport:
    """Build the report for a run that stopped with a top-level failure.

    Every record that was not created counts as failed, so a failure before
    the first submission reports ``error_count == total``.
    """
    success_count = sum(1 for r in results if r.success)
    errors = _failure_entries(results)
    errors.append(ImportErrorEntry(row_index=0, message=f"Import failed: {error}"))

    return ImportReport(
        total_processed=total,
        success_count=success_count,
        error_count=total - success_count,
        skipped_count=0,
        results=results,
        validation_errors=validation_errors or [],
        errors=errors,
        summary=FAILED_SUMMARY,
    )
