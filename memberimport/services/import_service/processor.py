"""Sequential submission of normalized member records."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from contextlib import aclosing

from memberimport.schemas.import_schemas import (
    CreatedMember,
    ImportOutcome,
    ImportPolicy,
    ImportRecordResult,
    ImportReport,
    MemberRecord,
    RowValidationError,
)

from .errors import SubmissionChannelError
from .report import build_failed_report, build_report

logger = logging.getLogger(__name__)

# Pause between submissions so the member API is not flooded
DEFAULT_SUBMIT_DELAY = 0.1

SubmitFn = Callable[[MemberRecord], Awaitable[CreatedMember]]
ProgressFn = Callable[[float], None]


async def _submit_one(position: int, record: MemberRecord, submit: SubmitFn) -> ImportRecordResult:
    """Submit one record, turning a rejection into a failed result."""
    try:
        created = await submit(record)
    except SubmissionChannelError:
        raise
    except Exception as e:
        message = str(e) or "Failed to create member"
        logger.warning("Error creating member %d (row %s): %s", position, record.source_row, message)
        return ImportRecordResult(
            row_index=position,
            source_row=record.source_row,
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
            success=False,
            error_message=message,
        )

    return ImportRecordResult(
        row_index=position,
        source_row=record.source_row,
        first_name=created.first_name or record.first_name,
        last_name=created.last_name or record.last_name,
        email=created.email or record.email,
        success=True,
        created_id=created.id,
    )


async def iter_import(
    records: Sequence[MemberRecord],
    submit: SubmitFn,
    delay: float = DEFAULT_SUBMIT_DELAY,
) -> AsyncIterator[ImportOutcome]:
    """Submit records one at a time, yielding each outcome as it completes.

    Records are submitted strictly in order and never concurrently. A
    rejected record yields a failed result and the next record is still
    submitted.

    Args:
        records: Validated member records.
        submit: Remote creation operation.
        delay: Seconds to wait between successive submissions.

    Yields:
        One ImportOutcome per record, carrying the running progress.

    Raises:
        SubmissionChannelError: If the remote operation reports it cannot
            accept any record.
    """
    total = len(records)
    for i, record in enumerate(records):
        if i and delay > 0:
            await asyncio.sleep(delay)
        result = await _submit_one(i + 1, record, submit)
        yield ImportOutcome(result=result, completed=i + 1, total=total)


async def run_import(
    records: Sequence[MemberRecord],
    submit: SubmitFn,
    policy: ImportPolicy | None = None,
    progress: ProgressFn | None = None,
    delay: float | None = None,
    validation_errors: list[RowValidationError] | None = None,
) -> ImportReport:
    """Run an import to completion and aggregate its report.

    Any failure outside the per-record handling is logged and reported as
    a failed run rather than raised.

    Args:
        records: Validated member records, in spreadsheet order.
        submit: Remote creation operation.
        policy: Declared duplicate handling. Recorded only; no lookup of
            existing members is performed.
        progress: Called with completed/total after each record.
        delay: Seconds between submissions, DEFAULT_SUBMIT_DELAY if None.
        validation_errors: Rows excluded by the transformer, carried into
            the report.

    Returns:
        The final ImportReport.
    """
    policy = policy or ImportPolicy()
    if delay is None:
        delay = DEFAULT_SUBMIT_DELAY

    if policy.skip_duplicates or policy.update_existing:
        logger.info(
            "Duplicate handling requested (skip_duplicates=%s, update_existing=%s) "
            "but existing members are not looked up",
            policy.skip_duplicates,
            policy.update_existing,
        )

    logger.info("Starting import of %d members", len(records))
    results: list[ImportRecordResult] = []
    try:
        async with aclosing(iter_import(records, submit, delay=delay)) as outcomes:
            async for outcome in outcomes:
                results.append(outcome.result)
                logger.debug("Import progress %d/%d", outcome.completed, outcome.total)
                if progress is not None:
                    progress(outcome.progress)
    except Exception as e:
        logger.error("Import failed after %d of %d members: %s", len(results), len(records), e)
        return build_failed_report(len(records), results, e, validation_errors)

    report = build_report(len(records), results, validation_errors)
    logger.info(report.summary)
    return report
