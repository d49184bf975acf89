"""Import endpoints for bulk member import from spreadsheets."""

import logging
from typing import Annotated, Literal

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from pydantic import ValidationError

from memberimport.config import settings
from memberimport.models.import_batch import ImportBatch, ImportStatus
from memberimport.schemas.import_schemas import (
    ColumnAssignmentRequest,
    ColumnMappingRequest,
    FieldDescriptorResponse,
    ImportBatchSummary,
    ImportPolicy,
    ImportPreviewResponse,
    ImportResultResponse,
    ImportUploadResponse,
    SourceTable,
    TransformResult,
)
from memberimport.services.import_service import (
    FIELD_CATALOG,
    ColumnMapping,
    MappingIncompleteError,
    ParseError,
    generate_template_csv,
    generate_template_xlsx,
    get_file_extension,
    ingest,
    run_import,
    transform,
)
from memberimport.services.import_service.constants import ALLOWED_EXTENSIONS
from memberimport.services.import_service.processor import SubmitFn
from memberimport.services.import_service.template import TEMPLATE_FILENAME
from memberimport.services.member_client import MemberClient

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def get_member_submit() -> SubmitFn:
    """Dependency providing the remote member-creation operation."""
    try:
        return MemberClient.from_settings()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )


MemberSubmit = Annotated[SubmitFn, Depends(get_member_submit)]


@router.get("/fields", response_model=list[FieldDescriptorResponse])
async def list_fields() -> list[FieldDescriptorResponse]:
    """List the member fields a column can be mapped to."""
    return [
        FieldDescriptorResponse(
            key=f.key, label=f.label, kind=f.kind.value, description=f.description
        )
        for f in FIELD_CATALOG
    ]


@router.get("/template")
async def download_template(
    file_format: Literal["csv", "xlsx"] = Query("csv", alias="format"),
) -> Response:
    """Download a sample spreadsheet with the expected columns."""
    if file_format == "xlsx":
        content, media_type = generate_template_xlsx(), XLSX_CONTENT_TYPE
    else:
        content, media_type = generate_template_csv(), "text/csv"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}.{file_format}"'},
    )


@router.post("/upload", response_model=ImportUploadResponse)
async def upload_spreadsheet(
    file: UploadFile = File(..., description="CSV, XLSX or XLS spreadsheet"),
) -> ImportUploadResponse:
    """Upload a spreadsheet for import.

    Parses the file and returns headers and preview rows with every column
    unmapped.
    """
    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type '.{ext}'. Allowed: CSV, XLSX, XLS",
        )

    # Read in chunks to avoid unbounded memory for oversized files
    max_size = settings.max_upload_size_bytes
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(64 * 1024)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_size:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File exceeds maximum size of {settings.max_upload_size_mb} MB",
            )
        chunks.append(chunk)
    content = b"".join(chunks)

    try:
        table = ingest(content, file.filename or "", max_rows=settings.import_max_rows)
    except ParseError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    mapping = ColumnMapping.initialize(table.headers)
    batch = ImportBatch(
        filename=file.filename or "unknown",
        file_type=ext,
        headers=list(table.headers),
        rows=list(table.rows),
        row_count=table.row_count,
        preview_rows=list(table.rows[: settings.preview_rows]),
        column_mapping=mapping.assignments,
        status=ImportStatus.UPLOADED,
    )
    await batch.insert()
    logger.info("Uploaded %s as batch %s (%d rows)", batch.filename, batch.id, batch.row_count)

    return _batch_response(batch, mapping)


@router.post("/{batch_id}/mapping", response_model=ImportUploadResponse)
async def set_column_mapping(
    batch_id: str,
    request: ColumnMappingRequest,
) -> ImportUploadResponse:
    """Replace the column mapping for an import batch.

    Assignments are applied in order; a field claimed by two columns ends up
    on the later one. Incomplete mappings are stored and reported as such.
    """
    batch = await _get_batch(batch_id)
    _ensure_editable(batch)

    try:
        mapping = ColumnMapping.from_assignments(batch.headers, request.mapping)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return await _save_mapping(batch, mapping)


@router.put("/{batch_id}/mapping/{column}", response_model=ImportUploadResponse)
async def set_column_assignment(
    batch_id: str,
    column: str,
    request: ColumnAssignmentRequest,
) -> ImportUploadResponse:
    """Point a single column at a member field, or skip it."""
    batch = await _get_batch(batch_id)
    _ensure_editable(batch)

    try:
        mapping = _batch_mapping(batch).with_mapping(column, request.field)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return await _save_mapping(batch, mapping)


@router.post("/{batch_id}/preview", response_model=ImportPreviewResponse)
async def preview_batch(batch_id: str) -> ImportPreviewResponse:
    """Transform the batch with its current mapping without importing anything."""
    batch = await _get_batch(batch_id)
    result = _transform_batch(batch)

    return ImportPreviewResponse(
        batch_id=str(batch.id),
        record_count=len(result.records),
        preview_records=[r.to_payload() for r in result.records[: settings.preview_rows]],
        validation_errors=result.errors,
    )


@router.post("/{batch_id}/process", response_model=ImportResultResponse)
async def process_batch(
    batch_id: str,
    submit: MemberSubmit,
    request: ImportPolicy | None = None,
) -> ImportResultResponse:
    """Create members from every valid row of an import batch."""
    batch = await _get_batch(batch_id)

    if batch.status not in (ImportStatus.MAPPED, ImportStatus.UPLOADED):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Batch is in '{batch.status.value}' state, cannot process",
        )

    result = _transform_batch(batch)
    policy = request or ImportPolicy()

    batch.policy = policy
    batch.status = ImportStatus.PROCESSING
    await batch.save()

    finished = False
    try:
        report = await run_import(
            result.records,
            submit,
            policy=policy,
            delay=settings.submit_delay_seconds,
            validation_errors=result.errors,
        )

        batch.report = report
        top_level_failure = any(e.row_index == 0 for e in report.errors)
        batch.status = ImportStatus.FAILED if top_level_failure else ImportStatus.COMPLETED
        await batch.save()
        finished = True
    finally:
        # Never leave a batch stuck in PROCESSING
        if not finished:
            logger.error("Processing of batch %s did not finish, marking it failed", batch.id)
            batch.status = ImportStatus.FAILED
            await batch.save()

    return ImportResultResponse(
        batch_id=str(batch.id),
        status=batch.status.value,
        report=report,
    )


@router.get("/batches", response_model=list[ImportBatchSummary])
async def list_batches() -> list[ImportBatchSummary]:
    """List import batches, newest first."""
    batches = await ImportBatch.find_all().sort(-ImportBatch.imported_at).to_list()
    return [_batch_summary(b) for b in batches]


@router.get("/batches/{batch_id}", response_model=ImportBatchSummary)
async def get_batch(batch_id: str) -> ImportBatchSummary:
    """Get details of an import batch."""
    batch = await _get_batch(batch_id)
    return _batch_summary(batch)


@router.delete("/batches/{batch_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_batch(batch_id: str) -> None:
    """Delete an import batch (does not delete members created from it)."""
    batch = await _get_batch(batch_id)
    await batch.delete()


def _batch_mapping(batch: ImportBatch) -> ColumnMapping:
    """Rebuild the stored mapping, falling back to an empty one."""
    if not batch.column_mapping:
        return ColumnMapping.initialize(batch.headers)
    return ColumnMapping(assignments=batch.column_mapping)


def _ensure_editable(batch: ImportBatch) -> None:
    if batch.status not in (ImportStatus.UPLOADED, ImportStatus.MAPPED):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Batch is in '{batch.status.value}' state, mapping cannot change",
        )


async def _save_mapping(batch: ImportBatch, mapping: ColumnMapping) -> ImportUploadResponse:
    batch.column_mapping = mapping.assignments
    batch.status = ImportStatus.MAPPED
    await batch.save()
    return _batch_response(batch, mapping)


def _transform_batch(batch: ImportBatch) -> TransformResult:
    table = SourceTable(headers=tuple(batch.headers), rows=tuple(batch.rows))
    try:
        return transform(table, _batch_mapping(batch))
    except MappingIncompleteError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _batch_response(batch: ImportBatch, mapping: ColumnMapping) -> ImportUploadResponse:
    return ImportUploadResponse(
        batch_id=str(batch.id),
        filename=batch.filename,
        row_count=batch.row_count,
        headers=batch.headers,
        preview_rows=batch.preview_rows,
        mapping=mapping.assignments,
        mapped_count=mapping.mapped_count(),
        is_complete=mapping.is_complete(),
        missing_fields=mapping.missing_required_fields(),
    )


def _batch_summary(batch: ImportBatch) -> ImportBatchSummary:
    return ImportBatchSummary(
        id=str(batch.id),
        filename=batch.filename,
        imported_at=batch.imported_at,
        status=batch.status.value,
        row_count=batch.row_count,
        success_count=batch.report.success_count if batch.report else 0,
        error_count=batch.report.error_count if batch.report else 0,
    )


async def _get_batch(batch_id: str) -> ImportBatch:
    """Get an import batch by ID.

    Raises:
        HTTPException: If the batch does not exist.
    """
    try:
        batch = await ImportBatch.get(PydanticObjectId(batch_id))
    except (InvalidId, ValidationError):
        batch = None

    if not batch:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Import batch '{batch_id}' not found",
        )

    return batch
