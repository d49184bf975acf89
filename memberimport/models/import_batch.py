"""ImportBatch document model for tracking member imports."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from beanie import Document
from pydantic import Field

from memberimport.schemas.import_schemas import ImportPolicy, ImportReport


class ImportStatus(str, Enum):
    """Status of an import batch."""

    UPLOADED = "uploaded"
    MAPPED = "mapped"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportBatch(Document):
    """Tracks a spreadsheet import batch through the upload/map/process workflow."""

    filename: str
    file_type: str  # "csv", "xlsx" or "xls"
    imported_at: datetime = Field(default_factory=datetime.utcnow)
    status: ImportStatus = ImportStatus.UPLOADED

    # Column mapping: header name -> member field key, or None to skip
    column_mapping: dict[str, Optional[str]] = Field(default_factory=dict)

    # Parsed data from the spreadsheet
    headers: list[str] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int = 0
    preview_rows: list[dict[str, Any]] = Field(default_factory=list)

    # Processing results
    policy: Optional[ImportPolicy] = None
    report: Optional[ImportReport] = None

    class Settings:
        name = "member_import_batches"
