"""Pydantic schemas for the member import pipeline and its API."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]


# =============================================================================
# Pipeline values
# =============================================================================


class SourceTable(BaseModel):
    """Parsed spreadsheet: ordered headers and trimmed string rows."""

    model_config = ConfigDict(frozen=True)

    headers: tuple[str, ...]
    rows: tuple[dict[str, str], ...]

    @field_validator("headers")
    @classmethod
    def _headers_distinct(cls, headers: tuple[str, ...]) -> tuple[str, ...]:
        if len(set(headers)) != len(headers):
            raise ValueError("Column headers must be distinct")
        return headers

    @property
    def row_count(self) -> int:
        return len(self.rows)


class MemberRecord(BaseModel):
    """A normalized member ready for the createMember operation.

    Attributes are the non-synthetic keys of the field catalog, exposed under
    their camelCase API names. Every present value is a non-empty string.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    first_name: NonEmptyStr = Field(..., alias="firstName")
    last_name: NonEmptyStr = Field(..., alias="lastName")
    middle_name: NonEmptyStr | None = Field(None, alias="middleName")
    email: NonEmptyStr | None = Field(None, alias="email")
    phone_number: NonEmptyStr | None = Field(None, alias="phoneNumber")
    alternative_email: NonEmptyStr | None = Field(None, alias="alternativeEmail")
    alternate_phone: NonEmptyStr | None = Field(None, alias="alternatePhone")
    address: NonEmptyStr | None = Field(None, alias="address")
    city: NonEmptyStr | None = Field(None, alias="city")
    state: NonEmptyStr | None = Field(None, alias="state")
    postal_code: NonEmptyStr | None = Field(None, alias="postalCode")
    country: NonEmptyStr | None = Field(None, alias="country")
    date_of_birth: NonEmptyStr | None = Field(None, alias="dateOfBirth")
    gender: NonEmptyStr | None = Field(None, alias="gender")
    marital_status: NonEmptyStr | None = Field(None, alias="maritalStatus")
    occupation: NonEmptyStr | None = Field(None, alias="occupation")
    employer_name: NonEmptyStr | None = Field(None, alias="employerName")
    education: NonEmptyStr | None = Field(None, alias="education")
    membership_status: NonEmptyStr | None = Field(None, alias="membershipStatus")
    membership_type: NonEmptyStr | None = Field(None, alias="membershipType")
    membership_date: NonEmptyStr | None = Field(None, alias="membershipDate")
    baptism_date: NonEmptyStr | None = Field(None, alias="baptismDate")
    baptism_location: NonEmptyStr | None = Field(None, alias="baptismLocation")
    confirmation_date: NonEmptyStr | None = Field(None, alias="confirmationDate")
    salvation_date: NonEmptyStr | None = Field(None, alias="salvationDate")
    notes: NonEmptyStr | None = Field(None, alias="notes")
    emergency_contact_name: NonEmptyStr | None = Field(None, alias="emergencyContactName")
    emergency_contact_phone: NonEmptyStr | None = Field(None, alias="emergencyContactPhone")
    emergency_contact_relation: NonEmptyStr | None = Field(
        None, alias="emergencyContactRelation"
    )
    father_name: NonEmptyStr | None = Field(None, alias="fatherName")
    mother_name: NonEmptyStr | None = Field(None, alias="motherName")
    father_occupation: NonEmptyStr | None = Field(None, alias="fatherOccupation")
    mother_occupation: NonEmptyStr | None = Field(None, alias="motherOccupation")

    # Spreadsheet row this record came from (header row is row 1)
    source_row: int | None = Field(None, exclude=True)

    def to_payload(self) -> dict[str, str]:
        """Field values keyed by catalog key, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RowValidationError(BaseModel):
    """A required field missing from one spreadsheet row."""

    row_index: int
    field_label: str
    message: str


class TransformResult(BaseModel):
    """Output of transforming a source table through a column mapping."""

    records: list[MemberRecord]
    errors: list[RowValidationError]


class ImportPolicy(BaseModel):
    """Declared duplicate handling intent for an import run."""

    skip_duplicates: bool = Field(True, description="Skip members that already exist")
    update_existing: bool = Field(False, description="Update members that already exist")


class CreatedMember(BaseModel):
    """Identity returned by the remote createMember operation."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    first_name: str | None = Field(None, alias="firstName")
    last_name: str | None = Field(None, alias="lastName")
    email: str | None = None


class ImportRecordResult(BaseModel):
    """Outcome of submitting one record."""

    row_index: int
    source_row: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    success: bool
    created_id: str | None = None
    error_message: str | None = None


class ImportErrorEntry(BaseModel):
    """A failure recorded during orchestration.

    Row index 0 denotes a failure of the run as a whole.
    """

    row_index: int
    field: str = "general"
    message: str
    value: str | None = None


class ImportReport(BaseModel):
    """Terminal aggregate of an import run."""

    total_processed: int
    success_count: int
    error_count: int
    skipped_count: int = 0
    results: list[ImportRecordResult] = Field(default_factory=list)
    validation_errors: list[RowValidationError] = Field(default_factory=list)
    errors: list[ImportErrorEntry] = Field(default_factory=list)
    summary: str


class ImportOutcome(BaseModel):
    """One element of the orchestration stream."""

    result: ImportRecordResult
    completed: int
    total: int

    @property
    def progress(self) -> float:
        return self.completed / self.total if self.total else 1.0


# =============================================================================
# API request / response schemas
# =============================================================================


class FieldDescriptorResponse(BaseModel):
    """A mappable target field."""

    key: str
    label: str
    kind: str
    description: str = ""


class ImportUploadResponse(BaseModel):
    """Response after uploading a spreadsheet or changing its mapping."""

    batch_id: str
    filename: str
    row_count: int
    headers: list[str]
    preview_rows: list[dict[str, Any]]
    mapping: dict[str, str | None]
    mapped_count: int
    is_complete: bool
    missing_fields: list[str]


class ColumnMappingRequest(BaseModel):
    """Request to replace the column mapping for an import batch."""

    mapping: dict[str, str | None] = Field(
        ...,
        description="Map of header name -> member field key, or null to skip",
    )


class ColumnAssignmentRequest(BaseModel):
    """Request to point a single column at a member field."""

    field: str | None = Field(None, description="Member field key, or null to skip")


class ImportPreviewResponse(BaseModel):
    """Transformed records and validation errors for a batch."""

    batch_id: str
    record_count: int
    preview_records: list[dict[str, str]]
    validation_errors: list[RowValidationError]


class ImportResultResponse(BaseModel):
    """Response after processing an import batch."""

    batch_id: str
    status: str
    report: ImportReport


class ImportBatchSummary(BaseModel):
    """Summary of an import batch for listing."""

    id: str
    filename: str
    imported_at: datetime
    status: str
    row_count: int
    success_count: int
    error_count: int
