"""Row transformation and validation for member imports."""

from typing import NamedTuple

from memberimport.schemas.import_schemas import (
    MemberRecord,
    RowValidationError,
    SourceTable,
    TransformResult,
)

from .constants import ENUMERATED_FIELDS, FULL_NAME_FIELD, REQUIRED_FIELDS
from .errors import MappingIncompleteError
from .mapping import ColumnMapping

# Spreadsheet rows are shown 1-based with the header on row 1
ROW_DISPLAY_OFFSET = 2


class SplitName(NamedTuple):
    first_name: str
    last_name: str
    middle_name: str | None = None


def split_full_name(full_name: str) -> SplitName:
    """Split a full name into first, middle and last parts.

    One token is a first name only; with three or more tokens everything
    between the first and last token becomes the middle name.
    """
    parts = full_name.split()

    if not parts:
        return SplitName("", "")
    if len(parts) == 1:
        return SplitName(parts[0], "")
    if len(parts) == 2:
        return SplitName(parts[0], parts[1])
    return SplitName(parts[0], parts[-1], " ".join(parts[1:-1]))


def row_to_member_data(row: dict[str, str], mapping: ColumnMapping) -> dict[str, str]:
    """Convert a spreadsheet row to member field values.

    Columns are applied in mapping order; empty cells are ignored.

    Args:
        row: Row dict from the source table.
        mapping: Column mapping.

    Returns:
        Dict keyed by member field key. Name fields may be empty strings
        when a full name cell splits into fewer than two parts.
    """
    member_data: dict[str, str] = {}

    for header, field in mapping.mapped_columns():
        value = row.get(header, "").strip()
        if not value:
            continue

        if field.key == FULL_NAME_FIELD:
            name = split_full_name(value)
            member_data["firstName"] = name.first_name
            member_data["lastName"] = name.last_name
            if name.middle_name:
                member_data["middleName"] = name.middle_name
        elif field.key in ENUMERATED_FIELDS:
            member_data[field.key] = value.upper()
        else:
            member_data[field.key] = value

    return member_data


def missing_required(member_data: dict[str, str], row_index: int) -> list[RowValidationError]:
    """Validation errors for required fields without a value."""
    return [
        RowValidationError(
            row_index=row_index,
            field_label=field.label,
            message=f"Row {row_index}: Missing required field '{field.label}'",
        )
        for field in REQUIRED_FIELDS
        if not member_data.get(field.key)
    ]


def transform(table: SourceTable, mapping: ColumnMapping) -> TransformResult:
    """Transform every row of ``table`` into a member record or row errors.

    Rows missing a required field are excluded entirely and reported once
    per missing field. The result depends only on the inputs.

    Raises:
        MappingIncompleteError: If the mapping does not cover the required
            fields (directly or through the full name field).
    """
    if not mapping.is_complete():
        raise MappingIncompleteError(mapping.missing_required_fields())

    records: list[MemberRecord] = []
    errors: list[RowValidationError] = []

    for i, row in enumerate(table.rows):
        row_index = i + ROW_DISPLAY_OFFSET
        member_data = row_to_member_data(row, mapping)

        row_errors = missing_required(member_data, row_index)
        if row_errors:
            errors.extend(row_errors)
            continue

        records.append(MemberRecord.model_validate({**member_data, "source_row": row_index}))

    return TransformResult(records=records, errors=errors)
