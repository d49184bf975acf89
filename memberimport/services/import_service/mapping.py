"""Column mapping between spreadsheet headers and member fields."""

import logging
from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, model_validator

from .constants import (
    FIELD_CATALOG,
    FIELDS_BY_KEY,
    FULL_NAME_FIELD,
    REQUIRED_FIELDS,
    VALID_MEMBER_FIELDS,
    FieldDescriptor,
)

logger = logging.getLogger(__name__)


def _is_valid_mapping_value(value: str | None) -> bool:
    """Check if a mapping value is a known field key or None (skip)."""
    return value is None or value in VALID_MEMBER_FIELDS


class ColumnMapping(BaseModel):
    """Immutable correspondence from source columns to member field keys.

    Each column maps to a field key or None (skip). No two columns point at
    the same field; use ``with_mapping`` to derive an updated mapping.
    """

    model_config = ConfigDict(frozen=True)

    assignments: dict[str, str | None]

    @model_validator(mode="after")
    def _check_assignments(self) -> "ColumnMapping":
        seen: dict[str, str] = {}
        for column, field in self.assignments.items():
            if not _is_valid_mapping_value(field):
                raise ValueError(f"Invalid mapping target '{field}' for column '{column}'")
            if field is None:
                continue
            if field in seen:
                raise ValueError(
                    f"Field '{field}' is mapped by both '{seen[field]}' and '{column}'"
                )
            seen[field] = column
        return self

    @classmethod
    def initialize(cls, headers: Iterable[str]) -> "ColumnMapping":
        """Create a mapping with every header unset."""
        return cls(assignments={header: None for header in headers})

    @classmethod
    def from_assignments(
        cls,
        headers: Iterable[str],
        assignments: Mapping[str, str | None],
    ) -> "ColumnMapping":
        """Build a mapping by applying each assignment in order.

        A later column assigned to a field already in use takes it over.
        """
        mapping = cls.initialize(headers)
        for column, field in assignments.items():
            mapping = mapping.with_mapping(column, field)
        return mapping

    def with_mapping(self, column: str, field: str | None) -> "ColumnMapping":
        """Return a copy with ``column`` pointed at ``field``.

        Any other column currently holding ``field`` is cleared first.

        Raises:
            ValueError: If the column is not in the table or the field key
                is not in the catalog.
        """
        if column not in self.assignments:
            raise ValueError(f"Unknown column '{column}'")
        if not _is_valid_mapping_value(field):
            raise ValueError(f"Invalid mapping target '{field}' for column '{column}'")

        updated: dict[str, str | None] = {}
        for other, current in self.assignments.items():
            if field is not None and current == field and other != column:
                logger.debug("Field '%s' moved from '%s' to '%s'", field, other, column)
                updated[other] = None
            else:
                updated[other] = current
        updated[column] = field
        return ColumnMapping(assignments=updated)

    def column_for(self, field: str) -> str | None:
        """Column currently mapped to ``field``, if any."""
        for column, current in self.assignments.items():
            if current == field:
                return column
        return None

    def is_complete(self) -> bool:
        """True iff full name is mapped, or every required field is mapped."""
        mapped = set(self.assignments.values())
        if FULL_NAME_FIELD in mapped:
            return True
        return all(f.key in mapped for f in REQUIRED_FIELDS)

    def missing_required_fields(self) -> list[str]:
        """Labels of unmapped required fields; empty when the mapping is complete."""
        if self.is_complete():
            return []
        mapped = set(self.assignments.values())
        return [f.label for f in REQUIRED_FIELDS if f.key not in mapped]

    def mapped_count(self) -> int:
        """Number of columns with a target field."""
        return sum(1 for field in self.assignments.values() if field is not None)

    def unmapped_fields(self) -> list[FieldDescriptor]:
        """Catalog fields no column points at yet."""
        mapped = set(self.assignments.values())
        return [f for f in FIELD_CATALOG if f.key not in mapped]

    def mapped_columns(self) -> list[tuple[str, FieldDescriptor]]:
        """(column, field) pairs in column order, skipping unset columns."""
        return [
            (column, FIELDS_BY_KEY[field])
            for column, field in self.assignments.items()
            if field is not None
        ]
