"""Import service package for parsing spreadsheets and creating member records."""

from .constants import (
    ENUMERATED_FIELDS,
    FIELD_CATALOG,
    FIELDS_BY_KEY,
    FULL_NAME_FIELD,
    MAX_ROWS,
    REQUIRED_FIELDS,
    VALID_MEMBER_FIELDS,
    FieldDescriptor,
    FieldKind,
)
from .converters import row_to_member_data, split_full_name, transform
from .errors import (
    ImportPipelineError,
    MappingIncompleteError,
    ParseError,
    SubmissionChannelError,
    SubmissionError,
)
from .mapping import ColumnMapping
from .parsers import get_file_extension, ingest, parse_csv, parse_xls, parse_xlsx
from .processor import DEFAULT_SUBMIT_DELAY, iter_import, run_import
from .report import build_failed_report, build_report, summarize
from .template import generate_template_csv, generate_template_xlsx

__all__ = [
    # Constants
    "ENUMERATED_FIELDS",
    "FIELD_CATALOG",
    "FIELDS_BY_KEY",
    "FULL_NAME_FIELD",
    "MAX_ROWS",
    "REQUIRED_FIELDS",
    "VALID_MEMBER_FIELDS",
    "FieldDescriptor",
    "FieldKind",
    # Errors
    "ImportPipelineError",
    "MappingIncompleteError",
    "ParseError",
    "SubmissionChannelError",
    "SubmissionError",
    # Parsers
    "get_file_extension",
    "ingest",
    "parse_csv",
    "parse_xls",
    "parse_xlsx",
    # Mapping
    "ColumnMapping",
    # Converters
    "row_to_member_data",
    "split_full_name",
    "transform",
    # Processor
    "DEFAULT_SUBMIT_DELAY",
    "iter_import",
    "run_import",
    # Report
    "build_failed_report",
    "build_report",
    "summarize",
    # Template
    "generate_template_csv",
    "generate_template_xlsx",
]
