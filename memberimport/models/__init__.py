"""MongoDB document models for Member Import."""

from memberimport.models.import_batch import ImportBatch, ImportStatus

__all__ = [
    "ImportBatch",
    "ImportStatus",
]
