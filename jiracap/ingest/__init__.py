"""Ingestion of tracker data from live, pasted and generated sources."""

from jiracap.ingest.normalizer import (
    ImportValidationError,
    IngestError,
    NoIssuesFoundError,
    RecordError,
    build_batch,
)
from jiracap.ingest.paste import parse_export

__all__ = [
    "ImportValidationError",
    "IngestError",
    "NoIssuesFoundError",
    "RecordError",
    "build_batch",
    "parse_export",
]
