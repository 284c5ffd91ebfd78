"""
D1 Records Module

Report record schema, identifier allocation and the durable record store.
"""

from .models import ReportRecordRow
from .schemas import (
    IMMUTABLE_FIELDS,
    IdentifierAllocator,
    ReportRecord,
    ReportStatus,
    UnitType,
    default_allocator,
    encode_photo,
    photo_from_path,
)
from .store import RecordStore, get_record_store

__all__ = [
    "ReportRecord",
    "ReportRecordRow",
    "ReportStatus",
    "UnitType",
    "IMMUTABLE_FIELDS",
    "IdentifierAllocator",
    "default_allocator",
    "encode_photo",
    "photo_from_path",
    "RecordStore",
    "get_record_store",
]
