"""
D1 Records Schemas

Closed, versioned schema for OPR (One Page Report) records. Python attribute
names are English; every field carries the wire alias used by the remote sync
gateway payload, so ``model_dump(by_alias=True)`` yields the gateway format.
"""

import base64
import mimetypes
import threading
import time
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

SCHEMA_VERSION = 1


class UnitType(str, Enum):
    """Organisational units a report can belong to"""

    PENTADBIRAN = "Pentadbiran"
    KURIKULUM = "Kurikulum"
    KOKURIKULUM = "Kokurikulum"
    HEM = "HEM"
    PIBG = "PIBG"

    @classmethod
    def classify(cls, value: str) -> Optional["UnitType"]:
        """Return the matching unit or None for free-text units"""
        try:
            return cls(value)
        except ValueError:
            return None


class ReportStatus(str, Enum):
    """Report status enumeration"""

    DRAFT = "Draft"
    FINALIZED = "Finalized"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)


def today_iso() -> str:
    return date.today().isoformat()


class ReportRecord(BaseModel):
    """One activity report"""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="forbid",
        use_enum_values=False,
    )

    id: str = Field(default="", alias="id")
    unit: str = Field(default="", alias="unit")
    title: str = Field(default="", alias="tajukProgram")
    date: str = Field(default_factory=today_iso, alias="tarikh")
    day: str = Field(default="", alias="hari")
    time: str = Field(default="", alias="masa")
    objectives: str = Field(default="", alias="objektif")
    activities: str = Field(default="", alias="aktiviti")
    strengths: str = Field(default="", alias="kekuatan")
    weaknesses: str = Field(default="", alias="kelemahan")
    improvements: str = Field(default="", alias="penambahbaikan")
    reflection: str = Field(default="", alias="refleksi")
    prepared_by: str = Field(default="", alias="disediakanOleh")
    position: str = Field(default="", alias="jawatan")
    photos: List[str] = Field(default_factory=list, alias="gambar")
    status: ReportStatus = Field(default=ReportStatus.DRAFT, alias="status")
    created_at: int = Field(default_factory=now_ms, alias="createdAt", ge=0)
    schema_version: int = Field(default=SCHEMA_VERSION, alias="schemaVersion")

    @field_validator("photos")
    @classmethod
    def validate_photos(cls, v):
        for index, photo in enumerate(v):
            if not photo.startswith("data:image/"):
                raise ValueError(f"photo {index} is not an embedded image data URI")
        return v

    @field_validator("schema_version")
    @classmethod
    def validate_schema_version(cls, v):
        if v != SCHEMA_VERSION:
            raise ValueError(f"unsupported schema version {v}, expected {SCHEMA_VERSION}")
        return v

    @property
    def unit_type(self) -> Optional[UnitType]:
        return UnitType.classify(self.unit)

    @property
    def is_draft(self) -> bool:
        return self.status == ReportStatus.DRAFT

    def to_storage(self) -> dict:
        """Plain JSON-compatible dict keyed by attribute names"""
        return self.model_dump(mode="json")

    def to_wire(self) -> dict:
        """Flattened primitive payload keyed by the gateway's field names"""
        return self.model_dump(mode="json", by_alias=True)

    def summary(self) -> dict:
        """Dashboard-sized view without embedded photos"""
        return {
            "id": self.id,
            "unit": self.unit,
            "unit_type": self.unit_type.value if self.unit_type else None,
            "title": self.title,
            "date": self.date,
            "prepared_by": self.prepared_by,
            "status": self.status.value,
            "photo_count": len(self.photos),
            "created_at": self.created_at,
        }


# Attributes that may never change after creation
IMMUTABLE_FIELDS = frozenset({"id", "created_at", "schema_version"})


class IdentifierAllocator:
    """
    Allocates time-based report identifiers.

    Identifiers are epoch milliseconds rendered as strings. Two allocations in
    the same millisecond (or after a clock step backwards) are bumped so every
    identifier issued by one allocator is strictly greater than the previous.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock or now_ms
        self._last = 0
        self._lock = threading.Lock()

    def allocate(self) -> str:
        with self._lock:
            candidate = self._clock()
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)


def encode_photo(data: bytes, mime_type: str = "image/jpeg") -> str:
    """Embed raw image bytes as a data URI"""
    if not mime_type.startswith("image/"):
        raise ValueError(f"Not an image mime type: {mime_type}")
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def photo_from_path(path: Union[str, Path]) -> str:
    """Read an image file and embed it as a data URI"""
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValueError(f"Cannot determine image type for {path.name}")
    return encode_photo(path.read_bytes(), mime_type)


# Shared by every entry point of this process so identifiers never repeat
default_allocator = IdentifierAllocator()
