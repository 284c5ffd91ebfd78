"""
D1 Records Store

Durable key-value persistence of report records keyed by identifier.
``save`` is an upsert (last write wins); ``get_all`` returns records in the
order they were first stored.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from core.exceptions import NotFoundError, StorageFailure, ValidationGap
from core.logging import get_logger
from core.metrics import metrics
from d1_records.models import ReportRecordRow
from d1_records.schemas import ReportRecord
from database.base import Base
from database.session import session_scope

logger = get_logger(__name__, domain="d1_records")


class RecordStore:
    """SQLAlchemy-backed store of report records"""

    def __init__(self, engine: Optional[Engine] = None, create_tables: bool = True):
        if engine is None:
            from database.session import engine as default_engine

            engine = default_engine

        self.engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        if create_tables:
            self.ensure_schema()

    def ensure_schema(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine, tables=[ReportRecordRow.__table__])
        except (SQLAlchemyError, OSError) as e:
            raise StorageFailure(f"Failed to prepare report storage: {e}", operation="ensure_schema") from e

    def save(self, record: ReportRecord) -> None:
        """Insert or replace the record stored under ``record.id``"""
        if not record.id:
            raise ValidationGap("Report identifier is required before saving", field="id")

        payload = record.to_storage()

        try:
            with session_scope(self._session_factory) as session:
                row = session.get(ReportRecordRow, record.id)
                if row is None:
                    last_position = session.query(func.max(ReportRecordRow.position)).scalar()
                    row = ReportRecordRow(
                        id=record.id,
                        position=0 if last_position is None else last_position + 1,
                    )
                    session.add(row)
                    action = "inserted"
                else:
                    action = "replaced"

                row.unit = record.unit
                row.title = record.title
                row.report_date = record.date
                row.status = record.status
                row.created_at = record.created_at
                row.schema_version = record.schema_version
                row.payload = payload
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to save report {record.id}: {e}")
            raise StorageFailure(
                f"Failed to save report {record.id}: {e}",
                operation="save",
                record_id=record.id,
            ) from e

        metrics.track_report_saved(record.status.value)
        logger.info(f"Report {record.id} {action}", extra={"record_id": record.id, "status": record.status.value})

    def get_all(self) -> List[ReportRecord]:
        """All stored records in insertion order"""
        try:
            with session_scope(self._session_factory) as session:
                rows = session.query(ReportRecordRow).order_by(ReportRecordRow.position).all()
                payloads = [(row.id, row.payload) for row in rows]
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to read reports: {e}")
            raise StorageFailure(f"Failed to read reports: {e}", operation="get_all") from e

        records = []
        for record_id, payload in payloads:
            record = self._load(record_id, payload)
            if record is not None:
                records.append(record)
        return records

    def get(self, record_id: str) -> ReportRecord:
        try:
            with session_scope(self._session_factory) as session:
                row = session.get(ReportRecordRow, record_id)
                payload = row.payload if row is not None else None
        except (SQLAlchemyError, OSError) as e:
            raise StorageFailure(f"Failed to read report {record_id}: {e}", operation="get") from e

        record = self._load(record_id, payload) if payload is not None else None
        if record is None:
            raise NotFoundError("Report", record_id)
        return record

    def count(self) -> int:
        try:
            with session_scope(self._session_factory) as session:
                return session.query(func.count(ReportRecordRow.id)).scalar() or 0
        except (SQLAlchemyError, OSError) as e:
            raise StorageFailure(f"Failed to count reports: {e}", operation="count") from e

    def delete(self, record_id: str) -> bool:
        try:
            with session_scope(self._session_factory) as session:
                deleted = session.query(ReportRecordRow).filter(ReportRecordRow.id == record_id).delete()
        except (SQLAlchemyError, OSError) as e:
            raise StorageFailure(f"Failed to delete report {record_id}: {e}", operation="delete") from e

        if deleted:
            logger.info(f"Report {record_id} deleted")
        return bool(deleted)

    @staticmethod
    def _load(record_id: str, payload: dict) -> Optional[ReportRecord]:
        try:
            return ReportRecord.model_validate(payload)
        except SchemaValidationError as e:
            # One unreadable row must not hide the rest of the store
            logger.warning(f"Skipping unreadable report {record_id}: {e.error_count()} invalid field(s)")
            return None


@lru_cache()
def get_record_store() -> RecordStore:
    """Process-wide store bound to the configured database"""
    return RecordStore()
