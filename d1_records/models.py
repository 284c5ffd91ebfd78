"""
D1 Records Models

Durable storage row for report records. The full record lives in ``payload``;
the scalar columns duplicate the fields used for listing and ordering.
"""

from sqlalchemy import JSON, BigInteger, Column, DateTime, Index, Integer, String
from sqlalchemy.sql import func

from d1_records.schemas import ReportStatus
from database.base import Base, DatabaseAgnosticEnum


class ReportRecordRow(Base):
    """Persisted report record"""

    __tablename__ = "opr_reports"

    id = Column(String(64), primary_key=True)
    # Order of first insertion; kept when a record is replaced
    position = Column(Integer, nullable=False)

    unit = Column(String(255), nullable=False, default="")
    title = Column(String(500), nullable=False, default="")
    report_date = Column(String(32), nullable=False, default="")
    status = Column(DatabaseAgnosticEnum(ReportStatus), nullable=False, default=ReportStatus.DRAFT)
    created_at = Column(BigInteger, nullable=False)
    schema_version = Column(Integer, nullable=False, default=1)

    payload = Column(JSON, nullable=False)

    stored_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_opr_reports_position", "position"),
        Index("idx_opr_reports_created_at", "created_at"),
        Index("idx_opr_reports_unit", "unit"),
    )

    def __repr__(self):
        return f"<ReportRecordRow(id='{self.id}', unit='{self.unit}', status='{self.status}')>"
