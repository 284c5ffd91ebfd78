"""
Tests for the D1 record store
"""

from unittest.mock import patch

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from core.exceptions import NotFoundError, StorageFailure, ValidationGap
from d1_records.schemas import ReportRecord, ReportStatus
from d1_records.store import RecordStore

pytestmark = pytest.mark.unit


class TestRecordStoreRoundTrip:
    def test_empty_store(self, record_store):
        assert record_store.get_all() == []
        assert record_store.count() == 0

    def test_round_trip_without_photos(self, record_store, sample_record):
        record_store.save(sample_record)

        assert record_store.get_all() == [sample_record]

    def test_round_trip_with_photos(self, record_store, make_record, photo_uri):
        record = make_record(photos=[photo_uri, photo_uri])

        record_store.save(record)

        loaded = record_store.get(record.id)
        assert loaded == record
        assert loaded.photos == [photo_uri, photo_uri]

    def test_get_missing_raises(self, record_store):
        with pytest.raises(NotFoundError):
            record_store.get("nope")

    def test_save_requires_identifier(self, record_store):
        with pytest.raises(ValidationGap):
            record_store.save(ReportRecord(id=""))

    def test_durable_across_store_instances(self, db_engine, sample_record):
        RecordStore(engine=db_engine).save(sample_record)

        assert RecordStore(engine=db_engine).get_all() == [sample_record]


class TestLastWriteWins:
    def test_replace_keeps_single_entry(self, record_store, sample_record):
        record_store.save(sample_record)
        updated = sample_record.model_copy(update={"title": "Program Membaca Perdana"})

        record_store.save(updated)

        records = record_store.get_all()
        assert len(records) == 1
        assert records[0].title == "Program Membaca Perdana"

    def test_replace_keeps_insertion_position(self, record_store, make_record):
        first, second, third = make_record(), make_record(), make_record()
        for record in (first, second, third):
            record_store.save(record)

        record_store.save(first.model_copy(update={"status": ReportStatus.FINALIZED}))

        assert [r.id for r in record_store.get_all()] == [first.id, second.id, third.id]
        assert record_store.get(first.id).status == ReportStatus.FINALIZED

    def test_insertion_order_not_created_at_order(self, record_store, make_record):
        newer = make_record(created_at=2000)
        older = make_record(created_at=1000)

        record_store.save(newer)
        record_store.save(older)

        assert [r.id for r in record_store.get_all()] == [newer.id, older.id]

    def test_delete(self, record_store, sample_record):
        record_store.save(sample_record)

        assert record_store.delete(sample_record.id) is True
        assert record_store.delete(sample_record.id) is False
        assert record_store.count() == 0


class TestStoreFailures:
    def test_unreadable_row_skipped(self, record_store, db_engine, make_record):
        good, bad = make_record(), make_record()
        record_store.save(good)
        record_store.save(bad)

        with db_engine.begin() as conn:
            conn.execute(
                text("UPDATE opr_reports SET payload = :payload WHERE id = :id"),
                {"payload": '{"id": "x", "schema_version": 99}', "id": bad.id},
            )

        assert record_store.get_all() == [good]
        with pytest.raises(NotFoundError):
            record_store.get(bad.id)

    def test_write_error_is_storage_failure(self, record_store, sample_record):
        with patch("d1_records.store.session_scope", side_effect=OperationalError("INSERT", {}, Exception("disk full"))):
            with pytest.raises(StorageFailure) as exc_info:
                record_store.save(sample_record)

        assert exc_info.value.details["operation"] == "save"
        assert exc_info.value.details["record_id"] == sample_record.id

    def test_read_error_is_storage_failure(self, record_store):
        with patch("d1_records.store.session_scope", side_effect=OSError("disk gone")):
            with pytest.raises(StorageFailure):
                record_store.get_all()

    def test_failed_write_does_not_change_store(self, record_store, sample_record):
        record_store.save(sample_record)
        changed = sample_record.model_copy(update={"title": "Lain"})

        with patch("d1_records.store.session_scope", side_effect=OSError("read-only")):
            with pytest.raises(StorageFailure):
                record_store.save(changed)

        assert record_store.get(sample_record.id).title == "Program Membaca"
