"""
Tests for the OPR exception hierarchy
"""

import pytest

from core.exceptions import (
    DatabaseError,
    ExternalAPIError,
    HandoffFailure,
    InvalidTransitionError,
    NotFoundError,
    OperationInProgressError,
    OPRError,
    RenderFailure,
    StorageFailure,
    TransportFailure,
    ValidationError,
    ValidationGap,
)

pytestmark = pytest.mark.unit


class TestOPRError:
    def test_defaults(self):
        error = OPRError("Something broke")

        assert error.message == "Something broke"
        assert error.error_code == "OPRError"
        assert error.details == {}
        assert error.status_code == 500
        assert str(error) == "Something broke"

    def test_to_dict(self):
        error = OPRError("Bad", error_code="BAD", details={"a": 1}, status_code=418)

        assert error.to_dict() == {"error": "BAD", "message": "Bad", "details": {"a": 1}}


class TestTaxonomy:
    def test_validation_gap_is_validation_error(self):
        error = ValidationGap("Report identifier is required", field="id")

        assert isinstance(error, ValidationError)
        assert error.error_code == "VALIDATION_GAP"
        assert error.status_code == 400
        assert error.details == {"field": "id"}

    def test_not_found(self):
        error = NotFoundError("Report", "123")

        assert error.status_code == 404
        assert error.message == "Report not found: 123"

    def test_transport_failure_is_external_api_error(self):
        error = TransportFailure("HTTP 500", status_code=500, response_body="boom")

        assert isinstance(error, ExternalAPIError)
        assert error.error_code == "TRANSPORT_FAILURE"
        assert error.status_code == 502
        assert error.details["provider"] == "sync_gateway"
        assert error.details["api_status_code"] == 500
        assert error.message == "sync_gateway API error: HTTP 500"

    def test_storage_failure_is_database_error(self):
        error = StorageFailure("disk full", operation="save", record_id="1")

        assert isinstance(error, DatabaseError)
        assert error.error_code == "STORAGE_FAILURE"
        assert error.details == {"operation": "save", "record_id": "1"}

    def test_render_failure_phase(self):
        error = RenderFailure("capture failed", phase="snapshot")

        assert error.error_code == "RENDER_FAILURE"
        assert error.details["phase"] == "snapshot"

    def test_handoff_failure_target(self):
        error = HandoffFailure("no clipboard", target="clipboard")

        assert error.details == {"target": "clipboard"}

    def test_invalid_transition_message(self):
        error = InvalidTransitionError("export", "editing", "previewing")

        assert error.status_code == 409
        assert error.message == "Cannot export while in editing (requires previewing)"

    def test_operation_in_progress(self):
        error = OperationInProgressError("42", channel="remote")

        assert error.error_code == "BUSY"
        assert error.details == {"record_id": "42", "channel": "remote"}
