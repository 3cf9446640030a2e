import pytest

from infrastructure.operations import OperationResult, OperationStatus


@pytest.mark.unit
class TestOperationResult:
    def test_success(self):
        res = OperationResult.success(data={"a": 1})

        assert res.is_success
        assert res.data == {"a": 1}
        assert res.message == "ok"

    def test_transient_error(self):
        res = OperationResult.transient_error("slow down", "ThrottlingException", 3)

        assert res.status == OperationStatus.TRANSIENT_ERROR
        assert res.retry_after == 3
        assert not res.is_success

    def test_permanent_error(self):
        res = OperationResult.permanent_error("bad", "ValidationException")

        assert res.status == OperationStatus.PERMANENT_ERROR
        assert res.error_code == "ValidationException"

    def test_cancelled(self):
        res = OperationResult.cancelled("deadline passed", "DEADLINE_EXCEEDED")

        assert res.is_cancelled
        assert res.error_code == "DEADLINE_EXCEEDED"

    def test_error_with_explicit_status(self):
        res = OperationResult.error(OperationStatus.NOT_FOUND, "missing")

        assert res.status == OperationStatus.NOT_FOUND
        assert not res.is_cancelled
